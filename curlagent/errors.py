"""
Errors raised by curlagent itself. Transfer failures are not wrapped:
they surface as the engine's own exceptions.
"""


class CurlAgentError(Exception):
    """Base class for curlagent errors."""


class ArgumentError(CurlAgentError, ValueError):
    """Invalid arguments passed to open() or the agent constructor."""
