"""
curlagent: OpenURI-style open() serviced by libcurl.
"""
from .agent import CurlAgent, ENGINES
from .engine import TransferEngine
from .errors import ArgumentError, CurlAgentError
from .options import EngineOption, TransferOptions
from .result import TransferResult

open = CurlAgent.open

__all__ = [
    "open",
    "CurlAgent",
    "ENGINES",
    "TransferEngine",
    "TransferResult",
    "TransferOptions",
    "EngineOption",
    "ArgumentError",
    "CurlAgentError",
]
