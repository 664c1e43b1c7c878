"""
The transfer engine surface the agent relies on. Engines own the actual
network transfer; the agent only sets the attributes below, calls
perform() once and reads the results back.
"""
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Tuple

from .options import EngineOption

ProgressCallback = Callable[[float, float, float, float], Any]


class TransferEngine(ABC):
    """One-shot handle for a single transfer of ``url``."""

    def __init__(self, url: str):
        self.url = url

        # Request configuration
        self.headers: Dict[str, str] = {}
        self.follow_location = False
        self.max_redirects: Optional[int] = None
        self.enable_cookies = False
        self.connect_timeout: Optional[float] = None
        self.timeout: Optional[float] = None
        self.proxy_url: Optional[str] = None
        self.proxypwd: Optional[str] = None
        self.userpwd: Optional[str] = None
        self.cacert: Optional[str] = None
        self.ssl_verify_host = True
        self.on_progress: Optional[ProgressCallback] = None

        # Populated by perform()
        self.body = b''
        self.header_str = ''
        self.content_type: Optional[str] = None
        self.response_code = 0
        self.effective_url: Optional[str] = None

    def configure(self, option: EngineOption, value):
        setattr(self, option.value, value)

    @property
    @abstractmethod
    def downloaded_content_length(self) -> Optional[int]:
        """Total download size if the engine knows it at this moment, else None."""

    @abstractmethod
    def perform(self):
        """Run the transfer, blocking until the body is fully buffered."""

    def close(self):
        """Release the underlying handle. Results stay readable."""


def split_credentials(credentials: Optional[str]) -> Optional[Tuple[str, str]]:
    """Split a ``user:password`` string as curl does, on the first colon."""
    if credentials is None:
        return None
    user, _, password = credentials.partition(':')
    return user, password
