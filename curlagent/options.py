"""
Option vocabulary accepted by open() and how it splits into engine
configuration, pass-through engine options and request headers.
"""
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ArgumentError

# OpenURI open options, consumed by configuration and never sent as headers
RECOGNIZED_OPTIONS = (
    'proxy', 'proxy_http_basic_authentication', 'http_basic_authentication',
    'content_length_proc', 'progress_proc',
    'read_timeout',
    'ssl_ca_cert', 'ssl_verify_mode',
    'ftp_active_mode',
    'redirect',
)


class EngineOption(Enum):
    """Engine settings a caller may set directly, keyed by engine attribute."""
    FOLLOW_LOCATION = 'follow_location'
    MAX_REDIRECTS = 'max_redirects'
    ENABLE_COOKIES = 'enable_cookies'
    CONNECT_TIMEOUT = 'connect_timeout'
    TIMEOUT = 'timeout'
    PROXY_URL = 'proxy_url'
    PROXYPWD = 'proxypwd'
    USERPWD = 'userpwd'
    CACERT = 'cacert'
    SSL_VERIFY_HOST = 'ssl_verify_host'


class TransferOptions(BaseModel):
    """Validated form of an open() option mapping."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    proxy: Optional[str] = None
    proxy_http_basic_authentication: Optional[str] = None
    http_basic_authentication: Optional[str] = None
    content_length_proc: Optional[Callable[[int], Any]] = None
    progress_proc: Optional[Callable[[int], Any]] = None
    read_timeout: Optional[float] = None
    ssl_ca_cert: Optional[str] = None
    ssl_verify_mode: Optional[int] = None
    # No engine knob exists for FTP active mode; accepted and ignored
    ftp_active_mode: Any = None
    redirect: Any = None

    engine_options: Dict[EngineOption, Any] = Field(default_factory=dict)
    headers: Dict[str, str] = Field(default_factory=dict)

    @field_validator('proxy', 'proxy_http_basic_authentication',
                     'http_basic_authentication', 'ssl_ca_cert', mode='before')
    @classmethod
    def _to_str(cls, value):
        return None if value is None else str(value)

    @field_validator('headers', mode='before')
    @classmethod
    def _header_values_to_str(cls, value):
        return {k: str(v) for k, v in value.items()}

    @classmethod
    def from_mapping(cls, options: Optional[Mapping] = None) -> 'TransferOptions':
        """Split a mixed option mapping into recognized options, engine options and headers.

        Plain string keys outside RECOGNIZED_OPTIONS become headers, EngineOption
        keys are kept for the engine; any other key type is rejected.
        """
        recognized: Dict[str, Any] = {}
        engine_options: Dict[EngineOption, Any] = {}
        headers: Dict[str, Any] = {}

        for key, value in (options or {}).items():
            if isinstance(key, EngineOption):
                engine_options[key] = value
            elif isinstance(key, str):
                if key in RECOGNIZED_OPTIONS:
                    # False leaves a recognized option unset, like None
                    if value is not False:
                        recognized[key] = value
                else:
                    headers[key] = value
            else:
                raise ArgumentError(f"unsupported option key {key!r}")

        try:
            return cls(**recognized, engine_options=engine_options, headers=headers)
        except ValidationError as e:
            raise ArgumentError(str(e)) from e

    @property
    def wants_progress(self) -> bool:
        return self.content_length_proc is not None or self.progress_proc is not None

    @property
    def verify_host(self) -> Optional[bool]:
        """Host-verification flag derived from ssl_verify_mode, None when unset."""
        if self.ssl_verify_mode is None:
            return None
        return self.ssl_verify_mode != 0


class RelayState(Enum):
    PENDING = 'pending'
    FIRED = 'fired'


class ProgressRelay:
    """
    Single progress callback combining content_length_proc and progress_proc.

    The content-length callback is a one-shot: it stays PENDING until a tick
    arrives while the engine knows the total size, then moves to FIRED and is
    never called again.
    """

    def __init__(self, content_length: Callable[[], Optional[int]],
                 on_content_length: Callable[[int], Any] = None,
                 on_progress: Callable[[int], Any] = None):
        self._content_length = content_length
        self._on_content_length = on_content_length
        self._on_progress = on_progress
        self.state = RelayState.PENDING if on_content_length else RelayState.FIRED

    def __call__(self, dl_total, dl_now, ul_total, ul_now):
        if self.state is RelayState.PENDING:
            total = self._content_length()
            if total is not None:
                self.state = RelayState.FIRED
                self._on_content_length(total)

        if self._on_progress is not None:
            self._on_progress(dl_now)
