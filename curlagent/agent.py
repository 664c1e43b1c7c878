"""
OpenURI-style access to URLs on top of a transfer engine (libcurl by default).
"""
import logging
import os
from typing import Any, Callable, Dict, Mapping, Optional

from .charset import detect_charset
from .config import config
from .curl_engine import CurlEngine
from .engine import TransferEngine
from .errors import ArgumentError
from .httpx_engine import HttpxEngine
from .options import ProgressRelay, TransferOptions
from .result import TransferResult, parse_base_uri

logger = logging.getLogger(__name__)

ENGINES = {
    'curl': CurlEngine,
    'httpx': HttpxEngine,
}

DEFAULT_USER_AGENT = ('Mozilla/5.0 (Windows; U; Windows NT 5.1; en-US; rv:1.9.0.6) '
                      'Gecko/2009011913 Firefox/3.0.6')
DEFAULT_MAX_REDIRECTS = 2
DEFAULT_CONNECT_TIMEOUT = 5
DEFAULT_TIMEOUT = 30

READ_ONLY_MODES = (None, 'r', 'rb', os.O_RDONLY)

EngineFactory = Callable[[str], TransferEngine]


def engine_class(name: str) -> EngineFactory:
    try:
        return ENGINES[name]
    except KeyError:
        raise ArgumentError(f"unknown transfer engine {name!r}, expected one of {sorted(ENGINES)}")


class CurlAgent:
    """
    A single transfer of ``url``.

    ``options`` takes the OpenURI open options (see RECOGNIZED_OPTIONS), which
    are translated to engine settings. EngineOption keys set the engine
    directly, for example ``{EngineOption.TIMEOUT: 10}``, and every other
    string key is sent as a request header, for example
    ``{'User-Agent': 'curl'}``.
    """

    def __init__(self, url: str, options: Optional[Mapping] = None,
                 engine_factory: EngineFactory = None, settings: Dict[str, Any] = None):
        if settings is None:
            settings = config.agent
        if isinstance(options, TransferOptions):
            transfer_options = options
        else:
            transfer_options = TransferOptions.from_mapping(options)

        if engine_factory is None:
            engine_factory = engine_class(settings.get('engine', 'curl'))

        self.url = url
        self._engine = engine_factory(url)
        self._performed = False

        self._apply_defaults(settings)
        self._apply_options(transfer_options)

    def _apply_defaults(self, settings: Dict[str, Any]):
        engine = self._engine
        engine.headers['User-Agent'] = settings.get('user_agent', DEFAULT_USER_AGENT)
        engine.follow_location = settings.get('follow_location', True)
        engine.max_redirects = settings.get('max_redirects', DEFAULT_MAX_REDIRECTS)
        engine.enable_cookies = settings.get('enable_cookies', True)
        engine.connect_timeout = settings.get('connect_timeout', DEFAULT_CONNECT_TIMEOUT)
        engine.timeout = settings.get('timeout', DEFAULT_TIMEOUT)

    def _apply_options(self, options: TransferOptions):
        engine = self._engine
        if options.proxy is not None:
            engine.proxy_url = options.proxy
        if options.proxy_http_basic_authentication is not None:
            engine.proxypwd = options.proxy_http_basic_authentication
        if options.http_basic_authentication is not None:
            engine.userpwd = options.http_basic_authentication
        if options.wants_progress:
            engine.on_progress = ProgressRelay(
                lambda: engine.downloaded_content_length,
                on_content_length=options.content_length_proc,
                on_progress=options.progress_proc,
            )
        if options.read_timeout is not None:
            engine.timeout = options.read_timeout
        if options.ssl_ca_cert is not None:
            engine.cacert = options.ssl_ca_cert
        # TODO: map VERIFY_PEER separately once engines expose peer verification
        if options.verify_host is not None:
            engine.ssl_verify_host = options.verify_host
        if options.redirect:
            engine.follow_location = True

        for option, value in options.engine_options.items():
            engine.configure(option, value)

        engine.headers.update(options.headers)

    def perform(self):
        """Run the transfer. Later calls do nothing once it has succeeded."""
        if self._performed:
            return

        logger.debug(f"Transfer started: {self.url}")
        self._engine.perform()
        self._performed = True
        self._engine.close()
        logger.debug(f"Transfer completed: {self.url} -> {self._engine.effective_url} "
                     f"(status {self._engine.response_code}, {len(self._engine.body)} bytes)")

    @property
    def performed(self) -> bool:
        return self._performed

    @property
    def headers(self) -> Dict[str, str]:
        return self._engine.headers

    @property
    def body(self) -> bytes:
        return self._engine.body

    @property
    def header_str(self) -> str:
        return self._engine.header_str

    @property
    def content_type(self) -> Optional[str]:
        return self._engine.content_type

    @property
    def response_code(self) -> int:
        return self._engine.response_code

    @property
    def effective_url(self) -> Optional[str]:
        return self._engine.effective_url

    @property
    def downloaded_content_length(self) -> Optional[int]:
        return self._engine.downloaded_content_length

    @property
    def charset(self) -> str:
        """Charset of the response, performing the transfer first if needed."""
        self.perform()
        return detect_charset(self.content_type, self.body)

    @classmethod
    def open(cls, name: str, *rest, callback: Callable[[TransferResult], Any] = None,
             engine_factory: EngineFactory = None, settings: Dict[str, Any] = None, **kwargs):
        """
        Open ``name`` and return a TransferResult, or ``callback(result)`` when
        a callback is given.

        Accepts the legacy ``open(name, mode, perm, options)`` form, where mode
        must be read-only. Keyword arguments are merged into the options:

            open('http://www.example.com/', {'User-Agent': 'curl'}, read_timeout=10)
        """
        mode, perm, rest = scan_open_optional_arguments(*rest)
        options = rest.pop(0) if rest and isinstance(rest[0], Mapping) else None
        if rest:
            raise ArgumentError("extra arguments")

        if mode not in READ_ONLY_MODES:
            raise ArgumentError(f"invalid access mode {mode} (resource is read only.)")

        if kwargs:
            options = {**(options or {}), **kwargs}

        agent = cls(name, options, engine_factory=engine_factory, settings=settings)
        agent.perform()

        result = TransferResult(
            agent.body,
            agent.header_str,
            status=(agent.response_code, ''),
            base_uri=parse_base_uri(agent.effective_url),
        )
        if callback is not None:
            return callback(result)
        return result


def scan_open_optional_arguments(*rest):
    """Peel an optional mode (str or int) and permission (int) off the positional arguments."""
    rest = list(rest)
    mode = perm = None
    if rest and isinstance(rest[0], (str, int)):
        mode = rest.pop(0)
        if rest and isinstance(rest[0], int):
            perm = rest.pop(0)
    return mode, perm, rest
