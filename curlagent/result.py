import io
import re
from functools import cached_property
from typing import Dict, Optional, Tuple
from urllib.parse import ParseResult, urlparse

from .charset import detect_charset

HEADER_LINE_BREAK = re.compile(r'\r?\n')
HEADER_SEPARATOR = re.compile(r':\s+')


class TransferResult(io.BytesIO):
    """
    Read-only, seekable view over a fully buffered response body.

    Mirrors the OpenURI metadata accessors: ``status``, ``base_uri`` and
    ``meta``, plus ``content_type`` and ``charset`` derived from them.
    """

    def __init__(self, body: bytes, header_str: str,
                 status: Tuple[int, str] = (0, ''), base_uri: Optional[ParseResult] = None):
        super().__init__(body or b'')
        self.header_str = header_str or ''
        # (code, message); the engines do not report the reason phrase
        self.status = status
        # Base of relative URIs in the body, may differ from the requested URL after redirects
        self.base_uri = base_uri

    def writable(self) -> bool:
        return False

    def write(self, data):
        raise io.UnsupportedOperation("transfer result is read only")

    def writelines(self, lines):
        raise io.UnsupportedOperation("transfer result is read only")

    def truncate(self, size=None):
        raise io.UnsupportedOperation("transfer result is read only")

    @cached_property
    def meta(self) -> Dict[str, Optional[str]]:
        """Header fields keyed by lower-cased name, status line excluded.

        A line without a value separator maps to None.
        """
        fields = {}
        for line in HEADER_LINE_BREAK.split(self.header_str)[1:]:
            if not line:
                continue
            parts = HEADER_SEPARATOR.split(line, maxsplit=1)
            fields[parts[0].lower()] = parts[1] if len(parts) == 2 else None
        return fields

    @property
    def content_type(self) -> Optional[str]:
        return self.meta.get('content-type')

    @cached_property
    def charset(self) -> str:
        return detect_charset(self.content_type, self.getvalue())


def parse_base_uri(url: Optional[str]) -> Optional[ParseResult]:
    """Parse the effective URL, returning None when it cannot be parsed."""
    if not url:
        return None
    try:
        return urlparse(url)
    except ValueError:
        return None
