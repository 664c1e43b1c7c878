"""
Charset sniffing from a Content-Type value and the head of an HTML body.
"""
import re
from typing import Optional

CONTENT_TYPE_CHARSET = re.compile(r'charset\s*=\s*([a-zA-Z0-9-]+)', re.IGNORECASE)
META_HTTP_EQUIV = re.compile(
    rb'<meta.*http-equiv\s*=\s*[\'"]?Content-Type[\'"]?.*?>',
    re.IGNORECASE | re.DOTALL,
)
META_CONTENT_CHARSET = re.compile(
    rb'content=[\'"]text/html.*?charset=(.*?)[\'"]',
    re.IGNORECASE | re.DOTALL,
)

# Only the head of the body is scanned for a meta tag
SNIFF_LIMIT = 1000


def detect_charset(content_type: Optional[str], body: Optional[bytes]) -> str:
    """Return the lower-cased charset, or an empty string when none is declared.

    The Content-Type value wins over the body. No default encoding is assumed.
    """
    match = CONTENT_TYPE_CHARSET.search(content_type or '')
    if match:
        return match.group(1).lower()

    if body:
        tag = META_HTTP_EQUIV.search(body[:SNIFF_LIMIT])
        if tag:
            declared = META_CONTENT_CHARSET.search(tag.group(0))
            if declared:
                return declared.group(1).decode('ascii', errors='ignore').lower()

    return ''
