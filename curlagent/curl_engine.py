"""
libcurl transfer engine backed by pycurl.
"""
import logging
from io import BytesIO
from typing import List, Optional

import pycurl

from .engine import TransferEngine

logger = logging.getLogger(__name__)


class CurlEngine(TransferEngine):
    def __init__(self, url: str):
        super().__init__(url)
        self._curl = pycurl.Curl()
        self._buffer = BytesIO()
        self._header_lines: List[str] = []
        self._dl_total: Optional[int] = None

    @property
    def downloaded_content_length(self) -> Optional[int]:
        return self._dl_total

    def _apply_options(self):
        curl = self._curl
        curl.setopt(pycurl.URL, self.url)
        curl.setopt(pycurl.HTTPHEADER, [f"{k}: {v}" for k, v in self.headers.items()])
        curl.setopt(pycurl.FOLLOWLOCATION, bool(self.follow_location))
        if self.max_redirects is not None:
            curl.setopt(pycurl.MAXREDIRS, int(self.max_redirects))
        if self.enable_cookies:
            # An empty cookie file turns on the in-memory cookie engine
            curl.setopt(pycurl.COOKIEFILE, '')
        if self.connect_timeout is not None:
            curl.setopt(pycurl.CONNECTTIMEOUT_MS, int(self.connect_timeout * 1000))
        if self.timeout is not None:
            curl.setopt(pycurl.TIMEOUT_MS, int(self.timeout * 1000))
        if self.proxy_url:
            curl.setopt(pycurl.PROXY, self.proxy_url)
        if self.proxypwd:
            curl.setopt(pycurl.PROXYUSERPWD, self.proxypwd)
        if self.userpwd:
            curl.setopt(pycurl.USERPWD, self.userpwd)
        if self.cacert:
            curl.setopt(pycurl.CAINFO, self.cacert)
        curl.setopt(pycurl.SSL_VERIFYHOST, 2 if self.ssl_verify_host else 0)

        curl.setopt(pycurl.WRITEDATA, self._buffer)
        curl.setopt(pycurl.HEADERFUNCTION, self._on_header)
        if self.on_progress is not None:
            curl.setopt(pycurl.NOPROGRESS, False)
            curl.setopt(pycurl.XFERINFOFUNCTION, self._on_xferinfo)

    def _on_header(self, line: bytes):
        text = line.decode('iso-8859-1').rstrip('\r\n')
        # Each status line starts a new response; keep only the last one
        if text.startswith('HTTP/'):
            self._header_lines = []
        if text:
            self._header_lines.append(text)

    def _on_xferinfo(self, dl_total, dl_now, ul_total, ul_now):
        if dl_total > 0:
            self._dl_total = int(dl_total)
        self.on_progress(dl_total, dl_now, ul_total, ul_now)

    def perform(self):
        # Each attempt starts from an empty body and header block
        self._buffer = BytesIO()
        self._header_lines = []
        self._dl_total = None
        self._apply_options()
        logger.debug(f"curl perform: {self.url}")
        self._curl.perform()

        curl = self._curl
        self.body = self._buffer.getvalue()
        self.header_str = '\r\n'.join(self._header_lines)
        self.content_type = curl.getinfo(pycurl.CONTENT_TYPE)
        self.response_code = curl.getinfo(pycurl.RESPONSE_CODE)
        self.effective_url = curl.getinfo(pycurl.EFFECTIVE_URL)
        length = curl.getinfo(pycurl.CONTENT_LENGTH_DOWNLOAD)
        if length is not None and length >= 0:
            self._dl_total = int(length)

    def close(self):
        self._curl.close()
