"""
Transfer engine on top of httpx, for hosts where libcurl is not available.
"""
import logging
import ssl
import time
from io import BytesIO
from typing import Optional

import httpx

from .engine import TransferEngine, split_credentials

logger = logging.getLogger(__name__)


class HttpxEngine(TransferEngine):
    def __init__(self, url: str, transport: httpx.BaseTransport = None):
        super().__init__(url)
        self._transport = transport
        self._dl_total: Optional[int] = None

    @property
    def downloaded_content_length(self) -> Optional[int]:
        return self._dl_total

    def _ssl_context(self) -> ssl.SSLContext:
        context = ssl.create_default_context(cafile=self.cacert)
        if not self.ssl_verify_host:
            context.check_hostname = False
        return context

    def _client(self) -> httpx.Client:
        kwargs = {
            'follow_redirects': bool(self.follow_location),
            'timeout': httpx.Timeout(self.timeout, connect=self.connect_timeout),
            'verify': self._ssl_context(),
        }
        if self.max_redirects is not None:
            kwargs['max_redirects'] = int(self.max_redirects)
        if self.proxy_url:
            kwargs['proxy'] = httpx.Proxy(self.proxy_url, auth=split_credentials(self.proxypwd))
        if self._transport is not None:
            kwargs['transport'] = self._transport
        return httpx.Client(**kwargs)

    def perform(self):
        logger.debug(f"httpx perform: {self.url}")
        # httpx timeouts apply per operation; the overall limit is checked per chunk
        deadline = None if self.timeout is None else time.monotonic() + self.timeout
        with self._client() as client:
            with client.stream('GET', self.url, headers=self.headers,
                               auth=split_credentials(self.userpwd)) as response:
                length = response.headers.get('content-length', '')
                if length.isdigit():
                    self._dl_total = int(length)

                buffer = BytesIO()
                for chunk in response.iter_bytes():
                    buffer.write(chunk)
                    if deadline is not None and time.monotonic() > deadline:
                        raise httpx.TimeoutException(
                            f"Transfer exceeded {self.timeout}s", request=response.request)
                    if self.on_progress is not None:
                        self.on_progress(self._dl_total or 0, response.num_bytes_downloaded, 0, 0)

                self.body = buffer.getvalue()
                self.header_str = _header_block(response)
                self.content_type = response.headers.get('content-type')
                self.response_code = response.status_code
                self.effective_url = str(response.url)


def _header_block(response: httpx.Response) -> str:
    lines = [f"{response.http_version} {response.status_code} {response.reason_phrase}"]
    for name, value in response.headers.raw:
        lines.append(f"{name.decode('latin-1')}: {value.decode('latin-1')}")
    return '\r\n'.join(lines)
