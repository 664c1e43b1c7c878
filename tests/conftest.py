import pytest

from curlagent.engine import TransferEngine

HEADER_STR = "HTTP/1.1 200 OK\r\nContent-Type: text/plain\r\nServer: Apache"
URL = 'http://www.example.com/'


class FakeEngine(TransferEngine):
    """In-memory engine that records the name of every attribute assigned to it."""

    def __init__(self, url, body=b'test', header_str=HEADER_STR, content_type='text/plain',
                 response_code=200, effective_url=None, content_length=None):
        object.__setattr__(self, 'assigned', [])
        super().__init__(url)
        self._response = {
            'body': body,
            'header_str': header_str,
            'content_type': content_type,
            'response_code': response_code,
            'effective_url': effective_url or url,
        }
        self.content_length = content_length
        self.perform_calls = 0
        self.closed = False
        self.assigned.clear()

    def __setattr__(self, name, value):
        self.assigned.append(name)
        object.__setattr__(self, name, value)

    @property
    def downloaded_content_length(self):
        return self.content_length

    def perform(self):
        self.perform_calls += 1
        for name, value in self._response.items():
            object.__setattr__(self, name, value)

    def close(self):
        self.closed = True


class FakeEngineFactory:
    def __init__(self):
        self.created = []
        self.response = {}

    def __call__(self, url):
        engine = FakeEngine(url, **self.response)
        self.created.append(engine)
        return engine

    @property
    def engine(self) -> FakeEngine:
        return self.created[-1]


@pytest.fixture
def engines():
    return FakeEngineFactory()


@pytest.fixture
def url():
    return URL
