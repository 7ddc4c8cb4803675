import threading
import time

import pytest
import requests
from requests.structures import CaseInsensitiveDict
from requests.utils import get_encoding_from_headers


class FakeResponse:
    def __init__(self, url, status_code=200, body=b"", content_type="application/octet-stream"):
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.url = url
        self.status_code = status_code
        self.content = body
        self.headers = CaseInsensitiveDict({"Content-Type": content_type})
        # same rule as requests: text/* without a charset means ISO-8859-1
        self.encoding = get_encoding_from_headers(self.headers)
        self.closed = False

    @property
    def text(self):
        return self.content.decode(self.encoding or "utf-8", errors="replace")

    def iter_content(self, chunk_size=1):
        for i in range(0, len(self.content), chunk_size):
            yield self.content[i : i + chunk_size]

    def close(self):
        self.closed = True


class FakeSession:
    """Stands in for requests.Session: canned routes, recorded calls."""

    def __init__(self, delay=0.0):
        self.routes = {}
        self.calls = []
        self.delay = delay
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def add(self, url, body=b"", status=200, content_type="application/octet-stream"):
        self.routes[url] = (status, body, content_type)

    def fail(self, url, exc):
        self.routes[url] = exc

    def get(self, url, timeout=None, stream=False, **kwargs):
        with self._lock:
            self.calls.append(url)
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
            route = self.routes.get(url)
            if route is None:
                return FakeResponse(url, 404, b"not found", "text/plain")
            if isinstance(route, Exception):
                raise route
            status, body, content_type = route
            return FakeResponse(url, status, body, content_type)
        finally:
            with self._lock:
                self.in_flight -= 1

    def count(self, url):
        return self.calls.count(url)


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def timeout_error():
    return requests.Timeout("read timed out")


@pytest.fixture
def slow_session():
    return FakeSession(delay=0.05)
