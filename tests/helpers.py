from __future__ import annotations

import json

import requests


def make_response(status: int = 200, body=None, headers: dict | None = None, url: str = "https://example.test/") -> requests.Response:
    r = requests.Response()
    r.status_code = status
    r.reason = "OK" if status < 400 else "Error"
    r.url = url
    r.encoding = "utf-8"
    r._content = b"" if body is None else json.dumps(body).encode("utf-8")
    r.headers.update(headers or {})
    return r


class FakeSession:
    """Stands in for requests.Session: replays queued responses, records calls."""

    def __init__(self, *responses) -> None:
        self.queue = list(responses)
        self.calls: list[dict] = []

    def _next(self, method: str, url: str, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        if not self.queue:
            raise AssertionError(f"unexpected {method} {url}")
        item = self.queue.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def get(self, url, **kwargs):
        return self._next("GET", url, **kwargs)

    def request(self, method, url, **kwargs):
        return self._next(method, url, **kwargs)
