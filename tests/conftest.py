"""Shared fakes for HTTP sessions."""

from typing import Any, Dict, List

import requests


class FakeResponse:
    """Minimal stand-in for ``requests.Response``."""

    def __init__(self, payload: Any = None, status_code: int = 200, text: str = ""):
        self._payload = payload
        self.status_code = status_code
        self.text = text

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """Replays queued responses per URL and records every call."""

    def __init__(self, responses: Dict[str, List[Any]] | None = None):
        self.responses = {url: list(items) for url, items in (responses or {}).items()}
        self.headers: Dict[str, str] = {}
        self.calls: List[tuple[str, str, Any]] = []

    def _next(self, url: str) -> FakeResponse:
        queue = self.responses.get(url)
        if not queue:
            raise requests.ConnectionError(f"no response queued for {url}")
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def get(self, url: str, params: Any = None, timeout: Any = None) -> FakeResponse:
        self.calls.append(("GET", url, params))
        return self._next(url)

    def post(self, url: str, json: Any = None, timeout: Any = None) -> FakeResponse:
        self.calls.append(("POST", url, json))
        return self._next(url)
