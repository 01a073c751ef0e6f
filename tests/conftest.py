from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Callable, Dict, List

import pytest
import requests


class DummyResponse:
    def __init__(self, text: str = "", status_code: int = 200, payload: Any = None) -> None:
        self.text = text
        self.status_code = status_code
        self._payload = payload

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")

    def json(self) -> Any:
        if self._payload is None:
            raise requests.JSONDecodeError("Expecting value", self.text, 0)
        return self._payload


def make_session(routes: Dict[str, Any], calls: List[str] | None = None) -> SimpleNamespace:
    """Return a fake session answering GETs from ``routes``.

    A route value may be a :class:`DummyResponse` or an exception instance to raise.
    Unknown URLs raise ``requests.ConnectionError``.
    """

    def fake_get(url, headers=None, timeout=None, allow_redirects=True):
        if calls is not None:
            calls.append(url)
        answer = routes.get(url)
        if answer is None:
            raise requests.ConnectionError(f"no route to {url}")
        if isinstance(answer, Exception):
            raise answer
        return answer

    return SimpleNamespace(get=fake_get)


@pytest.fixture
def response_factory() -> Callable[..., DummyResponse]:
    return DummyResponse


@pytest.fixture
def session_factory() -> Callable[..., SimpleNamespace]:
    return make_session


@pytest.fixture
def instance_payload() -> Dict[str, Any]:
    return {
        "domain": "neodb.social",
        "title": "NeoDB",
        "version": "4.1.0",
        "description": "a place for reviews",
        "usage": {"users": {"active_month": 1200}},
        "thumbnail": {"url": "/media/thumb.png", "blurhash": "UABC"},
        "registrations": {"enabled": True, "approval_required": True},
        "languages": ["zh", "en"],
    }
