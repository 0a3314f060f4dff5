"""Shared fixtures: fake HTTP session, fake clock and document builders."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Union

import pytest

from parity.client import FigmaClient

API_BASE = "https://api.figma.com/v1"


class FakeResponse:
    def __init__(
        self,
        status_code: int = 200,
        payload: Any = None,
        content: bytes = b"",
        text: str = "",
        reason: str = "",
    ) -> None:
        self.status_code = status_code
        self._payload = payload
        self.content = content
        self.text = text
        self.reason = reason

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


Handler = Union[FakeResponse, Callable[[str, Dict[str, str]], FakeResponse]]


class FakeSession:
    """Stands in for ``requests.Session``; routes GETs by exact URL."""

    def __init__(self, routes: Optional[Dict[str, Handler]] = None) -> None:
        self.routes: Dict[str, Handler] = dict(routes or {})
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append(
            {"url": url, "params": dict(params or {}), "headers": dict(headers or {}), "timeout": timeout}
        )
        handler = self.routes.get(url)
        if handler is None:
            return FakeResponse(404, text=f"No route for {url}")
        if callable(handler):
            return handler(url, dict(params or {}))
        return handler

    def calls_to(self, url: str) -> List[Dict[str, Any]]:
        return [call for call in self.calls if call["url"] == url]

    def close(self) -> None:
        self.closed = True


class FakeClock:
    """Monotonic clock whose ``sleep`` advances time instantly."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def node(
    node_id: str,
    name: str,
    node_type: str,
    children: Optional[List[Dict[str, Any]]] = None,
    bbox: Optional[tuple] = None,
    **extra: Any,
) -> Dict[str, Any]:
    data: Dict[str, Any] = {"id": node_id, "name": name, "type": node_type}
    if children is not None:
        data["children"] = children
    if bbox is not None:
        x, y, width, height = bbox
        data["absoluteBoundingBox"] = {"x": x, "y": y, "width": width, "height": height}
    data.update(extra)
    return data


def file_payload(document: Dict[str, Any], **extra: Any) -> Dict[str, Any]:
    payload = {
        "name": "Design",
        "lastModified": "2024-01-01T00:00:00Z",
        "version": "1",
        "document": document,
    }
    payload.update(extra)
    return payload


def image_handler(url_for: Callable[[str], Optional[str]]):
    """Answer image export calls with ``url_for(id)`` for each requested id."""

    def handler(url: str, params: Dict[str, str]) -> FakeResponse:
        images = {}
        for node_id in params["ids"].split(","):
            image_url = url_for(node_id)
            if image_url is not None:
                images[node_id] = image_url
        return FakeResponse(payload={"err": None, "images": images})

    return handler


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_client(fake_session):
    def _make(**kwargs: Any) -> FigmaClient:
        kwargs.setdefault("tier1_requests_per_minute", 60_000)
        kwargs.setdefault("tier2_requests_per_minute", 60_000)
        return FigmaClient("test-token", session=fake_session, **kwargs)

    return _make
