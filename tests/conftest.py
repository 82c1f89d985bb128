"""Fixtures for the SimpliSafe tests."""

from __future__ import annotations

from http.cookies import SimpleCookie

import pytest

from custom_components.simplisafe_mobile.api import (
    SimpliSafeRequest,
    SimpliSafeSession,
)
from custom_components.simplisafe_mobile.base_station import SimpliSafeBaseStation
from custom_components.simplisafe_mobile.controller import (
    SimpliSafeController,
    SimpliSafeStatus,
)


class FakeHost:
    def __init__(self) -> None:
        self.sent: list[tuple[SimpliSafeRequest, SimpliSafeSession | None]] = []
        self.published: list[SimpliSafeBaseStation] = []
        self.notified: list[tuple[str, bool]] = []
        self.statuses: list[tuple[SimpliSafeStatus, str | None]] = []

    def send_request(self, request, session) -> None:
        self.sent.append((request, session))

    def publish_base_station(self, base_station) -> None:
        self.published.append(base_station)

    def notify_armed_changed(self, location_id, armed) -> None:
        self.notified.append((location_id, armed))

    def report_status(self, status, reason) -> None:
        self.statuses.append((status, reason))

    @property
    def requests(self) -> list[SimpliSafeRequest]:
        return [request for request, _ in self.sent]


class FakeResponse:
    def __init__(self, status: int, body: str | bytes, cookies: SimpleCookie) -> None:
        self.status = status
        self._body = body
        self.cookies = cookies

    async def text(self) -> str:
        if isinstance(self._body, bytes):
            return self._body.decode("utf-8")
        return self._body

    async def __aenter__(self) -> FakeResponse:
        return self

    async def __aexit__(self, *args) -> None:
        return None


class FakeHttpClient:
    def __init__(
        self, response: FakeResponse | None = None, error: Exception | None = None
    ) -> None:
        self._response = response
        self._error = error
        self.posts: list[dict] = []

    def post(self, url, *, data=None, cookies=None):
        self.posts.append({"url": url, "data": data, "cookies": cookies})
        if self._error is not None:
            raise self._error
        return self._response


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def controller(host: FakeHost) -> SimpliSafeController:
    return SimpliSafeController(host)
