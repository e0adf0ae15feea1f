"""Shared test fixtures: fake aiohttp sessions and a controllable clock."""
from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Iterable
from unittest.mock import AsyncMock, MagicMock

import pytest

from classeviva.api import ClasseVivaAPI

# Clock value matching the ``release`` of LOGIN_RESPONSE
START = datetime(2024, 1, 10, 9, 0, tzinfo=timezone.utc)

LOGIN_RESPONSE = {
    "ident": "S1234567",
    "firstName": "Mario",
    "lastName": "Rossi",
    "token": "tok123",
    "release": "2024-01-10T10:00:00+01:00",
    "expire": "2024-01-10T11:30:00+01:00",
}


class FakeClock:
    """Callable returning a fixed, manually advanced time."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def make_response(status: int = 200, payload: Any = None, raw: bytes = b"") -> MagicMock:
    """Return an async context manager standing in for ``aiohttp.ClientResponse``."""
    ctx = MagicMock()
    ctx.__aenter__ = AsyncMock(return_value=ctx)
    ctx.__aexit__ = AsyncMock(return_value=False)
    ctx.status = status
    ctx.json = AsyncMock(return_value=payload)
    ctx.read = AsyncMock(return_value=raw)
    ctx.text = AsyncMock(return_value=json.dumps(payload))
    return ctx


def make_session(
    get: Iterable[MagicMock] = (), post: Iterable[MagicMock] = ()
) -> MagicMock:
    """Return a session whose get()/post() hand out *get* / *post* in order."""
    session = MagicMock()
    session.get = MagicMock(side_effect=list(get))
    session.post = MagicMock(side_effect=list(post))
    return session


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(START)


@pytest.fixture
def logged_in_api(clock: FakeClock) -> Callable[..., ClasseVivaAPI]:
    """Factory for a client that already holds a valid token."""

    def _factory(get: Iterable[MagicMock] = (), post: Iterable[MagicMock] = ()) -> ClasseVivaAPI:
        api = ClasseVivaAPI("S1234567", "secret", make_session(get, post), clock=clock)
        api.auth.record_authentication("tok", clock(), None)
        return api

    return _factory
