"""Per-account authentication state."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from .const import SESSION_LIFETIME
from .exceptions import ClasseVivaError, ErrorKind

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Default clock: the current time in UTC."""
    return datetime.now(tz=timezone.utc)


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """Parse an ISO-8601 timestamp from the API; naive values are UTC."""
    if value is None:
        return None
    parsed = value if isinstance(value, datetime) else datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class AuthSession:
    """Token plus a local estimate of how long it stays valid.

    The estimate is ``clock() - release < lifetime``. The server-declared
    ``expire`` is kept for callers but never consulted here.
    """

    def __init__(self, lifetime: int = SESSION_LIFETIME, clock: Clock | None = None) -> None:
        self.lifetime = lifetime
        self._clock = clock or utcnow
        self._token: str | None = None
        self.release: datetime | None = None
        self.expire: datetime | None = None

    def __repr__(self) -> str:
        return f"<AuthSession valid={self.is_valid()} release={self.release}>"

    def is_valid(self) -> bool:
        """Return ``True`` if a token exists and has not locally expired."""
        if self._token is None or self.release is None:
            return False
        elapsed = (self._clock() - self.release).total_seconds()
        return elapsed < self.lifetime

    def get_token(self) -> str:
        """Return the token, failing if it is missing or locally expired."""
        if self._token is None:
            raise ClasseVivaError(ErrorKind.TOKEN_MISSING, "Not logged in")
        if not self.is_valid():
            raise ClasseVivaError(ErrorKind.TOKEN_EXPIRED, "The token has expired")
        return self._token

    @property
    def token(self) -> str:
        return self.get_token()

    @property
    def stored_token(self) -> str | None:
        """The last token received, regardless of the local estimate."""
        return self._token

    def record_authentication(
        self,
        token: str,
        release: str | datetime | None,
        expire: str | datetime | None,
    ) -> None:
        """Replace the session state with the result of a login."""
        self.release = parse_timestamp(release) or self._clock()
        self.expire = parse_timestamp(expire)
        self._token = token
