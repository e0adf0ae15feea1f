"""Client configuration."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

import voluptuous as vol

from .const import (
    API_KEY,
    BASE_URL,
    CONF_API_KEY,
    CONF_BASE_URL,
    CONF_PASSWORD,
    CONF_SESSION_LIFETIME,
    CONF_USER_AGENT,
    CONF_USERNAME,
    HEADER_API_KEY,
    HEADER_AUTH_TOKEN,
    SESSION_LIFETIME,
    USER_AGENT,
)

_NON_EMPTY_STR = vol.All(str, vol.Length(min=1))

CONFIG_SCHEMA = vol.Schema(
    {
        vol.Optional(CONF_BASE_URL, default=BASE_URL): _NON_EMPTY_STR,
        vol.Optional(CONF_API_KEY, default=API_KEY): _NON_EMPTY_STR,
        vol.Optional(CONF_USER_AGENT, default=USER_AGENT): _NON_EMPTY_STR,
        vol.Optional(CONF_SESSION_LIFETIME, default=SESSION_LIFETIME): vol.All(
            vol.Coerce(int), vol.Range(min=1)
        ),
    }
)

CREDENTIALS_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_USERNAME): _NON_EMPTY_STR,
        vol.Required(CONF_PASSWORD): str,
    }
)


@dataclass(frozen=True)
class ClientConfig:
    """Remote endpoint and header settings shared by the clients."""

    base_url: str = BASE_URL
    api_key: str = API_KEY
    user_agent: str = USER_AGENT
    session_lifetime: int = SESSION_LIFETIME

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None = None) -> ClientConfig:
        """Validate *data* against :data:`CONFIG_SCHEMA` and build a config.

        Raises :class:`voluptuous.Invalid` on bad input.
        """
        validated = CONFIG_SCHEMA(dict(data or {}))
        return cls(
            base_url=validated[CONF_BASE_URL].rstrip("/"),
            api_key=validated[CONF_API_KEY],
            user_agent=validated[CONF_USER_AGENT],
            session_lifetime=validated[CONF_SESSION_LIFETIME],
        )

    def headers(self, token: str | None = None) -> dict[str, str]:
        """Return the standard request headers, plus the auth token if given."""
        headers = {
            "Content-Type": "application/json",
            HEADER_API_KEY: self.api_key,
            "User-Agent": self.user_agent,
        }
        if token is not None:
            headers[HEADER_AUTH_TOKEN] = token
        return headers
