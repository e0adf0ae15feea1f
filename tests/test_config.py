"""Tests for client configuration."""
from __future__ import annotations

import pytest
import voluptuous as vol

from classeviva.config import CREDENTIALS_SCHEMA, ClientConfig
from classeviva.endpoints import Endpoint, resolve


def test_defaults():
    config = ClientConfig.from_dict()
    assert config == ClientConfig()
    assert config.base_url == "https://web.spaggiari.eu/rest/v1"
    assert config.session_lifetime == 5400


def test_lifetime_is_coerced():
    assert ClientConfig.from_dict({"session_lifetime": "60"}).session_lifetime == 60


@pytest.mark.parametrize(
    "data",
    [{"session_lifetime": 0}, {"base_url": ""}, {"unknown": 1}],
)
def test_invalid_config(data):
    with pytest.raises(vol.Invalid):
        ClientConfig.from_dict(data)


def test_headers():
    config = ClientConfig(api_key="key", user_agent="agent")
    assert config.headers() == {
        "Content-Type": "application/json",
        "Z-Dev-ApiKey": "key",
        "User-Agent": "agent",
    }
    assert config.headers("tok")["Z-Auth-Token"] == "tok"


def test_credentials_schema():
    assert CREDENTIALS_SCHEMA({"username": "S1", "password": "pw"}) == {"username": "S1", "password": "pw"}
    with pytest.raises(vol.Invalid):
        CREDENTIALS_SCHEMA({"username": "S1"})


def test_resolve():
    assert resolve("https://x/rest/v1/", Endpoint.NOTE_READ, "123", "NTCL", 7) == (
        "https://x/rest/v1/students/123/notes/NTCL/read/7"
    )
    assert resolve("https://x/rest/v1", Endpoint.LOGIN) == "https://x/rest/v1/auth/login"
