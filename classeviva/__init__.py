"""Async client for the Spaggiari ClasseViva school register."""
from __future__ import annotations

import logging

from .api import ClasseVivaAPI, account_key
from .collection import AccountCollection, AccountData, Operation
from .config import ClientConfig
from .dates import format_for_display, format_for_remote, validate_dates
from .exceptions import ClasseVivaError, ErrorKind
from .session import AuthSession

__version__ = "1.0.0"

__all__ = [
    "AccountCollection",
    "AccountData",
    "AuthSession",
    "ClasseVivaAPI",
    "ClasseVivaError",
    "ClientConfig",
    "ErrorKind",
    "Operation",
    "account_key",
    "format_for_display",
    "format_for_remote",
    "validate_dates",
]

logging.getLogger(__name__).addHandler(logging.NullHandler())
