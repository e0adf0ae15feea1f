"""Error type raised by the ClasseViva client.

All failures share a single exception class; the :class:`ErrorKind`
attribute tells them apart, and HTTP failures carry the status code and the
(decoded) response body.
"""
from __future__ import annotations

import json
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """What went wrong."""

    TOKEN_MISSING = "token_missing"
    TOKEN_EXPIRED = "token_expired"
    TOKEN_INVALID = "token_invalid"
    INVALID_CREDENTIAL = "invalid_credential"
    NO_PROFILE_DATA = "no_profile_data"
    INVALID_DATE_FORMAT = "invalid_date_format"
    DATE_OUT_OF_RANGE = "date_out_of_range"
    INVALID_PARAMETER = "invalid_parameter"
    UNKNOWN_CATEGORY = "unknown_category"
    HTTP_NOT_FOUND = "http_not_found"
    REMOTE_REQUEST_FAILED = "remote_request_failed"


class ClasseVivaError(Exception):
    """Raised for every failure surfaced by the client."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        status: int | None = None,
        body: Any = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.status = status
        self.body = body

    def __repr__(self) -> str:
        return f"ClasseVivaError({self.kind.value!r}, {str(self)!r}, status={self.status!r})"


def http_error(status: int, body: Any) -> ClasseVivaError:
    """Build the generic error for an unclassified non-2xx response."""
    try:
        rendered = json.dumps(body, indent=2, ensure_ascii=False)
    except (TypeError, ValueError):
        rendered = repr(body)
    message = f"Request failed\nStatus: {status}\nResponse: {rendered}"
    kind = ErrorKind.HTTP_NOT_FOUND if status == 404 else ErrorKind.REMOTE_REQUEST_FAILED
    return ClasseVivaError(kind, message, status=status, body=body)


def remote_error_code(body: Any) -> str:
    """Return the ``error`` field of a failed response, or an empty string."""
    if isinstance(body, dict):
        return str(body.get("error") or "")
    return ""
