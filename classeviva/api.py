"""Async API client for the Spaggiari / ClasseViva REST API."""
from __future__ import annotations

import logging
import re
from typing import Any, Mapping

import aiohttp

from .config import ClientConfig
from .const import (
    ERROR_DATE_OUT_OF_RANGE,
    ERROR_INVALID_DATE,
    ERROR_INVALID_TOKEN,
    ERROR_NOTE_NOT_FOUND,
    ERROR_UNKNOWN_CATEGORY,
)
from .dates import format_for_remote, school_year_bounds, validate_dates
from .endpoints import Endpoint, resolve
from .exceptions import ClasseVivaError, ErrorKind, http_error, remote_error_code
from .session import AuthSession, Clock, utcnow

_LOGGER = logging.getLogger(__name__)

# error-code prefix -> (kind, message)
RemoteErrors = Mapping[str, tuple[ErrorKind, str]]

_ROLE_PREFIX = re.compile(r"^[A-Za-z]")


def account_key(identifier: str) -> str:
    """Strip the role letter from *identifier*: ``S1234567`` -> ``1234567``."""
    return _ROLE_PREFIX.sub("", identifier, count=1)


def _date_errors(detail: str) -> dict[str, tuple[ErrorKind, str]]:
    return {
        ERROR_INVALID_DATE: (
            ErrorKind.INVALID_DATE_FORMAT,
            "Invalid date format, expected YYYY-MM-DD",
        ),
        ERROR_DATE_OUT_OF_RANGE: (
            ErrorKind.DATE_OUT_OF_RANGE,
            f"Date outside the school year or start after end ({detail})",
        ),
    }


async def _read_body(resp: aiohttp.ClientResponse) -> Any:
    try:
        return await resp.json(content_type=None)
    except ValueError:
        return await resp.text()


class ClasseVivaAPI:
    """Async wrapper around the Spaggiari REST API for a single account.

    Every data method logs in first when the local session estimate says the
    token is missing or stale, then issues exactly one request.
    """

    def __init__(
        self,
        username: str,
        password: str,
        session: aiohttp.ClientSession,
        config: ClientConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.identifier = username
        self.account_key = account_key(username)
        self.password = password
        self._session = session
        self._config = config or ClientConfig()
        self._clock = clock or utcnow
        self.auth = AuthSession(self._config.session_lifetime, self._clock)
        self._data: dict[str, Any] = {}
        self.first_name: str | None = None
        self.last_name: str | None = None

    def __repr__(self) -> str:
        return f"<ClasseVivaAPI {self.identifier}>"

    @property
    def connected(self) -> bool:
        """Whether the session is locally valid (no network call)."""
        return self.auth.is_valid()

    @property
    def token(self) -> str:
        return self.auth.get_token()

    @property
    def profile(self) -> dict[str, str]:
        """Return ``ident``, ``firstName`` and ``lastName`` from the last login."""
        fields = ("ident", "firstName", "lastName")
        if not all(self._data.get(field) for field in fields):
            raise ClasseVivaError(
                ErrorKind.NO_PROFILE_DATA, f"{self} has no profile data yet"
            )
        return {field: self._data[field] for field in fields}

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def login(self) -> dict[str, Any]:
        """Authenticate and store the session token.

        Does nothing if the session is still locally valid. Returns a dict
        with ``id``, ``first_name`` and ``last_name``. Raises
        :class:`ClasseVivaError` with ``INVALID_CREDENTIAL`` on bad
        credentials.
        """
        if not self.connected:
            await self._do_login()
        return {
            "id": self.account_key,
            "first_name": self.first_name,
            "last_name": self.last_name,
        }

    async def _do_login(self) -> None:
        url = resolve(self._config.base_url, Endpoint.LOGIN)
        payload = {"ident": None, "pass": self.password, "uid": self.identifier}
        _LOGGER.debug("Logging in %s", self.identifier)
        async with self._session.post(
            url, json=payload, headers=self._config.headers()
        ) as resp:
            if resp.status == 422:
                raise ClasseVivaError(
                    ErrorKind.INVALID_CREDENTIAL,
                    f"Password mismatch for {self.identifier}",
                    status=resp.status,
                )
            if resp.status != 200:
                raise http_error(resp.status, await _read_body(resp))
            data = await resp.json(content_type=None)

        self.auth.record_authentication(
            data["token"], data.get("release"), data.get("expire")
        )
        self._data = data
        self.first_name = data.get("firstName")
        self.last_name = data.get("lastName")
        _LOGGER.debug("Logged in %s, server expiry %s", self.identifier, self.auth.expire)

    async def status(self) -> bool:
        """Ask the server whether the stored token is still accepted.

        The local expiry estimate is not consulted. Returns ``False`` when no
        token was ever received or the request cannot be completed.
        """
        token = self.auth.stored_token
        if token is None:
            return False
        url = resolve(self._config.base_url, Endpoint.STATUS)
        try:
            async with self._session.get(url, headers=self._config.headers(token)) as resp:
                return resp.status == 200
        except aiohttp.ClientError as err:
            _LOGGER.debug("Status check failed for %s: %s", self.identifier, err)
            return False

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _auth_headers(self) -> dict[str, str]:
        return self._config.headers(self.auth.get_token())

    async def _request(
        self,
        method: str,
        endpoint: Endpoint,
        *params: object,
        remote_errors: RemoteErrors | None = None,
        error_status: int = 404,
        binary: bool = False,
    ) -> Any:
        """Log in if needed, then perform one request and return its body.

        A failure whose status is *error_status* and whose ``error`` field
        starts with a prefix in *remote_errors* raises the mapped kind;
        anything else non-200 goes through :func:`http_error`.
        """
        if not self.connected:
            await self._do_login()

        url = resolve(self._config.base_url, endpoint, self.account_key, *params)
        headers = self._auth_headers()
        _LOGGER.debug("%s %s", method, url)
        if method == "POST":
            request = self._session.post(url, json={}, headers=headers)
        else:
            request = self._session.get(url, headers=headers)

        async with request as resp:
            if resp.status == 200:
                if binary:
                    return await resp.read()
                return await resp.json(content_type=None)
            body = await _read_body(resp)

        if remote_errors and resp.status == error_status:
            code = remote_error_code(body)
            for prefix, (kind, message) in remote_errors.items():
                if code.startswith(prefix):
                    raise ClasseVivaError(kind, message, status=resp.status, body=body)
        raise http_error(resp.status, body)

    async def _get(self, endpoint: Endpoint, *params: object, **kwargs: Any) -> Any:
        return await self._request("GET", endpoint, *params, **kwargs)

    async def _post(self, endpoint: Endpoint, *params: object, **kwargs: Any) -> Any:
        return await self._request("POST", endpoint, *params, **kwargs)

    def _school_year(self) -> tuple[str, str]:
        """Bounds of the current school year, by the clock's own date.

        The default clock is UTC; inject a clock in Italian local time to get
        the switch-over exactly at midnight on September 1st.
        """
        start, end = school_year_bounds(self._clock().date())
        return start.isoformat(), end.isoformat()

    # ------------------------------------------------------------------
    # Ticket and documents
    # ------------------------------------------------------------------

    async def full_ticket(self) -> dict[str, Any]:
        return await self._get(Endpoint.TICKET)

    async def ticket(self) -> str:
        data = await self.full_ticket()
        return data["ticket"]

    async def documents(self) -> dict[str, Any]:
        """Return the student's documents grouped by type."""
        return await self._post(Endpoint.DOCUMENTS)

    async def check_document(self, document: str) -> bool:
        """Return whether the document with hash *document* is available."""
        data = await self._post(Endpoint.DOCUMENT_CHECK, document)
        return data["document"]["available"]

    async def school_reports(self) -> list[dict[str, Any]]:
        """Return the available report cards (``desc``, ``confirmLink``, ``viewLink``)."""
        documents = await self.documents()
        reports = documents.get("schoolReports")
        if not reports:
            raise ClasseVivaError(
                ErrorKind.NO_PROFILE_DATA, f"{self} has no school reports"
            )
        return [
            {
                "desc": report.get("desc"),
                "confirmLink": report.get("confirmLink"),
                "viewLink": report.get("viewLink"),
            }
            for report in reports
        ]

    # ------------------------------------------------------------------
    # Absences and agenda
    # ------------------------------------------------------------------

    async def absences(self) -> list[dict]:
        """Return the student's absences."""
        data = await self._get(Endpoint.ABSENCES)
        return data.get("events", [])

    async def absences_from(self, start: str | None = None) -> list[dict]:
        """Return absences from *start* (``YYYY-MM-DD``) onward."""
        if not start:
            return await self.absences()
        validate_dates(start)
        data = await self._get(
            Endpoint.ABSENCES_FROM,
            format_for_remote(start),
            remote_errors=_date_errors(f"start: {start}"),
        )
        return data.get("events", [])

    async def absences_between(
        self, start: str | None = None, end: str | None = None
    ) -> list[dict]:
        """Return absences between *start* and *end* (``YYYY-MM-DD``)."""
        if not start:
            return await self.absences()
        if not end:
            return await self.absences_from(start)
        validate_dates(start, end)
        data = await self._get(
            Endpoint.ABSENCES_BETWEEN,
            format_for_remote(start),
            format_for_remote(end),
            remote_errors=_date_errors(f"start: {start}, end: {end}"),
        )
        return data.get("events", [])

    async def agenda(self) -> list[dict]:
        """Return the agenda events of the whole current school year."""
        start, end = self._school_year()
        data = await self._get(
            Endpoint.AGENDA_BETWEEN, format_for_remote(start), format_for_remote(end)
        )
        return data.get("agenda", [])

    async def agenda_between(
        self, start: str | None = None, end: str | None = None
    ) -> list[dict]:
        """Return the agenda events between *start* and *end* (``YYYY-MM-DD``)."""
        if not start or not end:
            return await self.agenda()
        validate_dates(start, end)
        data = await self._get(
            Endpoint.AGENDA_BETWEEN,
            format_for_remote(start),
            format_for_remote(end),
            remote_errors=_date_errors(f"start: {start}, end: {end}"),
        )
        return data.get("agenda", [])

    async def didactics(self) -> list[dict]:
        """Return the student's educational content (area didattica)."""
        data = await self._get(Endpoint.DIDACTICS)
        # The API key has a typo in some versions
        return data.get("didacticts", data.get("didactics", []))

    # ------------------------------------------------------------------
    # Grades, subjects and periods
    # ------------------------------------------------------------------

    async def grades(self) -> list[dict]:
        """Return the student's grades."""
        data = await self._get(Endpoint.GRADES)
        return data.get("grades", [])

    async def subjects(self) -> list[dict]:
        """Return the subjects with their teachers."""
        data = await self._get(Endpoint.SUBJECTS)
        return data.get("subjects", [])

    async def periods(self) -> list[dict]:
        data = await self._get(Endpoint.PERIODS)
        return data.get("periods", [])

    # ------------------------------------------------------------------
    # Notes and noticeboard
    # ------------------------------------------------------------------

    async def notes(self) -> dict[str, Any]:
        """Return the disciplinary notes grouped by type."""
        return await self._get(Endpoint.NOTES)

    async def read_note(self, note_type: str, note_id: int | str) -> str:
        """Mark a note as read and return its text.

        *note_type* is one of ``NTTE``, ``NTCL``, ``NTWN`` or ``NTST``.
        """
        data = await self._post(
            Endpoint.NOTE_READ,
            note_type,
            note_id,
            remote_errors={
                ERROR_NOTE_NOT_FOUND: (
                    ErrorKind.INVALID_PARAMETER,
                    f"Note {note_id} not found",
                ),
                ERROR_UNKNOWN_CATEGORY: (
                    ErrorKind.UNKNOWN_CATEGORY,
                    f"Note category {note_type} not found",
                ),
            },
        )
        return data["event"]["evtText"]

    async def noticeboard(self) -> list[dict]:
        """Return the student's noticeboard (bacheca)."""
        data = await self._get(Endpoint.NOTICEBOARD)
        return data.get("items", [])

    async def read_noticeboard(self, event_code: str, pub_id: int | str) -> dict[str, Any]:
        """Mark a noticeboard item as read and return its full content."""
        return await self._post(Endpoint.NOTICEBOARD_READ, event_code, pub_id)

    # ------------------------------------------------------------------
    # Lessons, calendar and overview
    # ------------------------------------------------------------------

    async def lessons(self) -> list[dict]:
        """Return today's lessons."""
        data = await self._get(Endpoint.LESSONS_TODAY)
        return data.get("lessons", [])

    async def lessons_on(self, day: str | None = None) -> list[dict]:
        """Return the lessons of *day* (``YYYY-MM-DD``), or today's."""
        if not day:
            return await self.lessons()
        validate_dates(day)
        data = await self._get(Endpoint.LESSONS_DAY, format_for_remote(day))
        return data.get("lessons", [])

    async def lessons_between(self, start: str, end: str) -> list[dict]:
        validate_dates(start, end)
        data = await self._get(
            Endpoint.LESSONS_BETWEEN, format_for_remote(start), format_for_remote(end)
        )
        return data.get("lessons", [])

    async def calendar(self) -> list[dict]:
        """Return the school calendar (school days, holidays)."""
        data = await self._get(Endpoint.CALENDAR)
        return data.get("calendar", [])

    async def overview(
        self, start: str | None = None, end: str | None = None
    ) -> dict[str, Any]:
        """Return agenda, grades, lessons and notes between *start* and *end*.

        A missing bound defaults to September 1st / June 30th of the current
        school year.
        """
        year_start, year_end = self._school_year()
        start = start or year_start
        end = end or year_end
        validate_dates(start, end)
        return await self._get(
            Endpoint.OVERVIEW_BETWEEN, format_for_remote(start), format_for_remote(end)
        )

    # ------------------------------------------------------------------
    # Other endpoints
    # ------------------------------------------------------------------

    async def avatar(self) -> bytes:
        """Return the raw avatar image."""
        return await self._get(
            Endpoint.AVATAR,
            binary=True,
            error_status=401,
            remote_errors={
                ERROR_INVALID_TOKEN: (ErrorKind.TOKEN_INVALID, "Invalid token"),
            },
        )

    async def card(self) -> dict[str, Any]:
        """Return the student card (school, class, birth data)."""
        data = await self._get(Endpoint.CARD)
        return data.get("card")

    async def schoolbooks(self) -> dict[str, Any]:
        """Return the textbook list of the current course."""
        data = await self._get(Endpoint.SCHOOLBOOKS)
        return data["schoolbooks"][0]
