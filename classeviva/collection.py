"""Deduplicated set of ClasseViva accounts with batch operations."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable, Iterator, Mapping

import aiohttp

from .api import ClasseVivaAPI
from .config import CREDENTIALS_SCHEMA, ClientConfig
from .const import CONF_PASSWORD, CONF_USERNAME, MISSING_NAME
from .exceptions import ClasseVivaError
from .session import Clock

_LOGGER = logging.getLogger(__name__)


class Operation(Enum):
    """Client operations that can be fanned out with :meth:`AccountCollection.apply_to_all`."""

    LOGIN = "login"
    TICKET = "ticket"
    DOCUMENTS = "documents"
    CHECK_DOCUMENT = "check_document"
    SCHOOL_REPORTS = "school_reports"
    ABSENCES = "absences"
    ABSENCES_FROM = "absences_from"
    ABSENCES_BETWEEN = "absences_between"
    AGENDA = "agenda"
    AGENDA_BETWEEN = "agenda_between"
    DIDACTICS = "didactics"
    GRADES = "grades"
    SUBJECTS = "subjects"
    PERIODS = "periods"
    NOTES = "notes"
    READ_NOTE = "read_note"
    NOTICEBOARD = "noticeboard"
    READ_NOTICEBOARD = "read_noticeboard"
    LESSONS = "lessons"
    LESSONS_ON = "lessons_on"
    LESSONS_BETWEEN = "lessons_between"
    CALENDAR = "calendar"
    OVERVIEW = "overview"
    AVATAR = "avatar"
    CARD = "card"
    SCHOOLBOOKS = "schoolbooks"


_OPERATIONS: dict[Operation, Callable[..., Awaitable[Any]]] = {
    Operation.LOGIN: ClasseVivaAPI.login,
    Operation.TICKET: ClasseVivaAPI.ticket,
    Operation.DOCUMENTS: ClasseVivaAPI.documents,
    Operation.CHECK_DOCUMENT: ClasseVivaAPI.check_document,
    Operation.SCHOOL_REPORTS: ClasseVivaAPI.school_reports,
    Operation.ABSENCES: ClasseVivaAPI.absences,
    Operation.ABSENCES_FROM: ClasseVivaAPI.absences_from,
    Operation.ABSENCES_BETWEEN: ClasseVivaAPI.absences_between,
    Operation.AGENDA: ClasseVivaAPI.agenda,
    Operation.AGENDA_BETWEEN: ClasseVivaAPI.agenda_between,
    Operation.DIDACTICS: ClasseVivaAPI.didactics,
    Operation.GRADES: ClasseVivaAPI.grades,
    Operation.SUBJECTS: ClasseVivaAPI.subjects,
    Operation.PERIODS: ClasseVivaAPI.periods,
    Operation.NOTES: ClasseVivaAPI.notes,
    Operation.READ_NOTE: ClasseVivaAPI.read_note,
    Operation.NOTICEBOARD: ClasseVivaAPI.noticeboard,
    Operation.READ_NOTICEBOARD: ClasseVivaAPI.read_noticeboard,
    Operation.LESSONS: ClasseVivaAPI.lessons,
    Operation.LESSONS_ON: ClasseVivaAPI.lessons_on,
    Operation.LESSONS_BETWEEN: ClasseVivaAPI.lessons_between,
    Operation.CALENDAR: ClasseVivaAPI.calendar,
    Operation.OVERVIEW: ClasseVivaAPI.overview,
    Operation.AVATAR: ClasseVivaAPI.avatar,
    Operation.CARD: ClasseVivaAPI.card,
    Operation.SCHOOLBOOKS: ClasseVivaAPI.schoolbooks,
}


@dataclass
class AccountData:
    """Data fetched for one member of a collection."""

    identifier: str
    first_name: str
    last_name: str
    data: Any


def _same_account(a: ClasseVivaAPI, b: ClasseVivaAPI) -> bool:
    return a.account_key == b.account_key and a.password == b.password


class AccountCollection:
    """Unordered set of accounts, unique by (account key, password).

    Two identifiers that differ only by role letter are the same account;
    the same key with a different password is a different member.
    """

    def __init__(self, clients: Iterable[ClasseVivaAPI] = ()) -> None:
        self._clients: list[ClasseVivaAPI] = []
        for client in clients:
            self.add(client)

    @classmethod
    def from_credentials(
        cls,
        credentials: Iterable[Mapping[str, Any]],
        session: aiohttp.ClientSession,
        config: ClientConfig | None = None,
        clock: Clock | None = None,
    ) -> AccountCollection:
        """Build a collection from ``{"username": ..., "password": ...}`` mappings.

        Each mapping is checked against :data:`~.config.CREDENTIALS_SCHEMA`.
        """
        clients = []
        for entry in credentials:
            data = CREDENTIALS_SCHEMA(dict(entry))
            clients.append(
                ClasseVivaAPI(data[CONF_USERNAME], data[CONF_PASSWORD], session, config, clock)
            )
        return cls(clients)

    def __repr__(self) -> str:
        return f"<AccountCollection with {len(self)} accounts>"

    def __len__(self) -> int:
        return len(self._clients)

    def __iter__(self) -> Iterator[ClasseVivaAPI]:
        return iter(list(self._clients))

    def __contains__(self, client: object) -> bool:
        if not isinstance(client, ClasseVivaAPI):
            return False
        return any(_same_account(member, client) for member in self._clients)

    def add(self, client: ClasseVivaAPI) -> bool:
        """Insert *client*; return ``False`` if the account is already present."""
        if not isinstance(client, ClasseVivaAPI):
            raise TypeError(f"Expected ClasseVivaAPI, got {type(client).__name__}")
        if client in self:
            _LOGGER.debug("Skipping duplicate account %s", client.identifier)
            return False
        self._clients.append(client)
        return True

    @property
    def connected(self) -> list[ClasseVivaAPI]:
        return [client for client in self._clients if client.connected]

    @property
    def not_connected(self) -> list[ClasseVivaAPI]:
        return [client for client in self._clients if not client.connected]

    @property
    def statistics(self) -> dict[str, Any]:
        return {
            "total": len(self),
            "connected": len(self.connected),
            "not_connected": len(self.not_connected),
            "accounts": [
                {"id": client.identifier, "connected": client.connected}
                for client in self._clients
            ],
        }

    def filter(self, predicate: Callable[[ClasseVivaAPI], bool]) -> AccountCollection:
        """Return a new collection with the members matching *predicate*."""
        return AccountCollection(client for client in self._clients if predicate(client))

    # ------------------------------------------------------------------
    # Batch operations
    # ------------------------------------------------------------------

    async def login_all(self) -> None:
        """Log in every member whose session is not locally valid.

        All logins run concurrently and to completion. If any failed, the
        first failure (in member order) is raised; members that logged in
        successfully keep their sessions.
        """
        pending = self.not_connected
        results = await asyncio.gather(
            *(client.login() for client in pending), return_exceptions=True
        )
        for client, result in zip(pending, results):
            if isinstance(result, BaseException):
                _LOGGER.warning("Login failed for %s: %s", client.identifier, result)
                raise result

    async def map_all(
        self, func: Callable[[ClasseVivaAPI], Awaitable[Any]]
    ) -> list[Any | None]:
        """Run *func* on every member concurrently.

        A member whose call fails is logged and yields ``None``; the batch
        itself never fails.
        """
        clients = list(self._clients)

        async def _run(client: ClasseVivaAPI) -> Any | None:
            try:
                return await func(client)
            except Exception as err:  # noqa: BLE001
                _LOGGER.warning("Batch call failed for %s: %s", client.identifier, err)
                return None

        return list(await asyncio.gather(*(_run(client) for client in clients)))

    async def apply_to_all(self, operation: Operation, *args: Any) -> list[Any | None]:
        """Call *operation* with *args* on every member; failures become ``None``."""
        method = _OPERATIONS[operation]
        return await self.map_all(lambda client: method(client, *args))

    async def grades_for_all(self) -> list[AccountData | None]:
        return await self.map_all(lambda client: _with_names(client, client.grades))

    async def absences_for_all(self) -> list[AccountData | None]:
        return await self.map_all(lambda client: _with_names(client, client.absences))


async def _with_names(
    client: ClasseVivaAPI, fetch: Callable[[], Awaitable[Any]]
) -> AccountData:
    data = await fetch()
    try:
        profile = client.profile
    except ClasseVivaError:
        first_name = last_name = MISSING_NAME
    else:
        first_name, last_name = profile["firstName"], profile["lastName"]
    return AccountData(client.identifier, first_name, last_name, data)
