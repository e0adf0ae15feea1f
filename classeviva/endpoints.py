"""URL templates of the ClasseViva REST API."""
from __future__ import annotations

from enum import Enum


class Endpoint(str, Enum):
    """Path templates relative to the API base URL.

    ``{account}`` is the bare account key; positional ``{}`` fields are
    filled in order by :func:`resolve`.
    """

    LOGIN = "auth/login"
    STATUS = "auth/status"
    TICKET = "auth/ticket"

    DOCUMENTS = "students/{account}/documents"
    DOCUMENT_CHECK = "students/{account}/documents/check/{}"

    ABSENCES = "students/{account}/absences/details"
    ABSENCES_FROM = "students/{account}/absences/details/{}"
    ABSENCES_BETWEEN = "students/{account}/absences/details/{}/{}"

    AGENDA_BETWEEN = "students/{account}/agenda/all/{}/{}"

    DIDACTICS = "students/{account}/didactics"

    NOTICEBOARD = "students/{account}/noticeboard"
    NOTICEBOARD_READ = "students/{account}/noticeboard/read/{}/{}/101"

    LESSONS_TODAY = "students/{account}/lessons/today"
    LESSONS_DAY = "students/{account}/lessons/{}"
    LESSONS_BETWEEN = "students/{account}/lessons/{}/{}"

    CALENDAR = "students/{account}/calendar/all"
    SCHOOLBOOKS = "students/{account}/schoolbooks"
    CARD = "students/{account}/card"
    GRADES = "students/{account}/grades"
    PERIODS = "students/{account}/periods"
    SUBJECTS = "students/{account}/subjects"
    NOTES = "students/{account}/notes/all"
    NOTE_READ = "students/{account}/notes/{}/read/{}"
    OVERVIEW_BETWEEN = "students/{account}/overview/all/{}/{}"
    AVATAR = "users/{account}/avatar"


def resolve(base_url: str, endpoint: Endpoint, account: str = "", *params: object) -> str:
    """Return the absolute URL of *endpoint* for *account*."""
    path = endpoint.value.format(*params, account=account)
    return f"{base_url.rstrip('/')}/{path}"
