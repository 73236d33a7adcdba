"""
Student domain model.

This is the only representation of a student above the persistence boundary.
Every field except `id` may be unset (`None`); `None` is not the same as an
empty string and must survive a round-trip through storage.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime

from .errors import MalformedInputError

# DD-MM-YYYY, e.g. "10-12-1815".
DATE_OF_BIRTH_FORMAT = "%d-%m-%Y"

# Fields a client may set on create/update.
MUTABLE_FIELDS = ("fname", "lname", "email", "gender", "date_of_birth", "address")


@dataclass(frozen=True)
class Student:
    id: str = ""
    fname: str | None = None
    lname: str | None = None
    email: str | None = None
    gender: str | None = None
    date_of_birth: date | None = None
    address: str | None = None
    created_by: str | None = None
    created_on: datetime | None = None
    updated_by: str | None = None
    updated_on: datetime | None = None

    def with_changes(self, **changes) -> Student:
        return replace(self, **changes)


def parse_date_of_birth(value: str | date | None) -> date | None:
    """
    Parse the wire form of a date of birth.

    `None` means "not set". Strings, blank ones included, must match
    DD-MM-YYYY exactly.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise MalformedInputError("Date of birth must be a string in DD-MM-YYYY format.")

    raw = value.strip()
    try:
        return datetime.strptime(raw, DATE_OF_BIRTH_FORMAT).date()
    except ValueError as exc:
        raise MalformedInputError(
            f"Invalid date of birth {raw!r}; expected DD-MM-YYYY."
        ) from exc


def format_date_of_birth(value: date | None) -> str | None:
    if value is None:
        return None
    return value.strftime(DATE_OF_BIRTH_FORMAT)
