"""Data models for the Lifecycle module."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime  # noqa: TC003 - dataclass field type
from typing import Any


@dataclass
class StudentDetails:
    """Input for registering a student.

    Registration stamps left as None default to the moment of registration.
    ``registered_datetime`` must be timezone-aware; it is stored in UTC.
    """

    student_number: str
    name: str
    course: str
    year: str
    gender: str = ""
    section: str = ""
    email: str = ""
    phone: str = ""
    birthday: str = ""
    card_expiry: str = ""
    photo: str = ""
    registered_date: str | None = None
    registered_time: str | None = None
    registered_datetime: datetime | None = None


@dataclass
class StudentChanges:
    """Partial update of an active student. None leaves a field unchanged."""

    name: str | None = None
    gender: str | None = None
    course: str | None = None
    year: str | None = None
    section: str | None = None
    email: str | None = None
    phone: str | None = None
    birthday: str | None = None
    card_expiry: str | None = None
    photo: str | None = None
    is_new: bool | None = None

    def as_fields(self) -> dict[str, Any]:
        """Only the fields that were set."""
        return {key: value for key, value in asdict(self).items() if value is not None}


@dataclass
class Confirmation:
    """Outcome of a lifecycle transition.

    Attributes:
        message: Human-readable summary.
        record_id: ID of the record the transition produced or removed.
    """

    message: str
    record_id: int
