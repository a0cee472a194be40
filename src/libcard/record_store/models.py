"""SQLAlchemy models for the Record Store.

Table and column names follow the library database layout (camelCase
columns) so existing ``library.db`` files can be opened as-is.
"""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - used at runtime for SQLAlchemy
from typing import Any

from sqlalchemy import (
    Boolean,
    DateTime,
    Integer,
    String,
    Text,
    event,
    func,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
)
from sqlalchemy.orm.attributes import set_committed_value

# Fields shared by active and archived students, in column order.
STUDENT_FIELDS = (
    "student_number",
    "name",
    "gender",
    "course",
    "year",
    "section",
    "email",
    "phone",
    "birthday",
    "card_expiry",
    "photo",
    "registered_date",
    "registered_time",
    "registered_datetime",
)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Student(Base):
    """Student model - an active record currently in service."""

    __tablename__ = "students"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_number: Mapped[str] = mapped_column(
        "studentNumber", String(64), nullable=False, unique=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    gender: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    course: Mapped[str] = mapped_column(String(255), nullable=False)
    year: Mapped[str] = mapped_column(String(32), nullable=False)
    section: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    phone: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    birthday: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    card_expiry: Mapped[str] = mapped_column("cardExpiry", String(32), nullable=False, default="")
    photo: Mapped[str] = mapped_column(Text, nullable=False, default="")
    registered_date: Mapped[str] = mapped_column("registeredDate", String(32), nullable=False)
    registered_time: Mapped[str] = mapped_column("registeredTime", String(32), nullable=False)
    registered_datetime: Mapped[str] = mapped_column(
        "registeredDateTime", String(64), nullable=False, index=True
    )
    is_new: Mapped[bool] = mapped_column("isNew", Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        "createdAt", DateTime, nullable=False, server_default=func.now()
    )

    def __init__(
        self,
        student_number: str,
        name: str,
        course: str,
        year: str,
        registered_date: str,
        registered_time: str,
        registered_datetime: str,
        gender: str = "",
        section: str = "",
        email: str = "",
        phone: str = "",
        birthday: str = "",
        card_expiry: str = "",
        photo: str = "",
        is_new: bool = True,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.student_number = student_number
        self.name = name
        self.gender = gender
        self.course = course
        self.year = year
        self.section = section
        self.email = email
        self.phone = phone
        self.birthday = birthday
        self.card_expiry = card_expiry
        self.photo = photo
        self.registered_date = registered_date
        self.registered_time = registered_time
        self.registered_datetime = registered_datetime
        self.is_new = is_new

    @classmethod
    def from_archived(cls, archived: ArchivedStudent) -> Student:
        """Build an active record from an archived one.

        The archival stamps and back-reference are dropped and the record is
        flagged as returning (``is_new=False``).
        """
        return cls(
            **{name: getattr(archived, name) for name in STUDENT_FIELDS},
            is_new=False,
        )

    def __repr__(self) -> str:
        return (
            f"<Student(id={self.id!r}, student_number={self.student_number!r}, "
            f"name={self.name!r})>"
        )


class ArchivedStudent(Base):
    """Archived student model - soft-deleted records awaiting restore or purge."""

    __tablename__ = "archived_students"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Informational only; the active row is gone once archived.
    original_id: Mapped[int | None] = mapped_column("originalId", Integer, nullable=True)
    student_number: Mapped[str] = mapped_column("studentNumber", String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    gender: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    course: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    year: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    section: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    phone: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    birthday: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    card_expiry: Mapped[str] = mapped_column("cardExpiry", String(32), nullable=False, default="")
    photo: Mapped[str] = mapped_column(Text, nullable=False, default="")
    registered_date: Mapped[str] = mapped_column(
        "registeredDate", String(32), nullable=False, default=""
    )
    registered_time: Mapped[str] = mapped_column(
        "registeredTime", String(32), nullable=False, default=""
    )
    registered_datetime: Mapped[str] = mapped_column(
        "registeredDateTime", String(64), nullable=False, default=""
    )
    archived_date: Mapped[str] = mapped_column("archivedDate", String(32), nullable=False)
    archived_time: Mapped[str] = mapped_column("archivedTime", String(32), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        "createdAt", DateTime, nullable=False, server_default=func.now()
    )

    def __init__(
        self,
        student_number: str,
        name: str,
        archived_date: str,
        archived_time: str,
        original_id: int | None = None,
        gender: str = "",
        course: str = "",
        year: str = "",
        section: str = "",
        email: str = "",
        phone: str = "",
        birthday: str = "",
        card_expiry: str = "",
        photo: str = "",
        registered_date: str = "",
        registered_time: str = "",
        registered_datetime: str = "",
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.original_id = original_id
        self.student_number = student_number
        self.name = name
        self.gender = gender
        self.course = course
        self.year = year
        self.section = section
        self.email = email
        self.phone = phone
        self.birthday = birthday
        self.card_expiry = card_expiry
        self.photo = photo
        self.registered_date = registered_date
        self.registered_time = registered_time
        self.registered_datetime = registered_datetime
        self.archived_date = archived_date
        self.archived_time = archived_time

    @classmethod
    def from_student(cls, student: Student, archived_at: datetime) -> ArchivedStudent:
        """Copy an active record into an archived one stamped with ``archived_at``."""
        return cls(
            **{name: getattr(student, name) for name in STUDENT_FIELDS},
            original_id=student.id,
            archived_date=archived_at.date().isoformat(),
            archived_time=archived_at.strftime("%H:%M:%S"),
        )

    def __repr__(self) -> str:
        return (
            f"<ArchivedStudent(id={self.id!r}, original_id={self.original_id!r}, "
            f"student_number={self.student_number!r})>"
        )


# Columns older library.db files declare without NOT NULL. Rows loaded from
# such files get "" instead of None.
LEGACY_NULLABLE_FIELDS = {
    "students": (
        "gender",
        "section",
        "email",
        "phone",
        "birthday",
        "card_expiry",
        "photo",
        "registered_time",
        "registered_datetime",
    ),
    "archived_students": (*STUDENT_FIELDS, "archived_date", "archived_time"),
}


def _blank_legacy_nulls(target: Student | ArchivedStudent, *_args: Any) -> None:
    state = target.__dict__
    for name in LEGACY_NULLABLE_FIELDS[target.__tablename__]:
        if name in state and state[name] is None:
            set_committed_value(target, name, "")


for _model in (Student, ArchivedStudent):
    event.listen(_model, "load", _blank_legacy_nulls)
    event.listen(_model, "refresh", _blank_legacy_nulls)


class ActivityEntry(Base):
    """Activity log model - append-only record of what happened."""

    __tablename__ = "activity_log"
    # AUTOINCREMENT keeps ids monotonic; SQLite never reuses them.
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    action: Mapped[str] = mapped_column(String(64), nullable=False)
    details: Mapped[str | None] = mapped_column(Text, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    def __init__(self, action: str, details: str | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.action = action
        self.details = details

    def __repr__(self) -> str:
        return f"<ActivityEntry(id={self.id!r}, action={self.action!r})>"


class Setting(Base):
    """Settings model - key/value pairs with upsert semantics."""

    __tablename__ = "settings"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str | None] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        "updatedAt",
        DateTime,
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __init__(self, key: str, value: str | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.key = key
        self.value = value

    def __repr__(self) -> str:
        return f"<Setting(key={self.key!r})>"
