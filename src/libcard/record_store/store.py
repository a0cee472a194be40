"""RecordStore - Main API for Record Store operations."""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError

from libcard.record_store.database import DEFAULT_DB_PATH, Database
from libcard.record_store.exceptions import (
    ConstraintViolationError,
    InconsistentStateError,
    RecordNotFoundError,
    StorageUnavailableError,
)
from libcard.record_store.models import (
    ActivityEntry,
    ArchivedStudent,
    Setting,
    Student,
)

if TYPE_CHECKING:
    from collections.abc import Iterator
    from types import TracebackType

    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = {
    "admin-credentials": json.dumps({"username": "admin", "password": "admin123"}),
}


def _constraint_error(student_number: str, exc: IntegrityError) -> ConstraintViolationError:
    if "UNIQUE constraint failed" in str(exc):
        return ConstraintViolationError(
            f"Active student with number '{student_number}' already exists"
        )
    return ConstraintViolationError(f"Constraint violated: {exc.orig}")


class UnitOfWork:
    """A group of Record Store writes sharing one transaction.

    Each step is flushed immediately so constraint violations surface at the
    step that caused them. Nothing is committed until the owning
    ``RecordStore.unit_of_work()`` block exits cleanly.
    """

    def __init__(self, session: Session) -> None:
        self._session = session
        self.completed_steps: list[str] = []

    def insert_active(self, student: Student) -> Student:
        """Insert an active student.

        Raises:
            ConstraintViolationError: If the student number is already active
        """
        self._session.add(student)
        try:
            self._session.flush()
        except IntegrityError as e:
            raise _constraint_error(student.student_number, e) from e
        self.completed_steps.append(f"insert_active:{student.id}")
        return student

    def remove_active(self, student_id: int) -> None:
        """Delete an active student.

        Raises:
            RecordNotFoundError: If the student doesn't exist
        """
        student = self._session.get(Student, student_id)
        if student is None:
            raise RecordNotFoundError(f"Student with id '{student_id}' not found")
        self._session.delete(student)
        self._session.flush()
        self.completed_steps.append(f"remove_active:{student_id}")

    def insert_archived(self, archived: ArchivedStudent) -> ArchivedStudent:
        """Insert an archived student."""
        self._session.add(archived)
        self._session.flush()
        self.completed_steps.append(f"insert_archived:{archived.id}")
        return archived

    def remove_archived(self, archived_id: int) -> None:
        """Delete an archived student.

        Raises:
            RecordNotFoundError: If the archived student doesn't exist
        """
        archived = self._session.get(ArchivedStudent, archived_id)
        if archived is None:
            raise RecordNotFoundError(f"Archived student with id '{archived_id}' not found")
        self._session.delete(archived)
        self._session.flush()
        self.completed_steps.append(f"remove_archived:{archived_id}")


class RecordStore:
    """Main API for Record Store operations.

    Provides storage for active and archived students, the activity log and
    settings. Every operation runs in its own session and is committed before
    returning; use ``unit_of_work()`` to group writes.
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH) -> None:
        """Initialize Record Store with SQLite database.

        Creates database and tables if they don't exist and seeds default
        settings.

        Args:
            db_path: Path to SQLite database file

        Raises:
            StorageUnavailableError: If the database cannot be opened
        """
        self._db = Database(db_path)
        try:
            self._db.create_tables()
        except DBAPIError as e:
            self._db.close()
            raise StorageUnavailableError(f"Cannot open database '{db_path}': {e}") from e
        self._seed_defaults()
        logger.info("Record store ready (db=%s)", db_path)

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()

    def __enter__(self) -> RecordStore:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self._db.get_session()
        try:
            yield session
        except DBAPIError as e:
            session.rollback()
            raise StorageUnavailableError(f"Database unavailable: {e}") from e
        finally:
            session.close()

    @contextmanager
    def unit_of_work(self) -> Iterator[UnitOfWork]:
        """Run several writes as one transaction.

        Commits when the block exits cleanly and rolls back otherwise.

        Raises:
            InconsistentStateError: If the rollback itself fails after at
                least one step was flushed
            StorageUnavailableError: If the database fails mid-transaction
        """
        session = self._db.get_session()
        uow = UnitOfWork(session)
        try:
            yield uow
            session.commit()
        except DBAPIError as e:
            self._rollback(session, uow)
            raise StorageUnavailableError(f"Database unavailable: {e}") from e
        except Exception:
            self._rollback(session, uow)
            raise
        finally:
            session.close()

    @staticmethod
    def _rollback(session: Session, uow: UnitOfWork) -> None:
        try:
            session.rollback()
        except SQLAlchemyError as e:
            if uow.completed_steps:
                raise InconsistentStateError(
                    f"Rollback failed after steps {uow.completed_steps}: {e}",
                    completed_steps=list(uow.completed_steps),
                ) from e
            # Nothing was flushed, so there is nothing to undo.
            logger.warning("Rollback failed on an empty unit of work: %s", e)

    def _seed_defaults(self) -> None:
        for key, value in DEFAULT_SETTINGS.items():
            if self.get_setting(key) is None:
                self.put_setting(key, value)
                logger.info("Seeded default setting '%s'", key)

    # --- Active Student Operations ---

    def insert_active(self, student: Student) -> Student:
        """Insert a new active student.

        Args:
            student: The student to persist (id is assigned by the database)

        Returns:
            The persisted Student with its assigned ID

        Raises:
            ConstraintViolationError: If the student number is already active
        """
        with self._session() as session:
            try:
                session.add(student)
                session.commit()
            except IntegrityError as e:
                session.rollback()
                raise _constraint_error(student.student_number, e) from e
            session.refresh(student)
            return student

    def get_active(self, student_id: int) -> Student:
        """Get active student by ID.

        Raises:
            RecordNotFoundError: If the student doesn't exist
        """
        with self._session() as session:
            student = session.get(Student, student_id)
            if student is None:
                raise RecordNotFoundError(f"Student with id '{student_id}' not found")
            return student

    def find_active_by_student_number(self, student_number: str) -> Student | None:
        """Get the active student holding ``student_number``, if any."""
        with self._session() as session:
            stmt = select(Student).where(Student.student_number == student_number)
            return session.execute(stmt).scalar_one_or_none()

    def list_active(self) -> list[Student]:
        """List active students.

        Returns:
            Students ordered by registration instant, most recent first
        """
        with self._session() as session:
            stmt = select(Student).order_by(
                Student.registered_datetime.desc(), Student.id.desc()
            )
            return list(session.execute(stmt).scalars().all())

    def update_active(
        self,
        student_id: int,
        *,
        name: str | None = None,
        gender: str | None = None,
        course: str | None = None,
        year: str | None = None,
        section: str | None = None,
        email: str | None = None,
        phone: str | None = None,
        birthday: str | None = None,
        card_expiry: str | None = None,
        photo: str | None = None,
        is_new: bool | None = None,
    ) -> Student:
        """Update student fields. Only provided fields are updated.

        The student number cannot be changed once registered.

        Returns:
            The updated Student object

        Raises:
            RecordNotFoundError: If the student doesn't exist
        """
        changes = {
            "name": name,
            "gender": gender,
            "course": course,
            "year": year,
            "section": section,
            "email": email,
            "phone": phone,
            "birthday": birthday,
            "card_expiry": card_expiry,
            "photo": photo,
            "is_new": is_new,
        }
        with self._session() as session:
            student = session.get(Student, student_id)
            if student is None:
                raise RecordNotFoundError(f"Student with id '{student_id}' not found")

            for field, value in changes.items():
                if value is not None:
                    setattr(student, field, value)

            session.commit()
            session.refresh(student)
            return student

    def remove_active(self, student_id: int) -> None:
        """Hard-delete an active student.

        Raises:
            RecordNotFoundError: If the student doesn't exist
        """
        with self._session() as session:
            student = session.get(Student, student_id)
            if student is None:
                raise RecordNotFoundError(f"Student with id '{student_id}' not found")
            session.delete(student)
            session.commit()

    # --- Archived Student Operations ---

    def insert_archived(self, archived: ArchivedStudent) -> ArchivedStudent:
        """Insert an archived student.

        Returns:
            The persisted ArchivedStudent with its assigned ID
        """
        with self._session() as session:
            session.add(archived)
            session.commit()
            session.refresh(archived)
            return archived

    def get_archived(self, archived_id: int) -> ArchivedStudent:
        """Get archived student by ID.

        Raises:
            RecordNotFoundError: If the archived student doesn't exist
        """
        with self._session() as session:
            archived = session.get(ArchivedStudent, archived_id)
            if archived is None:
                raise RecordNotFoundError(f"Archived student with id '{archived_id}' not found")
            return archived

    def list_archived(self) -> list[ArchivedStudent]:
        """List archived students.

        Returns:
            Archived students ordered by archival date, most recent first
        """
        with self._session() as session:
            stmt = select(ArchivedStudent).order_by(
                ArchivedStudent.archived_date.desc(),
                ArchivedStudent.archived_time.desc(),
                ArchivedStudent.id.desc(),
            )
            return list(session.execute(stmt).scalars().all())

    def remove_archived(self, archived_id: int) -> None:
        """Hard-delete an archived student.

        Raises:
            RecordNotFoundError: If the archived student doesn't exist
        """
        with self._session() as session:
            archived = session.get(ArchivedStudent, archived_id)
            if archived is None:
                raise RecordNotFoundError(f"Archived student with id '{archived_id}' not found")
            session.delete(archived)
            session.commit()

    # --- Activity Operations ---

    def append_activity(self, action: str, details: str | None = None) -> ActivityEntry:
        """Append an entry to the activity log.

        Returns:
            The created ActivityEntry with its assigned ID and timestamp
        """
        with self._session() as session:
            entry = ActivityEntry(action=action, details=details)
            session.add(entry)
            session.commit()
            session.refresh(entry)
            return entry

    def list_activity(self, limit: int = 100) -> list[ActivityEntry]:
        """List activity entries, newest first."""
        with self._session() as session:
            stmt = select(ActivityEntry).order_by(ActivityEntry.id.desc()).limit(limit)
            return list(session.execute(stmt).scalars().all())

    # --- Settings Operations ---

    def get_setting(self, key: str) -> Setting | None:
        """Get a setting by key, or None if it was never written."""
        with self._session() as session:
            return session.get(Setting, key)

    def put_setting(self, key: str, value: str | None) -> Setting:
        """Insert or fully replace a setting.

        Returns:
            The stored Setting
        """
        with self._session() as session:
            setting = session.get(Setting, key)
            if setting is None:
                setting = Setting(key=key, value=value)
                session.add(setting)
            else:
                setting.value = value
                setting.updated_at = func.now()
            session.commit()
            session.refresh(setting)
            return setting
