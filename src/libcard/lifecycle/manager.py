"""Lifecycle Manager - student record state machine."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from libcard.lifecycle.activity import ActivityRecorder
from libcard.lifecycle.exceptions import DuplicateIdentifierError, PartialArchiveError
from libcard.lifecycle.models import Confirmation
from libcard.record_store import (
    ArchivedStudent,
    ConstraintViolationError,
    IdentityIndex,
    InconsistentStateError,
    Student,
)

if TYPE_CHECKING:
    from libcard.lifecycle.models import StudentChanges, StudentDetails
    from libcard.record_store import ActivityEntry, RecordStore, Setting

logger = logging.getLogger(__name__)


def format_instant(instant: datetime) -> str:
    """Render a UTC instant as stored in ``registeredDateTime``.

    Fixed-width ISO-8601 with milliseconds and a ``Z`` suffix, so text order
    is instant order, including rows written by older library servers.
    """
    return instant.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class LifecycleManager:
    """Moves student records between the active and archived tables.

    States: (none) -> Active -> Archived -> (Active | purged).

    - register: (none) -> Active, rejecting duplicate student numbers
    - update: Active -> Active, partial merge
    - archive: Active -> Archived, one unit of work
    - restore: Archived -> Active, one unit of work, never "new" again
    - purge: Archived -> gone, irreversible

    Every successful transition is recorded in the activity log on a
    best-effort basis. No locking is done here; concurrent callers racing on
    the same record get at most one success and RecordNotFoundError for the
    rest.
    """

    def __init__(
        self,
        store: RecordStore,
        recorder: ActivityRecorder | None = None,
    ) -> None:
        """Initialize the Lifecycle Manager.

        Args:
            store: RecordStore instance for persistence.
            recorder: ActivityRecorder for the activity log. Defaults to one
                writing to ``store``.
        """
        self.store = store
        self.identity = IdentityIndex(store)
        self.recorder = recorder if recorder is not None else ActivityRecorder(store)

    # --- Transitions ---

    def register(self, details: StudentDetails) -> Student:
        """Register a new active student.

        Args:
            details: Identity and contact fields for the student.

        Returns:
            The persisted Student, flagged as new.

        Raises:
            ValueError: If ``registered_datetime`` has no UTC offset.
            DuplicateIdentifierError: If an active student already holds the
                student number. The existing record is attached.
        """
        instant = details.registered_datetime or datetime.now(UTC)
        if instant.tzinfo is None:
            raise ValueError("registered_datetime must be timezone-aware")
        instant = instant.astimezone(UTC)

        existing = self.identity.exists(details.student_number)
        if existing is not None:
            logger.info(
                "Duplicate student number %s (held by student %s)",
                details.student_number,
                existing.id,
            )
            raise DuplicateIdentifierError(details.student_number, existing)

        student = Student(
            student_number=details.student_number,
            name=details.name,
            gender=details.gender,
            course=details.course,
            year=details.year,
            section=details.section,
            email=details.email,
            phone=details.phone,
            birthday=details.birthday,
            card_expiry=details.card_expiry,
            photo=details.photo,
            registered_date=details.registered_date or instant.date().isoformat(),
            registered_time=details.registered_time or instant.strftime("%H:%M:%S"),
            registered_datetime=format_instant(instant),
            is_new=True,
        )

        try:
            created = self.store.insert_active(student)
        except ConstraintViolationError as e:
            # Lost a race with a concurrent registration of the same number.
            raise DuplicateIdentifierError(
                details.student_number,
                self.identity.exists(details.student_number),
            ) from e

        logger.info("Registered student %s (%s)", created.id, created.student_number)
        self.recorder.record(
            "register", f"Registered {created.name} ({created.student_number})"
        )
        return created

    def update(self, student_id: int, changes: StudentChanges) -> Student:
        """Update an active student. Fields left as None keep their value.

        Returns:
            The merged Student as stored.

        Raises:
            RecordNotFoundError: If no active student has this ID.
        """
        fields = changes.as_fields()
        updated = self.store.update_active(student_id, **fields)

        logger.info("Updated student %s (%s)", student_id, ", ".join(sorted(fields)) or "no-op")
        self.recorder.record(
            "update", f"Updated {updated.name} ({updated.student_number})"
        )
        return updated

    def archive(self, student_id: int) -> Confirmation:
        """Move an active student to the archive.

        Returns:
            Confirmation carrying the archived record's ID.

        Raises:
            RecordNotFoundError: If no active student has this ID (including
                when a concurrent archive removed it first).
            PartialArchiveError: If the move failed and could not be undone.
        """
        student = self.store.get_active(student_id)
        archived = ArchivedStudent.from_student(student, archived_at=datetime.now(UTC))

        try:
            with self.store.unit_of_work() as uow:
                uow.insert_archived(archived)
                uow.remove_active(student.id)
        except InconsistentStateError as e:
            logger.error(
                "Archive of student %s left inconsistent state: %s", student_id, e.completed_steps
            )
            raise PartialArchiveError(
                "archive",
                source_id=student_id,
                target_id=archived.id,
                completed_steps=e.completed_steps,
            ) from e

        logger.info("Archived student %s as archived record %s", student_id, archived.id)
        self.recorder.record(
            "archive", f"Archived {student.name} ({student.student_number})"
        )
        return Confirmation(message="Student archived successfully", record_id=archived.id)

    def restore(self, archived_id: int) -> Confirmation:
        """Move an archived student back to the active table.

        The restored record keeps its original registration stamps but is no
        longer flagged as new.

        Returns:
            Confirmation carrying the new active record's ID.

        Raises:
            RecordNotFoundError: If no archived student has this ID.
            DuplicateIdentifierError: If another active student took the
                student number meanwhile. The archived copy is left intact.
            PartialArchiveError: If the move failed and could not be undone.
        """
        archived = self.store.get_archived(archived_id)
        student = Student.from_archived(archived)

        try:
            with self.store.unit_of_work() as uow:
                uow.insert_active(student)
                uow.remove_archived(archived.id)
        except ConstraintViolationError as e:
            existing = self.identity.exists(archived.student_number)
            logger.info(
                "Cannot restore archived record %s: student number %s is taken",
                archived_id,
                archived.student_number,
            )
            raise DuplicateIdentifierError(archived.student_number, existing) from e
        except InconsistentStateError as e:
            logger.error(
                "Restore of archived record %s left inconsistent state: %s",
                archived_id,
                e.completed_steps,
            )
            raise PartialArchiveError(
                "restore",
                source_id=archived_id,
                target_id=student.id,
                completed_steps=e.completed_steps,
            ) from e

        logger.info("Restored archived record %s as student %s", archived_id, student.id)
        self.recorder.record(
            "restore", f"Restored {student.name} ({student.student_number})"
        )
        return Confirmation(message="Student restored successfully", record_id=student.id)

    def purge(self, archived_id: int) -> Confirmation:
        """Permanently delete an archived student. There is no way back.

        Raises:
            RecordNotFoundError: If no archived student has this ID.
        """
        self.store.remove_archived(archived_id)

        logger.warning("Permanently deleted archived record %s", archived_id)
        self.recorder.record("purge", f"Permanently deleted archived record {archived_id}")
        return Confirmation(message="Student permanently deleted", record_id=archived_id)

    # --- Queries ---

    def list_active(self) -> list[Student]:
        """Active students, most recently registered first."""
        return self.store.list_active()

    def list_archived(self) -> list[ArchivedStudent]:
        """Archived students, most recently archived first."""
        return self.store.list_archived()

    # --- Activity & Settings ---

    def record_activity(self, action: str, details: str | None = None) -> ActivityEntry:
        """Append an activity entry on behalf of an external caller.

        Unlike the entries written by transitions, storage errors propagate.
        """
        return self.store.append_activity(action, details)

    def list_activity(self, limit: int = 100) -> list[ActivityEntry]:
        """Most recent activity entries first."""
        return self.store.list_activity(limit=limit)

    def get_setting(self, key: str) -> Setting | None:
        return self.store.get_setting(key)

    def put_setting(self, key: str, value: str | None) -> Setting:
        setting = self.store.put_setting(key, value)
        logger.info("Setting '%s' updated", key)
        return setting
