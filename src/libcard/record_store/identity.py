"""Identity Index - lookup of active students by student number."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from libcard.record_store.models import Student
    from libcard.record_store.store import RecordStore


class IdentityIndex:
    """Read-only view over the uniqueness of active student numbers.

    Registration checks this before inserting; the ``UNIQUE`` constraint on
    ``students.studentNumber`` still guards against a concurrent insert
    slipping in between the check and the write.
    """

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def exists(self, student_number: str) -> Student | None:
        """Return the active student holding ``student_number``, or None."""
        return self._store.find_active_by_student_number(student_number)
