"""Exceptions for the Lifecycle module."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from libcard.record_store import Student


class LifecycleError(Exception):
    """Base exception for lifecycle errors."""

    pass


class DuplicateIdentifierError(LifecycleError):
    """An active student already holds this student number.

    ``existing`` is the conflicting record so callers can show it instead of
    treating the conflict as a hard failure. It is None only when the
    conflicting row disappeared again before it could be read.
    """

    def __init__(self, student_number: str, existing: Student | None) -> None:
        super().__init__(f"Active student with number '{student_number}' already exists")
        self.student_number = student_number
        self.existing = existing


class PartialArchiveError(LifecycleError):
    """A two-table move could not be completed or undone.

    The record may now exist in both tables (or in neither). This needs an
    operator to reconcile; retrying is not safe.
    """

    def __init__(
        self,
        operation: str,
        source_id: int,
        target_id: int | None,
        completed_steps: list[str],
    ) -> None:
        super().__init__(
            f"{operation} of record {source_id} left inconsistent state "
            f"(completed steps: {', '.join(completed_steps) or 'none'})"
        )
        self.operation = operation
        self.source_id = source_id
        self.target_id = target_id
        self.completed_steps = completed_steps
