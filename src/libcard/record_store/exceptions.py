"""Custom exceptions for the Record Store."""


class RecordStoreError(Exception):
    """Base exception for Record Store errors."""


class RecordNotFoundError(RecordStoreError):
    """Record with given ID does not exist."""


class ConstraintViolationError(RecordStoreError):
    """Write rejected by a storage-level constraint (e.g. duplicate student number)."""


class StorageUnavailableError(RecordStoreError):
    """The underlying database could not be reached or written."""


class InconsistentStateError(RecordStoreError):
    """A unit of work failed and could not be rolled back.

    Steps listed in ``completed_steps`` may have been persisted.
    """

    def __init__(self, message: str, completed_steps: list[str]) -> None:
        super().__init__(message)
        self.completed_steps = completed_steps
