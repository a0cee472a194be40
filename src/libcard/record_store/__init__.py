"""Record Store - Persistent storage for student records, activity and settings."""

from libcard.record_store.exceptions import (
    ConstraintViolationError,
    InconsistentStateError,
    RecordNotFoundError,
    RecordStoreError,
    StorageUnavailableError,
)
from libcard.record_store.identity import IdentityIndex
from libcard.record_store.models import (
    ActivityEntry,
    ArchivedStudent,
    Setting,
    Student,
)
from libcard.record_store.store import RecordStore, UnitOfWork

__all__ = [
    "ActivityEntry",
    "ArchivedStudent",
    "ConstraintViolationError",
    "IdentityIndex",
    "InconsistentStateError",
    "RecordNotFoundError",
    "RecordStore",
    "RecordStoreError",
    "Setting",
    "StorageUnavailableError",
    "Student",
    "UnitOfWork",
]
