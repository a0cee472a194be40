"""Lifecycle package - register, archive, restore and purge student records."""

from libcard.lifecycle.activity import ActivityRecorder
from libcard.lifecycle.exceptions import (
    DuplicateIdentifierError,
    LifecycleError,
    PartialArchiveError,
)
from libcard.lifecycle.manager import LifecycleManager
from libcard.lifecycle.models import Confirmation, StudentChanges, StudentDetails

__all__ = [
    "ActivityRecorder",
    "Confirmation",
    "DuplicateIdentifierError",
    "LifecycleError",
    "LifecycleManager",
    "PartialArchiveError",
    "StudentChanges",
    "StudentDetails",
]
