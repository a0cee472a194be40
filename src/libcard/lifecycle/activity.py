"""Activity Recorder - best-effort activity logging."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from libcard.logging import sanitize_for_log, truncate_output
from libcard.record_store import RecordStoreError

if TYPE_CHECKING:
    from libcard.record_store import ActivityEntry, RecordStore

logger = logging.getLogger(__name__)


class ActivityRecorder:
    """Appends activity entries on behalf of lifecycle operations.

    Recording never fails the caller: storage errors are logged and the
    entry is dropped.
    """

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def record(self, action: str, details: str | None = None) -> ActivityEntry | None:
        """Append an activity entry.

        Args:
            action: Short action label (e.g. "register", "archive").
            details: Free-form description.

        Returns:
            The created entry, or None if it could not be stored.
        """
        try:
            entry = self._store.append_activity(action, details)
        except RecordStoreError as e:
            logger.warning("Could not record activity '%s': %s", action, e, exc_info=True)
            return None

        logger.debug(
            "Activity #%s %s: %s",
            entry.id,
            action,
            truncate_output(sanitize_for_log(details or "")),
        )
        return entry
