"""Unit tests for LifecycleManager failure handling with a mocked store."""

from unittest.mock import MagicMock

import pytest

from libcard.lifecycle import (
    ActivityRecorder,
    DuplicateIdentifierError,
    LifecycleManager,
    PartialArchiveError,
)
from libcard.record_store import (
    ArchivedStudent,
    ConstraintViolationError,
    InconsistentStateError,
    RecordNotFoundError,
    RecordStoreError,
    StorageUnavailableError,
    Student,
)


@pytest.fixture
def mock_store() -> MagicMock:
    """Create a mock RecordStore whose unit of work is a mock context manager."""
    store = MagicMock()
    store.uow = MagicMock()
    store.unit_of_work.return_value.__enter__.return_value = store.uow
    store.unit_of_work.return_value.__exit__.return_value = False
    return store


@pytest.fixture
def mock_recorder() -> MagicMock:
    return MagicMock(spec=ActivityRecorder)


@pytest.fixture
def manager(mock_store: MagicMock, mock_recorder: MagicMock) -> LifecycleManager:
    return LifecycleManager(store=mock_store, recorder=mock_recorder)


@pytest.fixture
def sample_student() -> Student:
    student = Student(
        student_number="S1",
        name="Ann",
        course="BSIT",
        year="1",
        registered_date="2024-06-01",
        registered_time="08:00:00",
        registered_datetime="2024-06-01T08:00:00+00:00",
    )
    student.id = 5
    return student


@pytest.fixture
def sample_archived() -> ArchivedStudent:
    archived = ArchivedStudent(
        student_number="S1",
        name="Ann",
        archived_date="2024-07-01",
        archived_time="10:30:00",
        original_id=5,
    )
    archived.id = 9
    return archived


@pytest.mark.unit
class TestArchiveFailures:
    """Archive failure paths."""

    def test_archive_steps_run_in_one_unit(
        self, manager: LifecycleManager, mock_store: MagicMock, sample_student: Student
    ) -> None:
        mock_store.get_active.return_value = sample_student

        manager.archive(5)

        archived = mock_store.uow.insert_archived.call_args.args[0]
        assert archived.original_id == 5
        mock_store.uow.remove_active.assert_called_once_with(5)
        mock_store.insert_archived.assert_not_called()
        mock_store.remove_active.assert_not_called()

    def test_archive_unrecoverable_rollback_raises_partial(
        self,
        manager: LifecycleManager,
        mock_store: MagicMock,
        mock_recorder: MagicMock,
        sample_student: Student,
    ) -> None:
        """Removal failed and the archived copy could not be undone."""
        mock_store.get_active.return_value = sample_student
        mock_store.uow.remove_active.side_effect = RecordStoreError("disk I/O error")
        mock_store.unit_of_work.return_value.__exit__.side_effect = InconsistentStateError(
            "rollback failed", completed_steps=["insert_archived:9"]
        )

        with pytest.raises(PartialArchiveError) as exc_info:
            manager.archive(5)

        assert exc_info.value.operation == "archive"
        assert exc_info.value.source_id == 5
        assert exc_info.value.completed_steps == ["insert_archived:9"]
        mock_recorder.record.assert_not_called()

    def test_archive_storage_failure_propagates(
        self,
        manager: LifecycleManager,
        mock_store: MagicMock,
        mock_recorder: MagicMock,
        sample_student: Student,
    ) -> None:
        """A rolled-back unit leaves the active record as it was."""
        mock_store.get_active.return_value = sample_student
        mock_store.uow.insert_archived.side_effect = StorageUnavailableError("locked")

        with pytest.raises(StorageUnavailableError):
            manager.archive(5)

        mock_store.uow.remove_active.assert_not_called()
        mock_recorder.record.assert_not_called()

    def test_archive_not_found_skips_unit_of_work(
        self, manager: LifecycleManager, mock_store: MagicMock
    ) -> None:
        mock_store.get_active.side_effect = RecordNotFoundError("gone")

        with pytest.raises(RecordNotFoundError):
            manager.archive(5)

        mock_store.unit_of_work.assert_not_called()


@pytest.mark.unit
class TestRestoreFailures:
    """Restore failure paths."""

    def test_restore_unrecoverable_rollback_raises_partial(
        self,
        manager: LifecycleManager,
        mock_store: MagicMock,
        sample_archived: ArchivedStudent,
    ) -> None:
        mock_store.get_archived.return_value = sample_archived
        mock_store.uow.remove_archived.side_effect = RecordStoreError("disk I/O error")
        mock_store.unit_of_work.return_value.__exit__.side_effect = InconsistentStateError(
            "rollback failed", completed_steps=["insert_active:12"]
        )

        with pytest.raises(PartialArchiveError) as exc_info:
            manager.restore(9)

        assert exc_info.value.operation == "restore"
        assert exc_info.value.source_id == 9
        assert "insert_active:12" in str(exc_info.value)

    def test_restore_collision_raises_duplicate(
        self,
        manager: LifecycleManager,
        mock_store: MagicMock,
        sample_archived: ArchivedStudent,
        sample_student: Student,
    ) -> None:
        mock_store.get_archived.return_value = sample_archived
        mock_store.uow.insert_active.side_effect = ConstraintViolationError("UNIQUE")
        mock_store.find_active_by_student_number.return_value = sample_student

        with pytest.raises(DuplicateIdentifierError) as exc_info:
            manager.restore(9)

        assert exc_info.value.existing is sample_student
        mock_store.uow.remove_archived.assert_not_called()

    def test_restore_inserts_returning_student(
        self,
        manager: LifecycleManager,
        mock_store: MagicMock,
        sample_archived: ArchivedStudent,
    ) -> None:
        mock_store.get_archived.return_value = sample_archived

        manager.restore(9)

        restored = mock_store.uow.insert_active.call_args.args[0]
        assert restored.is_new is False
        assert restored.student_number == "S1"
        mock_store.uow.remove_archived.assert_called_once_with(9)


@pytest.mark.unit
class TestActivityIsObservational:
    """Activity recording never decides the outcome."""

    def test_recorder_swallows_store_errors(self, mock_store: MagicMock) -> None:
        mock_store.append_activity.side_effect = StorageUnavailableError("down")
        recorder = ActivityRecorder(mock_store)

        assert recorder.record("archive", "Archived Ann (S1)") is None

    def test_recorder_returns_entry(self, mock_store: MagicMock) -> None:
        entry = MagicMock(id=1)
        mock_store.append_activity.return_value = entry
        recorder = ActivityRecorder(mock_store)

        assert recorder.record("archive", "Archived Ann (S1)") is entry
        mock_store.append_activity.assert_called_once_with("archive", "Archived Ann (S1)")

    def test_purge_succeeds_when_recording_fails(self, mock_store: MagicMock) -> None:
        mock_store.append_activity.side_effect = StorageUnavailableError("down")
        manager = LifecycleManager(store=mock_store)

        confirmation = manager.purge(9)

        assert confirmation.record_id == 9
        mock_store.remove_archived.assert_called_once_with(9)
