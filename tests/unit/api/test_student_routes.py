"""Unit tests for student and archive routes."""

from datetime import UTC, datetime
from unittest.mock import patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from libcard.api.app import register_exception_handlers
from libcard.api.dependencies import get_lifecycle_manager
from libcard.api.routes import archived, students
from libcard.lifecycle import LifecycleManager, PartialArchiveError, StudentDetails
from libcard.record_store import RecordStore, StorageUnavailableError


@pytest.fixture
def manager(store: RecordStore) -> LifecycleManager:
    return LifecycleManager(store)


@pytest.fixture
def app(manager: LifecycleManager):
    """Create a test FastAPI app with the manager injected."""
    app = FastAPI()

    def override_get_lifecycle_manager():
        yield manager

    app.dependency_overrides[get_lifecycle_manager] = override_get_lifecycle_manager
    register_exception_handlers(app)

    app.include_router(students.router, prefix="/api/v1")
    app.include_router(archived.router, prefix="/api/v1")

    return app


@pytest.fixture
def client(app: FastAPI):
    """Create a test client."""
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client


def register(manager: LifecycleManager, student_number: str = "S1", name: str = "Ann", **kwargs):
    return manager.register(
        StudentDetails(student_number=student_number, name=name, course="BSIT", year="1", **kwargs)
    )


@pytest.mark.unit
class TestListStudents:
    """Tests for GET /students."""

    def test_list_students_empty(self, client: TestClient) -> None:
        response = client.get("/api/v1/students")

        assert response.status_code == 200
        assert response.json() == {"data": [], "error": None}

    def test_list_students_most_recent_first(
        self, client: TestClient, manager: LifecycleManager
    ) -> None:
        register(manager, "S1", registered_datetime=datetime(2024, 6, 1, 8, tzinfo=UTC))
        register(manager, "S3", registered_datetime=datetime(2024, 6, 3, 8, tzinfo=UTC))
        register(manager, "S2", registered_datetime=datetime(2024, 6, 2, 8, tzinfo=UTC))

        response = client.get("/api/v1/students")

        numbers = [s["student_number"] for s in response.json()["data"]]
        assert numbers == ["S3", "S2", "S1"]


@pytest.mark.unit
class TestRegisterStudent:
    """Tests for POST /students."""

    def test_register_success(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/students",
            json={"student_number": "S1", "name": "Ann", "course": "BSIT", "year": "1"},
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["id"] is not None
        assert data["student_number"] == "S1"
        assert data["is_new"] is True
        assert data["registered_datetime"]

    def test_register_duplicate_returns_existing(
        self, client: TestClient, manager: LifecycleManager
    ) -> None:
        register(manager, "S1", "Ann")

        response = client.post(
            "/api/v1/students",
            json={"student_number": "S1", "name": "Bob", "course": "BSCS", "year": "2"},
        )

        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "duplicate"
        assert body["data"]["name"] == "Ann"

    def test_register_missing_required_field(self, client: TestClient) -> None:
        response = client.post("/api/v1/students", json={"student_number": "S1", "name": "Ann"})

        assert response.status_code == 422

    def test_register_blank_student_number(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/students",
            json={"student_number": "   ", "name": "Ann", "course": "BSIT", "year": "1"},
        )

        assert response.status_code == 422

    def test_register_unknown_field_rejected(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/students",
            json={
                "student_number": "S1",
                "name": "Ann",
                "course": "BSIT",
                "year": "1",
                "is_new": False,
            },
        )

        assert response.status_code == 422

    def test_register_normalizes_offset_instant(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/students",
            json={
                "student_number": "S1",
                "name": "Ann",
                "course": "BSIT",
                "year": "1",
                "registered_datetime": "2024-01-01T12:00:00+05:00",
            },
        )

        assert response.status_code == 201
        assert response.json()["data"]["registered_datetime"] == "2024-01-01T07:00:00.000Z"

    @pytest.mark.parametrize("instant", ["not a date", "2024-01-01T08:00:00", ""])
    def test_register_rejects_bad_instant(self, client: TestClient, instant: str) -> None:
        """Unparseable and offset-less instants are refused."""
        response = client.post(
            "/api/v1/students",
            json={
                "student_number": "S1",
                "name": "Ann",
                "course": "BSIT",
                "year": "1",
                "registered_datetime": instant,
            },
        )

        assert response.status_code == 422


@pytest.mark.unit
class TestUpdateStudent:
    """Tests for PATCH /students/{id}."""

    def test_update_partial(self, client: TestClient, manager: LifecycleManager) -> None:
        created = register(manager, email="ann@example.com")

        response = client.patch(f"/api/v1/students/{created.id}", json={"phone": "0999"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["phone"] == "0999"
        assert data["email"] == "ann@example.com"

    def test_update_student_number_rejected(
        self, client: TestClient, manager: LifecycleManager
    ) -> None:
        created = register(manager)

        response = client.patch(f"/api/v1/students/{created.id}", json={"student_number": "S9"})

        assert response.status_code == 422

    def test_update_not_found(self, client: TestClient) -> None:
        response = client.patch("/api/v1/students/999", json={"name": "Nobody"})

        assert response.status_code == 404
        assert response.json()["data"] is None


@pytest.mark.unit
class TestArchiveStudent:
    """Tests for DELETE /students/{id}."""

    def test_archive_success(self, client: TestClient, manager: LifecycleManager) -> None:
        created = register(manager)

        response = client.delete(f"/api/v1/students/{created.id}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["message"] == "Student archived successfully"
        assert manager.list_archived()[0].id == data["record_id"]

    def test_archive_not_found(self, client: TestClient) -> None:
        response = client.delete("/api/v1/students/999")

        assert response.status_code == 404

    def test_archive_partial_failure(self, client: TestClient, manager: LifecycleManager) -> None:
        error = PartialArchiveError("archive", 1, 2, ["insert_archived:2"])
        with patch.object(manager, "archive", side_effect=error):
            response = client.delete("/api/v1/students/1")

        assert response.status_code == 500
        assert "reconciliation" in response.json()["error"]

    def test_storage_unavailable(self, client: TestClient, manager: LifecycleManager) -> None:
        with patch.object(manager, "list_active", side_effect=StorageUnavailableError("down")):
            response = client.get("/api/v1/students")

        assert response.status_code == 503


@pytest.mark.unit
class TestArchivedRoutes:
    """Tests for /archived."""

    def test_list_archived(self, client: TestClient, manager: LifecycleManager) -> None:
        created = register(manager)
        manager.archive(created.id)

        response = client.get("/api/v1/archived")

        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data) == 1
        assert data[0]["original_id"] == created.id
        assert data[0]["name"] == "Ann"

    def test_restore(self, client: TestClient, manager: LifecycleManager) -> None:
        created = register(manager)
        archived_id = manager.archive(created.id).record_id

        response = client.post(f"/api/v1/archived/{archived_id}/restore")

        assert response.status_code == 200
        assert response.json()["data"]["message"] == "Student restored successfully"
        assert manager.list_active()[0].is_new is False

    def test_restore_collision(self, client: TestClient, manager: LifecycleManager) -> None:
        created = register(manager, "S1", "Ann")
        archived_id = manager.archive(created.id).record_id
        register(manager, "S1", "Bob")

        response = client.post(f"/api/v1/archived/{archived_id}/restore")

        assert response.status_code == 409
        assert response.json()["data"]["name"] == "Bob"

    def test_restore_not_found(self, client: TestClient) -> None:
        response = client.post("/api/v1/archived/999/restore")

        assert response.status_code == 404

    def test_purge_twice(self, client: TestClient, manager: LifecycleManager) -> None:
        created = register(manager)
        archived_id = manager.archive(created.id).record_id

        first = client.delete(f"/api/v1/archived/{archived_id}")
        second = client.delete(f"/api/v1/archived/{archived_id}")

        assert first.status_code == 200
        assert first.json()["data"]["message"] == "Student permanently deleted"
        assert second.status_code == 404
