"""Active student endpoints."""

from fastapi import APIRouter, status

from libcard.api.dependencies import LifecycleManagerDep
from libcard.api.models import (
    APIResponse,
    ConfirmationResponse,
    StudentCreate,
    StudentResponse,
    StudentUpdate,
    confirmation_to_response,
    student_to_response,
)

router = APIRouter(prefix="/students", tags=["students"])


@router.get("", response_model=APIResponse[list[StudentResponse]])
def list_students(manager: LifecycleManagerDep) -> APIResponse[list[StudentResponse]]:
    """List active students, most recently registered first."""
    students = manager.list_active()
    return APIResponse(data=[student_to_response(s) for s in students])


@router.post(
    "",
    response_model=APIResponse[StudentResponse],
    status_code=status.HTTP_201_CREATED,
)
def register_student(
    student: StudentCreate, manager: LifecycleManagerDep
) -> APIResponse[StudentResponse]:
    """Register a new student."""
    created = manager.register(student.to_details())
    return APIResponse(data=student_to_response(created))


@router.patch("/{student_id}", response_model=APIResponse[StudentResponse])
def update_student(
    student_id: int, student: StudentUpdate, manager: LifecycleManagerDep
) -> APIResponse[StudentResponse]:
    """Update a student (partial update)."""
    updated = manager.update(student_id, student.to_changes())
    return APIResponse(data=student_to_response(updated))


@router.delete("/{student_id}", response_model=APIResponse[ConfirmationResponse])
def archive_student(
    student_id: int, manager: LifecycleManagerDep
) -> APIResponse[ConfirmationResponse]:
    """Archive a student. The record can be restored from /archived."""
    confirmation = manager.archive(student_id)
    return APIResponse(data=confirmation_to_response(confirmation))
