"""Archived student endpoints."""

from fastapi import APIRouter

from libcard.api.dependencies import LifecycleManagerDep
from libcard.api.models import (
    APIResponse,
    ArchivedStudentResponse,
    ConfirmationResponse,
    archived_to_response,
    confirmation_to_response,
)

router = APIRouter(prefix="/archived", tags=["archived"])


@router.get("", response_model=APIResponse[list[ArchivedStudentResponse]])
def list_archived(manager: LifecycleManagerDep) -> APIResponse[list[ArchivedStudentResponse]]:
    """List archived students, most recently archived first."""
    archived = manager.list_archived()
    return APIResponse(data=[archived_to_response(a) for a in archived])


@router.post("/{archived_id}/restore", response_model=APIResponse[ConfirmationResponse])
def restore_student(
    archived_id: int, manager: LifecycleManagerDep
) -> APIResponse[ConfirmationResponse]:
    """Restore an archived student to the active list."""
    confirmation = manager.restore(archived_id)
    return APIResponse(data=confirmation_to_response(confirmation))


@router.delete("/{archived_id}", response_model=APIResponse[ConfirmationResponse])
def purge_student(
    archived_id: int, manager: LifecycleManagerDep
) -> APIResponse[ConfirmationResponse]:
    """Permanently delete an archived student."""
    confirmation = manager.purge(archived_id)
    return APIResponse(data=confirmation_to_response(confirmation))
