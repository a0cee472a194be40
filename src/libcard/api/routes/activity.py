"""Activity log endpoints."""

from fastapi import APIRouter, Query, status

from libcard.api.dependencies import LifecycleManagerDep
from libcard.api.models import (
    ActivityCreate,
    ActivityResponse,
    APIResponse,
    activity_to_response,
)

router = APIRouter(prefix="/activity", tags=["activity"])


@router.get("", response_model=APIResponse[list[ActivityResponse]])
def list_activity(
    manager: LifecycleManagerDep,
    limit: int = Query(default=100, ge=1, le=1000, description="Max results"),
) -> APIResponse[list[ActivityResponse]]:
    """List activity entries, newest first."""
    entries = manager.list_activity(limit=limit)
    return APIResponse(data=[activity_to_response(e) for e in entries])


@router.post(
    "",
    response_model=APIResponse[ActivityResponse],
    status_code=status.HTTP_201_CREATED,
)
def record_activity(
    activity: ActivityCreate, manager: LifecycleManagerDep
) -> APIResponse[ActivityResponse]:
    """Append an activity entry."""
    entry = manager.record_activity(activity.action, activity.details)
    return APIResponse(data=activity_to_response(entry))
