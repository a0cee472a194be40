"""Settings endpoints."""

from fastapi import APIRouter

from libcard.api.dependencies import LifecycleManagerDep
from libcard.api.models import (
    APIResponse,
    SettingResponse,
    SettingUpdate,
    setting_to_response,
)

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("/{key}", response_model=APIResponse[SettingResponse])
def get_setting(key: str, manager: LifecycleManagerDep) -> APIResponse[SettingResponse]:
    """Get a setting. ``data`` is null when the key was never written."""
    setting = manager.get_setting(key)
    return APIResponse(data=setting_to_response(setting) if setting is not None else None)


@router.put("/{key}", response_model=APIResponse[SettingResponse])
def put_setting(
    key: str, setting: SettingUpdate, manager: LifecycleManagerDep
) -> APIResponse[SettingResponse]:
    """Create or replace a setting."""
    stored = manager.put_setting(key, setting.value)
    return APIResponse(data=setting_to_response(stored))
