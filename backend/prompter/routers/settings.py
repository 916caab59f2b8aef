from fastapi import APIRouter, Depends

from prompter.api.deps import get_settings_service
from prompter.schemas.settings import UserSettingsOut, UserSettingsUpdate
from prompter.services.settings_service import SettingsService

router = APIRouter(prefix="/api/settings", tags=["Settings"])


@router.get("", response_model=UserSettingsOut)
def get_settings(svc: SettingsService = Depends(get_settings_service)):
    return UserSettingsOut.from_settings(svc.get())


@router.put("", response_model=UserSettingsOut)
def update_settings(payload: UserSettingsUpdate, svc: SettingsService = Depends(get_settings_service)):
    return UserSettingsOut.from_settings(svc.update(payload))
