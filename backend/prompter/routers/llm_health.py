# prompter/routers/llm_health.py
from fastapi import APIRouter, Depends

from prompter.api.deps import get_config, get_settings_service
from prompter.core.config import Settings
from prompter.llm.client import build_provider
from prompter.llm.errors import LLMError
from prompter.services.settings_service import SettingsService

router = APIRouter(prefix="/api/llm", tags=["llm"])

@router.get("/health")
def llm_health(
    config: Settings = Depends(get_config),
    user_settings: SettingsService = Depends(get_settings_service),
):
    """Configuration check only; never makes a (paid) model call."""
    user = user_settings.get()
    try:
        problem = build_provider(config, user).availability()
    except LLMError as e:
        problem = str(e)
    return {
        "ok": problem is None,
        "provider": user.provider,
        "model": user.model,
        "detail": problem,
    }
