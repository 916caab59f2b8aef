"""
settings_service.py
- Purpose: User settings persisted as key/value rows, layered over env config.
- Design: Stored value wins; missing keys fall back to Settings (env/.env) or
  to the prompt registry for the short/long system prompts.
"""

from __future__ import annotations

import logging
from typing import Optional, get_args

from sqlalchemy.orm import Session, sessionmaker

from prompter.core.config import Settings
from prompter.llm.prompts.registry import get_prompt
from prompter.repos.settings.repo import SettingsRepo
from prompter.schemas.generation import PromptMode
from prompter.schemas.settings import ProviderName, UserSettings, UserSettingsUpdate

logger = logging.getLogger("prompter.settings")

PROVIDERS: tuple[str, ...] = get_args(ProviderName)


class SettingsService:
    def __init__(self, session_factory: sessionmaker[Session], config: Settings):
        self._session_factory = session_factory
        self.config = config

    def _env_model(self, provider: str) -> str:
        return {
            "claude_cli": self.config.CLAUDE_MODEL,
            "openai": self.config.OPENAI_MODEL,
            "gemini": self.config.GEMINI_MODEL,
        }[provider]

    def _env_api_key(self, provider: str) -> Optional[str]:
        if provider == "openai":
            return self.config.OPENAI_API_KEY
        if provider == "gemini":
            return self.config.GEMINI_API_KEY
        return None

    def get(self) -> UserSettings:
        with self._session_factory() as db:
            stored = SettingsRepo(db).get_all()

        provider = stored.get("provider") or self.config.LLM_PROVIDER
        if provider not in PROVIDERS:
            logger.warning("settings.unknown_provider", extra={"provider": provider})
            provider = "claude_cli"

        return UserSettings(
            provider=provider,
            api_key=stored.get("api_key") or self._env_api_key(provider),
            model=stored.get("model") or self._env_model(provider),
            system_prompt_short=stored.get("system_prompt_short") or get_prompt("short").template,
            system_prompt_long=stored.get("system_prompt_long") or get_prompt("long").template,
        )

    def update(self, payload: UserSettingsUpdate) -> UserSettings:
        changes = payload.model_dump(exclude_unset=True)
        with self._session_factory() as db:
            repo = SettingsRepo(db)
            current = repo.get_all()
            # a model id belongs to its provider
            if "provider" in changes and "model" not in changes and changes["provider"] != current.get("provider"):
                changes["model"] = None
            for key, value in changes.items():
                if isinstance(value, str):
                    value = value.strip() or None
                repo.set(key, value)
            db.commit()

        logger.info("settings.updated", extra={"keys": sorted(changes)})
        return self.get()

    def resolve_system_instruction(self, mode: PromptMode = "improve", explicit: Optional[str] = None) -> str:
        """Explicit instruction wins; short/long use the user's stored prompts."""
        if explicit and explicit.strip():
            return explicit.strip()
        if mode in ("short", "long"):
            user = self.get()
            return user.system_prompt_short if mode == "short" else user.system_prompt_long
        return get_prompt(mode).template
