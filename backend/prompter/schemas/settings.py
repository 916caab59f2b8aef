"""
settings.py (schemas)
- Purpose: User-editable settings layered over environment configuration.
"""

from typing import Literal

from pydantic import BaseModel

ProviderName = Literal["claude_cli", "openai", "gemini"]


class UserSettings(BaseModel):
    """Effective settings: stored values merged over env defaults."""

    provider: ProviderName
    api_key: str | None = None
    model: str
    system_prompt_short: str
    system_prompt_long: str


class UserSettingsUpdate(BaseModel):
    """Partial update. An empty string clears the stored value (back to default)."""

    provider: ProviderName | None = None
    api_key: str | None = None
    model: str | None = None
    system_prompt_short: str | None = None
    system_prompt_long: str | None = None


class UserSettingsOut(BaseModel):
    provider: ProviderName
    model: str
    has_api_key: bool
    api_key_hint: str | None = None
    system_prompt_short: str
    system_prompt_long: str

    @classmethod
    def from_settings(cls, s: UserSettings) -> "UserSettingsOut":
        key = (s.api_key or "").strip()
        return cls(
            provider=s.provider,
            model=s.model,
            has_api_key=bool(key),
            api_key_hint=f"...{key[-4:]}" if len(key) >= 8 else None,
            system_prompt_short=s.system_prompt_short,
            system_prompt_long=s.system_prompt_long,
        )
