"""
history.py (schemas)
- Purpose: Domain shape of a history record and its generated versions.
- Design: Same model is used in memory, on the wire and in the JSON store, so a
  save/load cycle is lossless. Older persisted shapes are upgraded on validation.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from prompter.constants.statuses import GenerationStatus


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite drops tzinfo; everything we persist is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# camelCase keys written by earlier clients -> current field names
_LEGACY_KEYS: dict[str, str] = {
    "prompt": "prompt_text",
    "promptText": "prompt_text",
    "timestamp": "created_at",
    "createdAt": "created_at",
    "isArchived": "is_archived",
    "isFavorite": "is_favorite",
    "generationStatus": "status",
    "errorMessage": "error_message",
    "selectedVersionIndex": "selected_version_index",
}
_LEGACY_OUTPUT_KEYS = ("generatedOutput", "generated_output")

# Foundation's JSONEncoder writes dates as seconds since 2001-01-01T00:00:00Z
REFERENCE_DATE_OFFSET = 978307200


def legacy_timestamp(value: Any) -> Any:
    """Numeric `timestamp` values are reference-date seconds; strings pass through."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value + REFERENCE_DATE_OFFSET
    return value


def is_legacy_shape(raw: dict[str, Any]) -> bool:
    if "versions" not in raw:
        return True
    return any(k in raw for k in _LEGACY_KEYS) or any(k in raw for k in _LEGACY_OUTPUT_KEYS)


def upgrade_legacy_record(raw: dict[str, Any]) -> dict[str, Any]:
    """
    Map a persisted record of any earlier shape onto the current fields.
    - single-string output -> one-element versions list
    - missing status -> completed if there is output, else pending
    - numeric `timestamp` -> shifted from the 2001 reference date to Unix time
    - `mode` (Primary/Strict/Exploratory) is dropped: it picked a system
      prompt at submit time and has no counterpart on a record
    """
    out = dict(raw)
    out.pop("mode", None)
    for old, new in _LEGACY_KEYS.items():
        if old not in out:
            continue
        value = out.pop(old)
        if old == "timestamp":
            value = legacy_timestamp(value)
        out.setdefault(new, value)

    legacy_output = None
    for key in _LEGACY_OUTPUT_KEYS:
        value = out.pop(key, None)
        if value and legacy_output is None:
            legacy_output = value

    if "versions" not in out or out["versions"] is None:
        versions: list[dict[str, Any]] = []
        if isinstance(legacy_output, str) and legacy_output.strip():
            version: dict[str, Any] = {"output": legacy_output}
            if out.get("created_at") is not None:
                version["created_at"] = out["created_at"]
            versions.append(version)
        out["versions"] = versions

    if out.get("status") in (None, ""):
        out["status"] = GenerationStatus.COMPLETED if out["versions"] else GenerationStatus.PENDING
    elif isinstance(out["status"], str):
        out["status"] = GenerationStatus.parse(out["status"])

    return out


class GenerationVersion(BaseModel):
    """One generated output. Immutable once appended to a record."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    output: str
    created_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="before")
    @classmethod
    def _upgrade_legacy(cls, data: Any) -> Any:
        if isinstance(data, dict) and "timestamp" in data and "created_at" not in data:
            data = dict(data)
            data["created_at"] = legacy_timestamp(data.pop("timestamp"))
        return data

    @field_validator("created_at")
    @classmethod
    def _normalize_created_at(cls, v: datetime) -> datetime:
        return as_utc(v)


class HistoryRecord(BaseModel):
    """
    A submitted prompt idea and every output generated for it.

    `versions` is append-only: use add_version(), never edit entries in place.
    """

    id: str = Field(default_factory=new_id)
    prompt_text: str
    created_at: datetime = Field(default_factory=utcnow)
    is_archived: bool = False
    is_favorite: bool = False
    status: GenerationStatus = GenerationStatus.PENDING
    error_message: str | None = None
    versions: list[GenerationVersion] = Field(default_factory=list)
    selected_version_index: int = 0

    @model_validator(mode="before")
    @classmethod
    def _upgrade_legacy(cls, data: Any) -> Any:
        if isinstance(data, dict) and is_legacy_shape(data):
            return upgrade_legacy_record(data)
        return data

    @field_validator("created_at")
    @classmethod
    def _normalize_created_at(cls, v: datetime) -> datetime:
        return as_utc(v)

    @model_validator(mode="after")
    def _enforce_invariants(self) -> "HistoryRecord":
        if self.status == GenerationStatus.COMPLETED and not self.versions:
            self.status = GenerationStatus.PENDING
        if not self.versions:
            self.selected_version_index = 0
        elif not 0 <= self.selected_version_index < len(self.versions):
            self.selected_version_index = len(self.versions) - 1
        return self

    @property
    def selected_version(self) -> GenerationVersion | None:
        if not self.versions:
            return None
        return self.versions[self.selected_version_index]

    @property
    def latest_output(self) -> str | None:
        return self.versions[-1].output if self.versions else None

    def add_version(self, output: str, *, created_at: datetime | None = None) -> GenerationVersion:
        version = GenerationVersion(output=output, created_at=created_at or utcnow())
        self.versions.append(version)
        self.selected_version_index = len(self.versions) - 1
        return version

    def select_version(self, index: int) -> GenerationVersion:
        if not 0 <= index < len(self.versions):
            raise IndexError(f"version index {index} out of range (0..{len(self.versions) - 1})")
        self.selected_version_index = index
        return self.versions[index]


class FavoriteRequest(BaseModel):
    is_favorite: bool


class SelectVersionRequest(BaseModel):
    index: int = Field(ge=0)
