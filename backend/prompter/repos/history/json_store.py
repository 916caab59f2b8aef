"""
history/json_store.py
- Purpose: Flat-file History Store (single JSON document).
- Design: Whole document rewritten atomically on every mutation; small by nature.
  Older documents (bare list, camelCase keys, single `generatedOutput` string)
  are upgraded on first load and written back in the current shape. An
  unreadable file is moved aside as `<name>.corrupt-<ts>` and the store starts
  from whatever could be validated.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from prompter.schemas.history import HistoryRecord, is_legacy_shape

logger = logging.getLogger("prompter.repos.history.json")

DOCUMENT_VERSION = 2


class JsonHistoryStore:
    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._records: dict[str, HistoryRecord] = {}
        self._load()

    # ----------------------------
    # Store contract
    # ----------------------------
    def list(self) -> list[HistoryRecord]:
        with self._lock:
            records = sorted(self._records.values(), key=lambda r: r.created_at, reverse=True)
            return [r.model_copy(deep=True) for r in records]

    def get(self, record_id: str) -> HistoryRecord | None:
        with self._lock:
            record = self._records.get(record_id)
            return record.model_copy(deep=True) if record else None

    def insert(self, record: HistoryRecord) -> None:
        with self._lock:
            self._records[record.id] = record.model_copy(deep=True)
            self._write()

    def update(self, record: HistoryRecord) -> None:
        with self._lock:
            existing = self._records.get(record.id)
            if existing is not None:
                stored = {v.id for v in existing.versions}
                # append-only: keep stored versions as-is, add the new ones
                merged = list(existing.versions) + [v for v in record.versions if v.id not in stored]
                record = record.model_copy(update={"versions": merged})
            self._records[record.id] = record.model_copy(deep=True)
            self._write()

    def delete(self, record_id: str) -> bool:
        with self._lock:
            if self._records.pop(record_id, None) is None:
                return False
            self._write()
            return True

    def find_by_prompt_text(self, normalized_text: str) -> HistoryRecord | None:
        needle = normalized_text.strip()
        for record in self.list():
            if not record.is_archived and record.prompt_text.strip() == needle:
                return record
        return None

    def clear(self) -> int:
        with self._lock:
            count = len(self._records)
            self._records.clear()
            self._write()
            return count

    # ----------------------------
    # File IO
    # ----------------------------
    def _load(self) -> None:
        if not self.path.exists():
            return

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8") or "[]")
            items, doc_version = self._unwrap(raw)
        except (ValueError, TypeError):
            logger.exception("history.json.load_failed", extra={"path": str(self.path)})
            self._set_aside()
            return

        migrated = doc_version < DOCUMENT_VERSION
        skipped = 0
        for item in items:
            if isinstance(item, dict) and is_legacy_shape(item):
                migrated = True
            try:
                record = HistoryRecord.model_validate(item)
            except ValidationError:
                logger.exception(
                    "history.json.record_invalid",
                    extra={"path": str(self.path), "item_id": item.get("id") if isinstance(item, dict) else None},
                )
                skipped += 1
                continue
            self._records[record.id] = record

        if skipped:
            # set-aside copy keeps the records that failed validation
            self._set_aside()
            migrated = True

        if migrated:
            logger.info(
                "history.json.migrated",
                extra={"path": str(self.path), "records": len(self._records), "from_version": doc_version},
            )
            self._write()

    @staticmethod
    def _unwrap(raw: Any) -> tuple[list[Any], int]:
        # v1 was a bare list of records
        if isinstance(raw, list):
            return raw, 1
        if isinstance(raw, dict):
            return list(raw.get("records") or []), int(raw.get("version") or 1)
        raise ValueError(f"Unrecognized history document: {type(raw).__name__}")

    def _set_aside(self) -> Path:
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
        target = self.path.with_name(f"{self.path.name}.corrupt-{stamp}")
        os.replace(self.path, target)
        logger.warning("history.json.set_aside", extra={"path": str(self.path), "moved_to": str(target)})
        return target

    def _write(self) -> None:
        ordered = sorted(self._records.values(), key=lambda r: r.created_at, reverse=True)
        doc = {
            "version": DOCUMENT_VERSION,
            "records": [r.model_dump(mode="json") for r in ordered],
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".history-", suffix=".json", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(doc, fh, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
