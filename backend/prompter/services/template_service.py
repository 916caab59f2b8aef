"""
template_service.py
- Purpose: CRUD for reusable prompt templates + default seeding.
- Design: Each call owns one session/transaction from the injected factory.
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session, sessionmaker

from prompter.constants.default_templates import DEFAULT_TEMPLATES
from prompter.core import ErrorCode
from prompter.core.errors import not_found
from prompter.models.custom_template import CustomTemplate
from prompter.repos.template.read import TemplateReadRepo
from prompter.repos.template.write import TemplateWriteRepo
from prompter.schemas.template import TemplateCreateRequest, TemplateOut, TemplateUpdateRequest
from prompter.validations.prompt_validators import normalize_template_name, validate_template_content

logger = logging.getLogger("prompter.templates")


class TemplateService:
    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def seed_defaults(self) -> int:
        """
        Empty table: insert all defaults in order.
        Otherwise: re-add any default missing by name at the end of the list.
        """
        added = 0
        with self._session_factory() as db:
            read = TemplateReadRepo(db)
            write = TemplateWriteRepo(db)
            existing = read.count()

            if existing == 0:
                for i, (name, content) in enumerate(DEFAULT_TEMPLATES):
                    write.create(name=name, content=content, is_default=True, sort_order=i)
                    added += 1
            else:
                for name, content in DEFAULT_TEMPLATES:
                    if read.find_by_name(name) is None:
                        write.create(name=name, content=content, is_default=True, sort_order=existing)
                        added += 1
            db.commit()

        if added:
            logger.info("templates.seeded", extra={"added": added})
        return added

    def list(self) -> list[TemplateOut]:
        with self._session_factory() as db:
            return [TemplateOut.model_validate(t) for t in TemplateReadRepo(db).list_all()]

    def get(self, template_id: str) -> TemplateOut:
        with self._session_factory() as db:
            return TemplateOut.model_validate(self._require(db, template_id))

    def create(self, payload: TemplateCreateRequest) -> TemplateOut:
        name = normalize_template_name(payload.name)
        content = validate_template_content(payload.content)
        with self._session_factory() as db:
            sort_order = payload.sort_order
            if sort_order is None:
                sort_order = TemplateReadRepo(db).count()
            row = TemplateWriteRepo(db).create(name=name, content=content, sort_order=sort_order)
            db.commit()
            return TemplateOut.model_validate(row)

    def update(self, template_id: str, payload: TemplateUpdateRequest) -> TemplateOut:
        name = normalize_template_name(payload.name) if payload.name is not None else None
        content = validate_template_content(payload.content) if payload.content is not None else None
        with self._session_factory() as db:
            row = self._require(db, template_id)
            row = TemplateWriteRepo(db).update(row, name=name, content=content, sort_order=payload.sort_order)
            db.commit()
            return TemplateOut.model_validate(row)

    def delete(self, template_id: str) -> None:
        with self._session_factory() as db:
            row = self._require(db, template_id)
            TemplateWriteRepo(db).delete(row)
            db.commit()

    def apply(self, template_id: str, prompt_text: str) -> str:
        """Template content followed by the user's text."""
        template = self.get(template_id)
        text = (prompt_text or "").strip()
        if not text:
            return ""
        return f"{template.content}\n\n{text}"

    def _require(self, db: Session, template_id: str) -> CustomTemplate:
        row = TemplateReadRepo(db).get_by_id(template_id)
        if not row:
            raise not_found(ErrorCode.TEMPLATE_NOT_FOUND, "Template not found", details={"id": template_id})
        return row
