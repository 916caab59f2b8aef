"""
template/write.py
- Purpose: Write-side DB operations for custom templates.
- Design: No business logic; persistence only. Service controls the transaction.
"""

from sqlalchemy.orm import Session

from prompter.models.custom_template import CustomTemplate


class TemplateWriteRepo:
    def __init__(self, db: Session):
        self.db = db

    def create(self, *, name: str, content: str, is_default: bool = False, sort_order: int = 0) -> CustomTemplate:
        row = CustomTemplate(name=name, content=content, is_default=is_default, sort_order=sort_order)
        self.db.add(row)
        self.db.flush()
        self.db.refresh(row)
        return row

    def update(
        self,
        row: CustomTemplate,
        *,
        name: str | None = None,
        content: str | None = None,
        sort_order: int | None = None,
    ) -> CustomTemplate:
        if name is not None:
            row.name = name
        if content is not None:
            row.content = content
        if sort_order is not None:
            row.sort_order = sort_order
        self.db.flush()
        self.db.refresh(row)
        return row

    def delete(self, row: CustomTemplate) -> None:
        self.db.delete(row)
        self.db.flush()
