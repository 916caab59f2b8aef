"""
template/read.py
- Purpose: Read-side DB operations for custom templates.
"""

from sqlalchemy import func
from sqlalchemy.orm import Session

from prompter.models.custom_template import CustomTemplate


class TemplateReadRepo:
    def __init__(self, db: Session):
        self.db = db

    def list_all(self) -> list[CustomTemplate]:
        return (
            self.db.query(CustomTemplate)
            .order_by(CustomTemplate.sort_order.asc(), CustomTemplate.name.asc())
            .all()
        )

    def get_by_id(self, template_id: str) -> CustomTemplate | None:
        return self.db.get(CustomTemplate, template_id)

    def find_by_name(self, name: str) -> CustomTemplate | None:
        return self.db.query(CustomTemplate).filter(CustomTemplate.name == name).first()

    def count(self) -> int:
        return int(self.db.query(func.count(CustomTemplate.id)).scalar() or 0)

    def max_sort_order(self) -> int:
        return int(self.db.query(func.max(CustomTemplate.sort_order)).scalar() or 0)
