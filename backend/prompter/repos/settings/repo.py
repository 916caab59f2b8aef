"""
settings/repo.py
- Purpose: Key/value persistence for user settings.
"""

from sqlalchemy.orm import Session

from prompter.models.app_setting import AppSetting


class SettingsRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_all(self) -> dict[str, str]:
        rows = self.db.query(AppSetting).all()
        return {r.key: r.value for r in rows if r.value is not None}

    def set(self, key: str, value: str | None) -> None:
        row = self.db.get(AppSetting, key)
        if value is None:
            if row is not None:
                self.db.delete(row)
        elif row is None:
            self.db.add(AppSetting(key=key, value=value))
        else:
            row.value = value
        self.db.flush()
