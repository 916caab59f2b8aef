"""
models package
- Purpose: Import all ORM models so Alembic autogenerate discovers them.
- Important: Alembic only sees models that are imported somewhere.
"""

from prompter.models.prompt_history import PromptHistory
from prompter.models.prompt_version import PromptVersion
from prompter.models.custom_template import CustomTemplate
from prompter.models.app_setting import AppSetting

__all__ = [
    "PromptHistory",
    "PromptVersion",
    "CustomTemplate",
    "AppSetting",
]
