"""
db/base.py
- Purpose: Provide Base + ensure models are imported for Alembic / create_all.
"""

from prompter.models.base import Base
import prompter.models  # noqa: F401  (ensures models are imported)

__all__ = ["Base"]
