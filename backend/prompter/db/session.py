"""
db/session.py
- Purpose: Engine + session factory construction.
- Design: Built explicitly by the app lifespan (and tests); nothing global.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from prompter.db.base import Base


def create_db_engine(database_url: str) -> Engine:
    kwargs: dict = {"pool_pre_ping": True}
    is_sqlite = database_url.startswith("sqlite")

    if is_sqlite:
        # API handlers and generation tasks share the connection pool across threads
        kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool

    engine = create_engine(database_url, **kwargs)

    if is_sqlite:
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _record):  # noqa: ANN001
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create missing tables. Alembic remains the path for schema changes."""
    Base.metadata.create_all(engine)
