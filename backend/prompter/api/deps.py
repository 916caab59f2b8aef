from typing import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from prompter.core.config import Settings
from prompter.services.generation_service import GenerationOrchestrator
from prompter.services.history_service import HistoryService
from prompter.services.settings_service import SettingsService
from prompter.services.template_service import TemplateService


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Yields a DB session per request.
    Ensures the session is closed even on exceptions.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_config(request: Request) -> Settings:
    return request.app.state.settings


def get_history_service(request: Request) -> HistoryService:
    return request.app.state.history


def get_orchestrator(request: Request) -> GenerationOrchestrator:
    """
    The single orchestrator built in the app lifespan.
    Overridable via app.dependency_overrides in tests.
    """
    return request.app.state.orchestrator


def get_template_service(request: Request) -> TemplateService:
    return request.app.state.templates


def get_settings_service(request: Request) -> SettingsService:
    return request.app.state.user_settings
