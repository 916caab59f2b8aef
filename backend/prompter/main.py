# prompter/main.py
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from prompter.core.config import Settings, settings as default_settings
from prompter.core.exception_handlers import register_exception_handlers
from prompter.core.logging_config import configure_logging
from prompter.db.session import create_db_engine, create_session_factory, init_db
from prompter.llm.client import GenerationClient, build_generation_client
from prompter.middleware.request_logging import RequestLoggingMiddleware
from prompter.repos.history.json_store import JsonHistoryStore
from prompter.repos.history.store import HistoryStore, SqlHistoryStore
from prompter.routers.generations import router as generations_router
from prompter.routers.health import router as health_router
from prompter.routers.history import router as history_router
from prompter.routers.llm_health import router as llm_health_router
from prompter.routers.root import router as root_router
from prompter.routers.settings import router as settings_router
from prompter.routers.templates import router as templates_router
from prompter.services.generation_service import GenerationOrchestrator
from prompter.services.history_service import HistoryService
from prompter.services.settings_service import SettingsService
from prompter.services.template_service import TemplateService

configure_logging()


def _split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [v.strip() for v in value.split(",") if v.strip()]


def build_history_store(config: Settings, session_factory) -> HistoryStore:
    if config.HISTORY_BACKEND.lower() == "json":
        return JsonHistoryStore(config.HISTORY_JSON_PATH)
    return SqlHistoryStore(session_factory)


def create_app(
    config: Optional[Settings] = None,
    *,
    client_factory: Optional[Callable[[], GenerationClient]] = None,
) -> FastAPI:
    """
    `client_factory` replaces the provider-backed Generation Client (tests).
    """
    config = config or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = create_db_engine(config.DATABASE_URL)
        init_db(engine)
        session_factory = create_session_factory(engine)

        history = HistoryService(build_history_store(config, session_factory))
        history.load()

        templates = TemplateService(session_factory)
        templates.seed_defaults()

        user_settings = SettingsService(session_factory, config)

        app.state.settings = config
        app.state.engine = engine
        app.state.session_factory = session_factory
        app.state.history = history
        app.state.templates = templates
        app.state.user_settings = user_settings
        # client built per attempt so settings changes apply to the next generation
        app.state.orchestrator = GenerationOrchestrator(
            history,
            client_factory or (lambda: build_generation_client(config, user_settings.get())),
        )
        try:
            yield
        finally:
            await app.state.orchestrator.shutdown()
            engine.dispose()

    app = FastAPI(title=config.app_name, lifespan=lifespan)

    app.add_middleware(RequestLoggingMiddleware)

    # ---- CORS (env-driven) ----
    allow_origins = _split_csv(config.CORS_ALLOW_ORIGINS)
    if not allow_origins:
        allow_origins = ["http://localhost:3000", "tauri://localhost"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    register_exception_handlers(app)

    # Routers
    app.include_router(root_router)
    app.include_router(health_router)
    app.include_router(llm_health_router)
    app.include_router(history_router)
    app.include_router(generations_router)
    app.include_router(templates_router)
    app.include_router(settings_router)

    return app


app = create_app()
