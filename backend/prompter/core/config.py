# prompter/core/config.py
import os
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).parent.parent.parent

class Settings(BaseSettings):
    app_name: str = "Prompter"
    env: str = "local"
    DATABASE_URL: str = "sqlite:///./prompter.db"

    # History persistence: "sql" (DATABASE_URL) or "json" (flat file)
    HISTORY_BACKEND: str = "sql"
    HISTORY_JSON_PATH: str = "./prompter_history.json"

    # =========================
    # LLM
    # =========================
    LLM_PROVIDER: str = "claude_cli"   # claude_cli | openai | gemini

    # Claude Code CLI (subprocess)
    CLAUDE_CLI_PATH: str | None = None
    CLAUDE_MODEL: str = "sonnet"

    # OpenAI-compatible chat completions
    OPENAI_API_KEY: str | None = None
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_MODEL: str = "gpt-4o"

    # Gemini
    GEMINI_API_KEY: str | None = None
    GEMINI_MODEL: str = "gemini-1.5-pro"

    # Runtime controls
    LLM_TIMEOUT_SECONDS: int = 120
    LLM_MAX_OUTPUT_TOKENS: int = 2048
    LLM_TEMPERATURE: float = 0.7

    # Observability
    LLM_LOG_PROMPTS: bool = False  # keep False by default (avoid leaking data)

    # Comma separated, e.g. "http://localhost:3000,tauri://localhost"
    CORS_ALLOW_ORIGINS: str | None = None

    model_config = SettingsConfigDict(
        env_file=os.path.join(PROJECT_ROOT, ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

settings = Settings()
