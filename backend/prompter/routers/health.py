from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text

from prompter.api.deps import get_config, get_db
from prompter.core.config import Settings

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health(config: Settings = Depends(get_config)):
    return {"status": "ok", "app": config.app_name, "env": config.env}


@router.get("/db/health")
def db_health(db: Session = Depends(get_db), config: Settings = Depends(get_config)):
    db.execute(text("select 1"))
    return {"status": "ok", "db": "connected", "history_backend": config.HISTORY_BACKEND}
