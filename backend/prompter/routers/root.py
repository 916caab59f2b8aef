from fastapi import APIRouter, Depends

from prompter.api.deps import get_config
from prompter.core.config import Settings

router = APIRouter(prefix="/api", tags=["Root"])

@router.get("/")
def root(config: Settings = Depends(get_config)):
    return {"message": f"{config.app_name} backend running", "docs": "/docs"}
