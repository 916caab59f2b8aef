"""
history.py
- Purpose: API routes for browsing and curating prompt history.
- Design: Keep router thin. Handlers are async so every history mutation runs
  on the event loop alongside the generation tasks.
"""

from fastapi import APIRouter, Depends, Query

from prompter.api.deps import get_history_service, get_orchestrator
from prompter.schemas.history import FavoriteRequest, HistoryRecord, SelectVersionRequest
from prompter.services.generation_service import GenerationOrchestrator
from prompter.services.history_service import ArchivedFilter, HistoryService

router = APIRouter(prefix="/api/history", tags=["History"])


@router.get("", response_model=list[HistoryRecord])
async def list_history(
    archived: ArchivedFilter = Query("false"),
    history: HistoryService = Depends(get_history_service),
):
    return history.list(archived)


@router.delete("")
async def clear_history(orchestrator: GenerationOrchestrator = Depends(get_orchestrator)):
    return {"deleted": orchestrator.clear()}


@router.get("/{record_id}", response_model=HistoryRecord)
async def get_history_record(record_id: str, history: HistoryService = Depends(get_history_service)):
    return history.require(record_id)


@router.delete("/{record_id}")
async def delete_history_record(
    record_id: str,
    history: HistoryService = Depends(get_history_service),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    history.require(record_id)
    orchestrator.delete(record_id)
    return {"id": record_id, "deleted": True}


@router.post("/{record_id}/archive", response_model=HistoryRecord)
async def archive_record(record_id: str, history: HistoryService = Depends(get_history_service)):
    return history.set_archived(record_id, True)


@router.post("/{record_id}/unarchive", response_model=HistoryRecord)
async def unarchive_record(record_id: str, history: HistoryService = Depends(get_history_service)):
    return history.set_archived(record_id, False)


@router.post("/{record_id}/favorite", response_model=HistoryRecord)
async def set_favorite(
    record_id: str,
    payload: FavoriteRequest,
    history: HistoryService = Depends(get_history_service),
):
    return history.set_favorite(record_id, payload.is_favorite)


@router.post("/{record_id}/select-version", response_model=HistoryRecord)
async def select_version(
    record_id: str,
    payload: SelectVersionRequest,
    history: HistoryService = Depends(get_history_service),
):
    return history.select_version(record_id, payload.index)
