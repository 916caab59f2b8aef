"""
generations.py
- Purpose: API routes driving the generation lifecycle.
- Design: Handlers must be async: submit/retry schedule asyncio tasks on the
  running loop. Work happens in the background; clients poll GET /{id}.
"""

from fastapi import APIRouter, Body, Depends, Response, status

from prompter.api.deps import get_history_service, get_orchestrator, get_settings_service, get_template_service
from prompter.schemas.generation import (
    GenerationStateResponse,
    RetryGenerationRequest,
    SubmitGenerationRequest,
    SubmitGenerationResponse,
)
from prompter.services.generation_service import GenerationOrchestrator
from prompter.services.history_service import HistoryService
from prompter.services.settings_service import SettingsService
from prompter.services.template_service import TemplateService

router = APIRouter(prefix="/api/generations", tags=["Generations"])


def _state(orchestrator: GenerationOrchestrator, history: HistoryService, record_id: str) -> GenerationStateResponse:
    record = history.require(record_id)
    return GenerationStateResponse(
        id=record.id,
        status=record.status,
        error_message=record.error_message,
        is_active=orchestrator.is_active(record.id),
        preview=orchestrator.preview(record.id),
        version_count=len(record.versions),
        selected_version_index=record.selected_version_index,
    )


@router.post("", response_model=SubmitGenerationResponse, status_code=status.HTTP_202_ACCEPTED)
async def submit_generation(
    payload: SubmitGenerationRequest,
    response: Response,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
    history: HistoryService = Depends(get_history_service),
    templates: TemplateService = Depends(get_template_service),
    user_settings: SettingsService = Depends(get_settings_service),
):
    text = payload.prompt_text
    if payload.template_id:
        text = templates.apply(payload.template_id, text)

    instruction = user_settings.resolve_system_instruction(payload.mode, payload.system_instruction)
    record_id = orchestrator.submit(text, instruction, stream=payload.stream)
    if record_id is None:
        response.status_code = status.HTTP_200_OK
        return SubmitGenerationResponse(id=None, status=None)

    return SubmitGenerationResponse(id=record_id, status=history.require(record_id).status)


@router.get("/active", response_model=list[str])
async def list_active(orchestrator: GenerationOrchestrator = Depends(get_orchestrator)):
    return orchestrator.active_ids()


@router.get("/{record_id}", response_model=GenerationStateResponse)
async def get_generation_state(
    record_id: str,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
    history: HistoryService = Depends(get_history_service),
):
    return _state(orchestrator, history, record_id)


@router.post("/{record_id}/cancel", response_model=GenerationStateResponse)
async def cancel_generation(
    record_id: str,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
    history: HistoryService = Depends(get_history_service),
):
    history.require(record_id)
    orchestrator.cancel(record_id)
    return _state(orchestrator, history, record_id)


@router.post("/{record_id}/retry", response_model=SubmitGenerationResponse, status_code=status.HTTP_202_ACCEPTED)
async def retry_generation(
    record_id: str,
    payload: RetryGenerationRequest | None = Body(default=None),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
    history: HistoryService = Depends(get_history_service),
    user_settings: SettingsService = Depends(get_settings_service),
):
    payload = payload or RetryGenerationRequest()
    instruction = None
    if payload.system_instruction or payload.mode:
        instruction = user_settings.resolve_system_instruction(payload.mode or "improve", payload.system_instruction)

    orchestrator.retry(record_id, instruction, stream=payload.stream)
    return SubmitGenerationResponse(id=record_id, status=history.require(record_id).status)
