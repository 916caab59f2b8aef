from fastapi import APIRouter, Depends, status

from prompter.api.deps import get_template_service
from prompter.schemas.template import TemplateCreateRequest, TemplateOut, TemplateUpdateRequest
from prompter.services.template_service import TemplateService

router = APIRouter(prefix="/api/templates", tags=["Templates"])


@router.get("", response_model=list[TemplateOut])
def list_templates(svc: TemplateService = Depends(get_template_service)):
    return svc.list()


@router.post("", response_model=TemplateOut, status_code=status.HTTP_201_CREATED)
def create_template(payload: TemplateCreateRequest, svc: TemplateService = Depends(get_template_service)):
    return svc.create(payload)


@router.get("/{template_id}", response_model=TemplateOut)
def get_template(template_id: str, svc: TemplateService = Depends(get_template_service)):
    return svc.get(template_id)


@router.put("/{template_id}", response_model=TemplateOut)
def update_template(
    template_id: str,
    payload: TemplateUpdateRequest,
    svc: TemplateService = Depends(get_template_service),
):
    return svc.update(template_id, payload)


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_template(template_id: str, svc: TemplateService = Depends(get_template_service)):
    svc.delete(template_id)
