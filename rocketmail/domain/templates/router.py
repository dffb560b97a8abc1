"""Template router - FastAPI endpoints for template operations"""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.orm import Session

from ...auth import get_current_user_id
from ...database import get_db
from .schemas import StoredAttachment, TemplateCreate, TemplateResponse, TemplateUpdate
from .service import TemplateService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/templates", tags=["Templates"])

MAX_ATTACHMENT_SIZE_BYTES = 10 * 1024 * 1024  # 10MB


def get_template_service(db: Session = Depends(get_db)) -> TemplateService:
    """Dependency injection for TemplateService"""
    return TemplateService(db)


@router.get("", response_model=list[TemplateResponse])
async def list_templates(
    user_id: str = Depends(get_current_user_id),
    service: TemplateService = Depends(get_template_service),
):
    return service.list_templates(user_id)


@router.post("", response_model=TemplateResponse, status_code=201)
async def create_template(
    data: TemplateCreate,
    user_id: str = Depends(get_current_user_id),
    service: TemplateService = Depends(get_template_service),
):
    return service.create_template(data, user_id)


@router.post("/attachments", response_model=StoredAttachment, status_code=201)
async def upload_attachment(
    file: UploadFile = File(...),
    user_id: str = Depends(get_current_user_id),
    service: TemplateService = Depends(get_template_service),
):
    """Upload a file for use as a template attachment"""
    content = await file.read()
    if len(content) > MAX_ATTACHMENT_SIZE_BYTES:
        raise HTTPException(status_code=413, detail="Attachment exceeds the 10MB limit")

    logger.info(f"📤 Uploading attachment '{file.filename}' ({len(content)} bytes) for {user_id}")
    return service.upload_attachment(
        user_id, file.filename or "attachment.file", content, file.content_type
    )


@router.get("/{template_id}", response_model=TemplateResponse)
async def get_template(
    template_id: str,
    user_id: str = Depends(get_current_user_id),
    service: TemplateService = Depends(get_template_service),
):
    return service.get_template(template_id, user_id)


@router.put("/{template_id}", response_model=TemplateResponse)
async def update_template(
    template_id: str,
    data: TemplateUpdate,
    user_id: str = Depends(get_current_user_id),
    service: TemplateService = Depends(get_template_service),
):
    return service.update_template(template_id, data, user_id)


@router.post("/{template_id}/duplicate", response_model=TemplateResponse, status_code=201)
async def duplicate_template(
    template_id: str,
    user_id: str = Depends(get_current_user_id),
    service: TemplateService = Depends(get_template_service),
):
    return service.duplicate_template(template_id, user_id)


@router.delete("/{template_id}")
async def delete_template(
    template_id: str,
    user_id: str = Depends(get_current_user_id),
    service: TemplateService = Depends(get_template_service),
):
    service.delete_template(template_id, user_id)
    return {"message": "Template deleted"}
