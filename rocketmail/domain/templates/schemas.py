"""Template domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class StoredAttachment(BaseModel):
    """Attachment metadata kept on a template (the file itself lives in blob storage)"""

    model_config = ConfigDict(extra="allow")

    name: str
    type: Optional[str] = None
    size: Optional[int] = None
    url: Optional[str] = None
    path: Optional[str] = None


class TemplateCreate(BaseModel):
    """Schema for creating a new template"""

    name: str
    content: str = ""
    description: Optional[str] = None
    signature: Optional[str] = None
    attachments: Optional[list[StoredAttachment]] = None
    status: Optional[str] = None
    image_url: Optional[str] = None
    template_file_url: Optional[str] = None


class TemplateUpdate(BaseModel):
    """Schema for updating an existing template"""

    name: Optional[str] = None
    content: Optional[str] = None
    description: Optional[str] = None
    signature: Optional[str] = None
    attachments: Optional[list[StoredAttachment]] = None
    status: Optional[str] = None
    image_url: Optional[str] = None
    template_file_url: Optional[str] = None


class TemplateResponse(BaseModel):
    """Schema for template response"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    name: str
    content: str
    description: Optional[str] = None
    channel: str
    signature: Optional[str] = None
    signature_image: Optional[str] = None
    attachments: list[StoredAttachment] = []
    status: str
    image_url: Optional[str] = None
    template_file_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
