"""Template service - Business logic for template operations"""

import json
import logging
from typing import Any, Optional

from botocore.exceptions import BotoCoreError, ClientError
from fastapi import HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ...config import (
    TEMPLATE_ATTACHMENTS_BUCKET,
    TEMPLATE_ATTACHMENTS_PUBLIC_URL,
    TEMPLATE_FILES_BUCKET,
    TEMPLATE_FILES_PUBLIC_URL,
    TEMPLATE_IMAGES_BUCKET,
    TEMPLATE_IMAGES_PUBLIC_URL,
)
from ...models import EmailTemplate
from ...utils.storage import (
    R2BlobStore,
    StorageError,
    generate_storage_path,
    path_from_public_url,
)
from .repository import TemplateRepository
from .schemas import TemplateCreate, TemplateUpdate

logger = logging.getLogger(__name__)

DEFAULT_STATUS = "active"
COPY_SUFFIX = " (Copy)"


def normalize_template_attachments(value: Any) -> list[dict]:
    """
    Coerce stored or submitted attachments into a list of dicts.

    Older records hold a JSON string, a single object, or invalid JSON;
    anything unreadable becomes an empty list.
    """
    if value is None:
        return []

    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            logger.warning("⚠️ Discarding attachments stored as invalid JSON")
            return []

    if isinstance(value, (dict, BaseModel)):
        value = [value]

    if not isinstance(value, list):
        return []

    attachments = []
    for item in value:
        if isinstance(item, BaseModel):
            attachments.append(item.model_dump(exclude_none=True))
        elif isinstance(item, dict):
            attachments.append(dict(item))
    return attachments


class TemplateService:
    """Service layer for template business logic"""

    def __init__(
        self,
        db: Session,
        attachments_store: Optional[R2BlobStore] = None,
        files_store: Optional[R2BlobStore] = None,
        images_store: Optional[R2BlobStore] = None,
    ):
        self.db = db
        self.repo = TemplateRepository()
        self.attachments_store = attachments_store or R2BlobStore(
            TEMPLATE_ATTACHMENTS_BUCKET, public_base_url=TEMPLATE_ATTACHMENTS_PUBLIC_URL
        )
        self.files_store = files_store or R2BlobStore(
            TEMPLATE_FILES_BUCKET, public_base_url=TEMPLATE_FILES_PUBLIC_URL
        )
        self.images_store = images_store or R2BlobStore(
            TEMPLATE_IMAGES_BUCKET, public_base_url=TEMPLATE_IMAGES_PUBLIC_URL
        )

    def list_templates(self, user_id: str) -> list[EmailTemplate]:
        return self.repo.get_templates(self.db, user_id)

    def get_template(self, template_id: str, user_id: str) -> EmailTemplate:
        template = self.repo.get_template(self.db, template_id, user_id)
        if not template:
            raise HTTPException(status_code=404, detail="Template not found")
        return template

    def _signature_image(self, user_id: str) -> Optional[str]:
        """Templates always carry the signature image from the user's settings"""
        settings = self.repo.get_user_settings(self.db, user_id)
        return settings.signature_image if settings else None

    def upload_attachment(
        self, user_id: str, filename: str, data: bytes, content_type: Optional[str] = None
    ) -> dict:
        """Upload a file to attachment storage and return its stored metadata"""
        path = generate_storage_path(user_id, filename)
        try:
            url = self.attachments_store.get_public_url(path)
            self.attachments_store.upload(path, data, content_type=content_type)
        except StorageError as e:
            logger.error(f"❌ Error uploading attachment {filename}: {e}")
            raise HTTPException(status_code=502, detail=f"Failed to upload attachment: {e}") from e

        return {
            "name": filename,
            "type": content_type,
            "size": len(data),
            "url": url,
            "path": path,
        }

    def create_template(self, data: TemplateCreate, user_id: str) -> EmailTemplate:
        logger.info(f"📥 Creating template '{data.name}' for user {user_id}")

        template_data = {
            "name": data.name,
            "content": data.content,
            "description": data.description,
            "signature": data.signature,
            "channel": "email",
            "status": data.status or DEFAULT_STATUS,
            "signature_image": self._signature_image(user_id),
            "image_url": data.image_url or None,
            "template_file_url": data.template_file_url or None,
            "attachments": normalize_template_attachments(data.attachments),
        }

        template = self.repo.create_template(self.db, user_id, **template_data)
        logger.info(
            f"✅ Created template {template.id} with {len(template.attachments)} attachment(s)"
        )
        return template

    def update_template(self, template_id: str, data: TemplateUpdate, user_id: str) -> EmailTemplate:
        template = self.get_template(template_id, user_id)

        updates = data.model_dump(exclude_unset=True)
        if "attachments" in updates:
            updates["attachments"] = normalize_template_attachments(data.attachments)
        if "status" in updates:
            updates["status"] = updates["status"] or DEFAULT_STATUS
        if "image_url" in updates:
            updates["image_url"] = updates["image_url"] or None
        if updates.get("name") is None:
            updates.pop("name", None)
        if updates.get("content") is None:
            updates.pop("content", None)

        updates["channel"] = "email"
        updates["signature_image"] = self._signature_image(user_id)

        logger.info(f"📝 Updating template {template_id}: {sorted(updates)}")
        return self.repo.update_template(self.db, template, **updates)

    def duplicate_template(self, template_id: str, user_id: str) -> EmailTemplate:
        original = self.get_template(template_id, user_id)

        template_data = {
            "name": f"{original.name}{COPY_SUFFIX}",
            "content": original.content,
            "description": original.description or "",
            "channel": original.channel or "email",
            "signature": original.signature,
            "signature_image": original.signature_image,
            "attachments": normalize_template_attachments(original.attachments),
            "status": original.status or DEFAULT_STATUS,
            "image_url": original.image_url or None,
        }

        duplicate = self.repo.create_template(self.db, user_id, **template_data)
        logger.info(f"✅ Duplicated template {template_id} as {duplicate.id}")
        return duplicate

    def delete_template(self, template_id: str, user_id: str) -> None:
        """
        Delete a template and its stored files.

        Refuses while scheduled emails still use the template. Sent emails
        are kept and marked template_deleted. File cleanup is best effort.
        """
        template = self.get_template(template_id, user_id)

        scheduled = self.repo.get_scheduled_emails(self.db, template_id)
        if scheduled:
            details = "\n".join(
                f"- {s.contact_name or 'Unknown contact'} (scheduled for {s.send_at:%Y-%m-%d})"
                for s in scheduled
            )
            logger.warning(
                f"⚠️ Template {template_id} is used by {len(scheduled)} scheduled email(s)"
            )
            raise HTTPException(
                status_code=409,
                detail=(
                    "This template is used by scheduled emails:\n"
                    f"{details}\n\n"
                    "Cancel the scheduled emails before deleting the template."
                ),
            )

        marked = self.repo.mark_sent_emails_template_deleted(self.db, template_id)
        if marked:
            logger.info(f"Marked {marked} sent email(s) as template_deleted")

        self._remove_stored_files(template, user_id)

        self.repo.delete_template(self.db, template)
        logger.info(f"🗑️ Deleted template {template_id}")

    def _remove_stored_files(self, template: EmailTemplate, user_id: str) -> None:
        attachment_paths = [
            a["path"] for a in normalize_template_attachments(template.attachments) if a.get("path")
        ]
        cleanup = [(self.attachments_store, attachment_paths)]
        if template.template_file_url:
            cleanup.append(
                (self.files_store, [path_from_public_url(template.template_file_url, user_id)])
            )
        if template.image_url:
            cleanup.append((self.images_store, [path_from_public_url(template.image_url, user_id)]))

        for store, paths in cleanup:
            if not paths:
                continue
            try:
                store.remove(paths)
            except (ClientError, BotoCoreError) as e:
                # Continue with deletion even if file cleanup fails
                logger.error(f"❌ Failed to remove {paths} from {store.bucket}: {e}")
