"""
Sender Settings Routes
Display name, signature image and the user's own SMTP server
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_current_user_id
from ..database import get_db
from ..models import UserSettings
from ..schemas import SettingsResponse, SettingsUpdate
from ..utils.encryption import encrypt_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["Settings"])

NON_NULLABLE_FLAGS = ("use_smtp", "smtp_secure")


def to_response(user_id: str, settings: Optional[UserSettings]) -> SettingsResponse:
    if not settings:
        return SettingsResponse(user_id=user_id)
    response = SettingsResponse.model_validate(settings)
    response.smtp_configured = bool(
        settings.smtp_host and settings.smtp_port and settings.smtp_username and settings.smtp_password
    )
    return response


@router.get("", response_model=SettingsResponse)
async def get_settings(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    settings = db.query(UserSettings).filter(UserSettings.user_id == user_id).first()
    return to_response(user_id, settings)


@router.put("", response_model=SettingsResponse)
async def update_settings(
    data: SettingsUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Save sender settings. The SMTP password is encrypted before storage."""
    settings = db.query(UserSettings).filter(UserSettings.user_id == user_id).first()
    if not settings:
        settings = UserSettings(user_id=user_id)
        db.add(settings)

    updates = data.model_dump(exclude_unset=True)
    password = updates.pop("smtp_password", None)
    for key, value in updates.items():
        if value is None and key in NON_NULLABLE_FLAGS:
            continue
        setattr(settings, key, value)
    if password:
        settings.smtp_password = encrypt_password(password)

    db.commit()
    db.refresh(settings)

    logger.info(f"✅ Saved sender settings for user {user_id} (use_smtp={settings.use_smtp})")
    return to_response(user_id, settings)
