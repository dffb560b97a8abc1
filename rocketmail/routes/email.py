"""
Email Routes - Send a message through the user's SMTP server or Resend
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_current_user_id
from ..config import RESEND_API_KEY
from ..database import get_db
from ..domain.email import Attachment, EmailPayload, SmtpConfig, send_email
from ..models import UserSettings
from ..schemas import SendEmailRequest
from ..utils.encryption import decrypt_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/email", tags=["Email"])

DEFAULT_SMTP_PORT = 587


def smtp_config_from_settings(
    settings: Optional[UserSettings], from_name: Optional[str] = None
) -> Optional[SmtpConfig]:
    """Build SmtpConfig from saved settings, or None if no SMTP host is saved"""
    if not settings or not settings.smtp_host:
        return None
    return SmtpConfig(
        host=settings.smtp_host,
        port=settings.smtp_port or DEFAULT_SMTP_PORT,
        user=settings.smtp_username or "",
        password=decrypt_password(settings.smtp_password),
        secure=bool(settings.smtp_secure),
        name=from_name or settings.from_name,
    )


def build_payload(data: SendEmailRequest) -> EmailPayload:
    attachments = [
        Attachment.from_raw(
            filename=a.filename,
            content=a.content,
            url=str(a.url) if a.url else None,
            content_type=a.content_type,
        )
        for a in data.attachments
    ]
    return EmailPayload(
        to=str(data.to),
        cc=[str(address) for address in data.cc],
        bcc=[str(address) for address in data.bcc],
        subject=data.subject,
        html=data.html,
        attachments=attachments,
    )


@router.post("/send")
def send_user_email(
    data: SendEmailRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Send an email using the caller's saved sender settings"""
    settings = db.query(UserSettings).filter(UserSettings.user_id == user_id).first()

    use_smtp = data.use_smtp if data.use_smtp is not None else bool(settings and settings.use_smtp)
    from_name = data.from_name or (settings.from_name if settings else None)

    logger.info(f"📧 User {user_id} sending email to {data.to} (use_smtp={use_smtp})")
    result = send_email(
        build_payload(data),
        use_smtp=use_smtp,
        smtp_config=smtp_config_from_settings(settings, from_name),
        api_key=RESEND_API_KEY,
        from_name=from_name,
    )
    return result.to_dict()
