import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_id():
    """Generate a unique string ID for template records"""
    return str(uuid.uuid4())


class EmailTemplate(Base):
    __tablename__ = "templates"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(128), index=True, nullable=False)  # owner identity from the gateway
    name = Column(String(255), nullable=False)
    content = Column(Text, nullable=False, default="")  # HTML body
    description = Column(Text, nullable=True)
    channel = Column(String(20), nullable=False, default="email")  # only email is supported
    signature = Column(Text, nullable=True)
    signature_image = Column(String(500), nullable=True)  # copied from UserSettings on save
    attachments = Column(JSON, nullable=False, default=list)  # [{name, type, size, url, path}]
    status = Column(String(20), nullable=False, default="active")  # active, inactive
    image_url = Column(String(500), nullable=True)
    template_file_url = Column(String(500), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    scheduled_emails = relationship("ScheduledEmail", back_populates="template")


class ScheduledEmail(Base):
    __tablename__ = "scheduled_emails"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(128), index=True, nullable=False)
    template_id = Column(String(36), ForeignKey("templates.id"), nullable=False, index=True)
    contact_name = Column(String(255), nullable=True)
    send_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    template = relationship("EmailTemplate", back_populates="scheduled_emails")


class SentEmail(Base):
    __tablename__ = "sent_emails"

    id = Column(Integer, primary_key=True, index=True)
    # No foreign key: sent rows outlive the template they were built from
    template_id = Column(String(36), nullable=True, index=True)
    contact_id = Column(String(128), nullable=True)
    sent_at = Column(DateTime, server_default=func.now())
    status = Column(String(30), nullable=False, default="sent")  # sent, template_deleted


class UserSettings(Base):
    __tablename__ = "user_settings"

    user_id = Column(String(128), primary_key=True)
    from_name = Column(String(255), nullable=True)
    signature_image = Column(String(500), nullable=True)
    use_smtp = Column(Boolean, default=False, nullable=False)
    smtp_host = Column(String(255), nullable=True)
    smtp_port = Column(Integer, nullable=True)
    smtp_secure = Column(Boolean, default=False, nullable=False)
    smtp_username = Column(String(255), nullable=True)
    smtp_password = Column(Text, nullable=True)  # Fernet-encrypted
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
