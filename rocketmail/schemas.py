from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl, model_validator


class EmailAttachmentRequest(BaseModel):
    filename: Optional[str] = None
    content_type: Optional[str] = None
    content: Optional[str] = None  # base64, data-URI prefix allowed
    url: Optional[HttpUrl] = None  # http(s) only

    @model_validator(mode="after")
    def check_single_source(self):
        if self.content and self.url:
            raise ValueError("Provide either content or url, not both")
        if not self.content and not self.url:
            raise ValueError("Attachment needs content or url")
        return self


class SendEmailRequest(BaseModel):
    to: EmailStr
    cc: list[EmailStr] = []
    bcc: list[EmailStr] = []
    subject: str
    html: str
    attachments: list[EmailAttachmentRequest] = []
    use_smtp: Optional[bool] = None  # None uses the saved setting
    from_name: Optional[str] = None


class SettingsUpdate(BaseModel):
    from_name: Optional[str] = None
    signature_image: Optional[str] = None
    use_smtp: Optional[bool] = None
    smtp_host: Optional[str] = None
    smtp_port: Optional[int] = Field(None, ge=1, le=65535)  # 587 for STARTTLS, 465 for SSL
    smtp_secure: Optional[bool] = None
    smtp_username: Optional[str] = None
    smtp_password: Optional[str] = None


class SettingsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    from_name: Optional[str] = None
    signature_image: Optional[str] = None
    use_smtp: bool = False
    smtp_host: Optional[str] = None
    smtp_port: Optional[int] = None
    smtp_secure: bool = False
    smtp_username: Optional[str] = None
    smtp_configured: bool = False
