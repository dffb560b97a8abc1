"""
Data models for email dispatch.

These are transient per-call values: nothing here is persisted.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Union


@dataclass(frozen=True)
class BinaryContent:
    """Raw attachment bytes"""

    data: bytes


@dataclass(frozen=True)
class Base64Content:
    """Base64 text, optionally carrying a data-URI prefix"""

    data: str


@dataclass(frozen=True)
class RemoteRef:
    """Attachment fetched from a URL by the transport at send time"""

    url: str


AttachmentContent = Union[BinaryContent, Base64Content, RemoteRef]


@dataclass
class Attachment:
    """
    Email attachment.

    Attributes:
        content: Exactly one representation (binary, base64 text or remote URL)
        filename: Original filename (transports fall back to a default)
        content_type: MIME type, if known
    """

    content: AttachmentContent
    filename: Optional[str] = None
    content_type: Optional[str] = None

    @classmethod
    def from_raw(
        cls,
        filename: Optional[str] = None,
        content: Union[bytes, bytearray, str, None] = None,
        url: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> "Attachment":
        """
        Pick the content variant once, from whatever the caller has.

        Raises:
            ValueError: If both or neither of content and url are given
        """
        if url and content:
            raise ValueError(f"Attachment '{filename}' has both content and url")

        if isinstance(content, (bytes, bytearray)):
            variant: AttachmentContent = BinaryContent(bytes(content))
        elif isinstance(content, str) and content:
            variant = Base64Content(content)
        elif url:
            variant = RemoteRef(url)
        else:
            raise ValueError(f"Attachment '{filename}' has no content or url")

        return cls(content=variant, filename=filename, content_type=content_type)


@dataclass
class EmailPayload:
    """A single outgoing message"""

    to: str
    subject: str = ""
    html: str = ""
    cc: list[str] = field(default_factory=list)
    bcc: list[str] = field(default_factory=list)
    attachments: list[Attachment] = field(default_factory=list)

    def __post_init__(self):
        if not self.to:
            raise ValueError("Recipient address is required")

    @property
    def recipients(self) -> list[str]:
        """Envelope recipients: to + cc + bcc"""
        return [self.to, *self.cc, *self.bcc]


@dataclass
class SmtpConfig:
    """User-supplied SMTP credentials"""

    host: str
    port: int
    user: str
    password: str
    secure: bool = False
    name: Optional[str] = None

    @property
    def is_usable(self) -> bool:
        """A config is usable only if host, port, user and password are all set"""
        return bool(self.host and self.port and self.user and self.password)

    def __repr__(self) -> str:
        return (
            f"SmtpConfig(host={self.host!r}, port={self.port}, secure={self.secure}, "
            f"user={self.user!r}, password='***', name={self.name!r})"
        )


@dataclass
class DispatchResult:
    """Outcome of a successful dispatch"""

    success: bool
    provider: str  # "smtp" or "resend"
    message_id: Optional[str]
    from_address: str
    reply_to: Optional[str] = None
    note: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        result = {
            "success": self.success,
            "id": self.message_id,
            "provider": self.provider,
            "from": self.from_address,
        }
        if self.reply_to:
            result["reply_to"] = self.reply_to
        if self.note:
            result["note"] = self.note
        return result
