"""
Attachment normalization shared by every transport.

Both transports submit attachments in the same shape: inline content as
base64 text, or a URL reference the transport resolves itself.
"""

import base64
import logging
from dataclasses import dataclass
from typing import Optional

from .models import Attachment, Base64Content, BinaryContent, RemoteRef

logger = logging.getLogger(__name__)

DEFAULT_ATTACHMENT_FILENAME = "attachment.file"
DATA_URI_MARKER = "base64,"


@dataclass(frozen=True)
class OutboundAttachment:
    filename: str
    content_type: Optional[str] = None
    content: Optional[str] = None  # base64 text
    path: Optional[str] = None  # remote URL

    def to_resend(self) -> dict:
        """Attachment dict in the shape the Resend API expects"""
        result = {"filename": self.filename}
        if self.content is not None:
            result["content"] = self.content
        if self.path is not None:
            result["path"] = self.path
        if self.content_type:
            result["content_type"] = self.content_type
        return result


def strip_data_uri(value: str) -> str:
    """Drop a `data:<mime>;base64,` prefix, leaving the raw base64 payload"""
    if DATA_URI_MARKER in value:
        return value.split(DATA_URI_MARKER, 1)[1]
    return value


def normalize_attachment(attachment: Attachment) -> OutboundAttachment:
    filename = attachment.filename or DEFAULT_ATTACHMENT_FILENAME
    content = attachment.content

    if isinstance(content, BinaryContent):
        encoded = base64.b64encode(content.data).decode("ascii")
        return OutboundAttachment(filename, attachment.content_type, content=encoded)

    if isinstance(content, Base64Content):
        return OutboundAttachment(
            filename, attachment.content_type, content=strip_data_uri(content.data)
        )

    if isinstance(content, RemoteRef):
        return OutboundAttachment(filename, attachment.content_type, path=content.url)

    raise TypeError(f"Unsupported attachment content: {type(content).__name__}")


def normalize_attachments(attachments: list[Attachment]) -> list[OutboundAttachment]:
    normalized = []
    for attachment in attachments:
        logger.debug(f"Processing attachment: {attachment.filename or 'unnamed'}")
        normalized.append(normalize_attachment(attachment))
    return normalized
