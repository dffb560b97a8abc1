"""Hosted email API transport (Resend)"""

import logging
import threading
from typing import Any, Optional

import resend
from resend.exceptions import ResendError

from ...config import DEFAULT_FROM_NAME, RESEND_FROM_ADDRESS
from .attachments import normalize_attachments
from .exceptions import ConfigurationError, EmailDispatchError, ProviderError, TransportError
from .models import DispatchResult, EmailPayload

logger = logging.getLogger(__name__)

# The SDK reads its key from module state; hold this while setting it and sending
_api_key_lock = threading.Lock()


def _field(response: Any, key: str) -> Any:
    if isinstance(response, dict):
        return response.get(key)
    return getattr(response, key, None)


class ResendTransport:
    name = "resend"
    label = "Resend"

    def __init__(
        self,
        api_key: Optional[str],
        from_name: Optional[str] = None,
        reply_to: Optional[str] = None,
        from_address: str = RESEND_FROM_ADDRESS,
    ):
        self.api_key = api_key
        self.from_name = from_name
        self.reply_to = reply_to
        self.from_address = from_address

    @property
    def from_header(self) -> str:
        return f"{self.from_name or DEFAULT_FROM_NAME} <{self.from_address}>"

    def build_params(self, payload: EmailPayload) -> dict:
        """Request body for resend.Emails.send"""
        params: dict[str, Any] = {
            "from": self.from_header,
            "to": [payload.to],
            "subject": payload.subject,
            "html": payload.html,
        }
        if self.reply_to:
            params["reply_to"] = self.reply_to
        if payload.cc:
            params["cc"] = list(payload.cc)
        if payload.bcc:
            params["bcc"] = list(payload.bcc)
        if payload.attachments:
            params["attachments"] = [
                attachment.to_resend() for attachment in normalize_attachments(payload.attachments)
            ]
            logger.info(f"Adding {len(params['attachments'])} attachments to email (Resend)")
        return params

    def send(self, payload: EmailPayload) -> DispatchResult:
        if not self.api_key:
            raise ConfigurationError(
                "Missing Resend API key. Set RESEND_API_KEY in the environment.",
                provider=self.name,
            )

        params = self.build_params(payload)
        logger.info("📧 Sending email via Resend")
        logger.info(f"From: {params['from']} To: {payload.to}")
        logger.info(f"Subject: {payload.subject}")

        try:
            with _api_key_lock:
                resend.api_key = self.api_key
                response = resend.Emails.send(params)
        except ResendError as e:
            logger.error(f"❌ Resend rejected the email: {e}")
            raise ProviderError(
                getattr(e, "message", None) or str(e), provider=self.name
            ) from e
        except Exception as e:
            logger.error(f"❌ Failed to send email via Resend: {e}")
            raise TransportError(f"Failed to reach Resend: {e}", provider=self.name) from e

        # The API can report an error in the body without the client raising
        error = _field(response, "error")
        if error:
            message = error if isinstance(error, str) else _field(error, "message")
            message = message or "Unknown Resend error"
            logger.error(f"❌ Resend returned an error: {message}")
            raise ProviderError(message, provider=self.name)

        message_id = _field(response, "id")
        if not message_id:
            raise ProviderError("Resend returned no message id", provider=self.name)

        logger.info(f"✅ Email sent successfully via Resend: {message_id}")
        return DispatchResult(
            success=True,
            provider=self.name,
            message_id=message_id,
            from_address=params["from"],
            reply_to=self.reply_to,
        )

    def contextualize(self, error: EmailDispatchError) -> EmailDispatchError:
        return error
