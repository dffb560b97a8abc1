"""Email domain - Dispatch through SMTP with Resend fallback"""

from .dispatcher import EmailDispatcher, build_transports, send_email
from .exceptions import (
    CompositeFailure,
    ConfigurationError,
    EmailDispatchError,
    ProviderError,
    TransportError,
    VerificationError,
)
from .models import (
    Attachment,
    Base64Content,
    BinaryContent,
    DispatchResult,
    EmailPayload,
    RemoteRef,
    SmtpConfig,
)
from .resend_api import ResendTransport
from .smtp import SmtpTransport

__all__ = [
    "Attachment",
    "Base64Content",
    "BinaryContent",
    "CompositeFailure",
    "ConfigurationError",
    "DispatchResult",
    "EmailDispatchError",
    "EmailDispatcher",
    "EmailPayload",
    "ProviderError",
    "RemoteRef",
    "ResendTransport",
    "SmtpConfig",
    "SmtpTransport",
    "TransportError",
    "VerificationError",
    "build_transports",
    "send_email",
]
