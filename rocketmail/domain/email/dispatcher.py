"""
Email dispatch with transport fallback.

Transports are tried in order; the first success wins. With SMTP enabled and
usable the chain is SMTP then Resend, otherwise Resend alone.
"""

import logging
from typing import Iterable, Optional, Protocol

from .exceptions import CompositeFailure, ConfigurationError, EmailDispatchError
from .models import DispatchResult, EmailPayload, SmtpConfig
from .resend_api import ResendTransport
from .smtp import SmtpTransport

logger = logging.getLogger(__name__)

NO_TRANSPORT_MESSAGE = (
    "No email sending method available. Configure SMTP or provide Resend API key."
)


class EmailTransport(Protocol):
    name: str
    label: str

    def send(self, payload: EmailPayload) -> DispatchResult: ...

    def contextualize(self, error: EmailDispatchError) -> EmailDispatchError: ...


def build_transports(
    use_smtp: bool,
    smtp_config: Optional[SmtpConfig],
    api_key: Optional[str],
    from_name: Optional[str] = None,
) -> list[EmailTransport]:
    """Ordered transport chain for the given settings"""
    transports: list[EmailTransport] = []

    if use_smtp and smtp_config is not None and smtp_config.is_usable:
        transports.append(SmtpTransport(smtp_config))
    elif use_smtp:
        logger.warning("⚠️ SMTP requested but settings are incomplete, skipping SMTP")

    if api_key:
        reply_to = smtp_config.user if smtp_config is not None else None
        transports.append(ResendTransport(api_key, from_name=from_name, reply_to=reply_to or None))

    return transports


class EmailDispatcher:
    """Sends a payload through the first transport that succeeds"""

    def __init__(self, transports: Iterable[EmailTransport]):
        self.transports = list(transports)

    def dispatch(self, payload: EmailPayload) -> DispatchResult:
        if not self.transports:
            logger.error("❌ No email transport configured")
            raise ConfigurationError(NO_TRANSPORT_MESSAGE)

        failures: list[tuple[EmailTransport, EmailDispatchError]] = []
        for transport in self.transports:
            if failures:
                logger.info(f"{failures[-1][0].label} failed. Trying {transport.label} as fallback...")
            else:
                logger.info(f"Attempting to send via {transport.label}")

            try:
                result = transport.send(payload)
            except EmailDispatchError as e:
                logger.error(f"❌ {transport.label} send failed: {e.message}")
                failures.append((transport, e))
                continue

            if failures:
                result.note = f"Fallback from {failures[0][0].label} failure"
            return result

        if len(failures) == 1:
            transport, error = failures[0]
            raise transport.contextualize(error)

        raise CompositeFailure([(transport.label, error) for transport, error in failures])


def send_email(
    payload: EmailPayload,
    use_smtp: bool,
    smtp_config: Optional[SmtpConfig] = None,
    api_key: Optional[str] = None,
    from_name: Optional[str] = None,
) -> DispatchResult:
    """
    Send an email with SMTP (if enabled and usable) falling back to Resend.

    Args:
        payload: Message to send
        use_smtp: Whether the user wants their own SMTP server tried first
        smtp_config: User SMTP credentials
        api_key: Resend API key; without it there is no fallback
        from_name: Display name for the Resend sender

    Returns:
        DispatchResult of the transport that delivered the message

    Raises:
        ConfigurationError: No usable transport
        TransportError: SMTP failed and no fallback was configured
        CompositeFailure: SMTP and the Resend fallback both failed
        ProviderError: Resend (used directly) returned an error
    """
    transports = build_transports(use_smtp, smtp_config, api_key, from_name)
    if transports and not isinstance(transports[0], SmtpTransport):
        logger.info("SMTP not configured or disabled. Using Resend directly.")
    return EmailDispatcher(transports).dispatch(payload)
