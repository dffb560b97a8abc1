"""Email dispatch errors"""

from typing import Optional


class EmailDispatchError(Exception):
    """Base class for every failure raised while dispatching an email"""

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.provider = provider


class ConfigurationError(EmailDispatchError):
    """No usable transport is configured (missing SMTP settings or API key)"""


class VerificationError(EmailDispatchError):
    """SMTP connect/handshake/login failed before any message was sent"""


class TransportError(EmailDispatchError):
    """Sending failed after the transport was reached"""


class ProviderError(EmailDispatchError):
    """The hosted API answered with an error payload"""


class CompositeFailure(EmailDispatchError):
    """
    Every transport in the chain failed.
    Keeps each (label, error) pair so no failure reason is lost.
    """

    def __init__(self, failures: list[tuple[str, EmailDispatchError]]):
        self.failures = failures
        first_label, first_error = failures[0]
        parts = [f"{first_label} error: {first_error.message}"]
        for label, error in failures[1:]:
            parts.append(f"{label} fallback also failed: {error.message}")
        super().__init__(". ".join(parts))

    @property
    def messages(self) -> list[str]:
        return [error.message for _, error in self.failures]
