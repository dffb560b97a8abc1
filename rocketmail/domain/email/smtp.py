"""
SMTP transport for user-supplied mail servers.

Connects, verifies credentials, then sends. The From address is always the
authenticated SMTP user so messages cannot claim another identity.
"""

import base64
import logging
import mimetypes
import smtplib
import ssl
from email import encoders
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, formatdate, make_msgid

import httpx

from ...config import SMTP_CONNECT_TIMEOUT, SMTP_SOCKET_TIMEOUT
from .attachments import OutboundAttachment, normalize_attachments
from .exceptions import EmailDispatchError, TransportError, VerificationError
from .models import DispatchResult, EmailPayload, SmtpConfig

logger = logging.getLogger(__name__)

IMPLICIT_TLS_PORT = 465
X_MAILER = "RocketMail"


def smtp_error_text(error: Exception) -> str:
    """Readable text for smtplib errors, which carry the server reply as bytes"""
    if isinstance(error, smtplib.SMTPResponseException):
        reply = error.smtp_error
        if isinstance(reply, bytes):
            return reply.decode("utf-8", errors="replace")
        return str(reply)
    return str(error) or error.__class__.__name__


def fetch_remote_attachment(url: str, timeout: float) -> bytes:
    """
    Download a URL-referenced attachment.

    Raises:
        ValueError: If the URL cannot be parsed
        httpx.HTTPError: If the download fails
    """
    try:
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
    except httpx.InvalidURL as e:
        raise ValueError(f"Invalid attachment URL: {e}") from e
    response.raise_for_status()
    return response.content


class SmtpTransport:
    name = "smtp"
    label = "SMTP"

    def __init__(
        self,
        config: SmtpConfig,
        connect_timeout: float = SMTP_CONNECT_TIMEOUT,
        socket_timeout: float = SMTP_SOCKET_TIMEOUT,
    ):
        self.config = config
        self.connect_timeout = connect_timeout
        self.socket_timeout = socket_timeout

        if config.port == IMPLICIT_TLS_PORT and not config.secure:
            logger.warning(
                f"⚠️ Port {IMPLICIT_TLS_PORT} on {config.host} requires implicit TLS, forcing secure mode"
            )

    @property
    def use_implicit_tls(self) -> bool:
        return bool(self.config.secure) or self.config.port == IMPLICIT_TLS_PORT

    @property
    def mime_from_header(self) -> str:
        """RFC 2047-safe From header: only the display name is encoded"""
        return formataddr((self.config.name or "", self.config.user))

    @property
    def from_header(self) -> str:
        """Sender as shown to the caller; the MIME header uses mime_from_header"""
        if self.config.name:
            return f'"{self.config.name}" <{self.config.user}>'
        return self.config.user

    @property
    def sender_domain(self) -> str:
        if "@" in self.config.user:
            return self.config.user.split("@", 1)[1]
        return self.config.host

    def _tls_context(self) -> ssl.SSLContext:
        # Self-signed certificates are accepted: the server certificate is not verified
        context = ssl.create_default_context()
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
        return context

    def verify(self) -> smtplib.SMTP:
        """
        Connect and authenticate.

        Returns:
            An authenticated connection, ready to send

        Raises:
            VerificationError: If connecting, the TLS handshake or login fails
        """
        host, port = self.config.host, self.config.port
        context = self._tls_context()
        server = None
        try:
            if self.use_implicit_tls:
                server = smtplib.SMTP_SSL(
                    host, port, timeout=self.connect_timeout, context=context
                )
            else:
                server = smtplib.SMTP(host, port, timeout=self.connect_timeout)
                server.ehlo()
                if server.has_extn("starttls"):
                    server.starttls(context=context)
                    server.ehlo()

            server.login(self.config.user, self.config.password)
        except (smtplib.SMTPException, OSError) as e:
            if server is not None:
                self._close(server)
            logger.error(f"❌ SMTP verification failed for {host}:{port}: {e}")
            raise VerificationError(
                f"SMTP verification failed: {smtp_error_text(e)}", provider=self.name
            ) from e

        logger.info(f"✅ SMTP verification succeeded for {host}:{port}")
        return server

    def send(self, payload: EmailPayload) -> DispatchResult:
        from_address = self.from_header
        message, message_id = self._build_message(payload)

        logger.info(f"📧 Sending email via SMTP: {self.config.host}:{self.config.port}")
        logger.info(f"From: {from_address} To: {payload.to}")
        logger.info(f"Subject: {payload.subject}")
        logger.debug(f"HTML content length: {len(payload.html or '')} characters")

        server = self.verify()
        try:
            if server.sock is not None:
                server.sock.settimeout(self.socket_timeout)
            refused = server.sendmail(self.config.user, payload.recipients, message.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"❌ Failed to send email via SMTP: {e}")
            raise TransportError(
                f"Failed to send email via SMTP: {smtp_error_text(e)}", provider=self.name
            ) from e
        finally:
            self._close(server)

        if refused:
            logger.warning(f"⚠️ SMTP server refused some recipients: {list(refused)}")

        logger.info(f"✅ Email sent successfully via SMTP: {message_id}")
        return DispatchResult(
            success=True,
            provider=self.name,
            message_id=message_id,
            from_address=from_address,
            reply_to=self.config.user,
        )

    def contextualize(self, error: EmailDispatchError) -> EmailDispatchError:
        """Failure to report when SMTP was the only transport tried"""
        wrapped = TransportError(
            f"SMTP error with {self.config.host}: {error.message}. "
            "Check your SMTP credentials and settings.",
            provider=self.name,
        )
        wrapped.__cause__ = error
        return wrapped

    def _build_message(self, payload: EmailPayload) -> tuple[MIMEMultipart, str]:
        message_id = make_msgid(domain=self.sender_domain)

        msg = MIMEMultipart("mixed")
        msg["Subject"] = payload.subject
        try:
            msg["From"] = self.mime_from_header
        except UnicodeEncodeError as e:
            raise TransportError(
                f"SMTP sender address must be ASCII: {self.config.user}", provider=self.name
            ) from e
        msg["To"] = payload.to
        if payload.cc:
            msg["Cc"] = ", ".join(payload.cc)
        msg["Date"] = formatdate(localtime=True)
        msg["Message-ID"] = message_id
        msg["X-Mailer"] = X_MAILER
        msg["X-Priority"] = "3"

        msg.attach(MIMEText(payload.html or "", "html", "utf-8"))

        try:
            for attachment in normalize_attachments(payload.attachments):
                msg.attach(self._attachment_part(attachment))
        except (ValueError, httpx.HTTPError) as e:
            logger.error(f"❌ Could not prepare attachments: {e}")
            raise TransportError(
                f"Could not prepare attachments: {e}", provider=self.name
            ) from e

        if payload.attachments:
            logger.info(f"Adding {len(payload.attachments)} attachments to email")

        return msg, message_id

    def _attachment_part(self, attachment: OutboundAttachment) -> MIMEBase:
        if attachment.content is not None:
            data = base64.b64decode(attachment.content)
        else:
            data = fetch_remote_attachment(attachment.path, timeout=self.socket_timeout)

        content_type = (
            attachment.content_type
            or mimetypes.guess_type(attachment.filename)[0]
            or "application/octet-stream"
        )
        maintype, _, subtype = content_type.partition("/")

        part = MIMEBase(maintype, subtype or "octet-stream")
        part.set_payload(data)
        encoders.encode_base64(part)
        part.add_header("Content-Disposition", "attachment", filename=attachment.filename)
        return part

    @staticmethod
    def _close(server: smtplib.SMTP) -> None:
        try:
            server.quit()
        except (smtplib.SMTPException, OSError):
            server.close()
