"""
Tests for the SMTP transport.
"""

import base64
import smtplib
import ssl
from email import message_from_string
from email.header import decode_header, make_header
from email.utils import parseaddr
from unittest.mock import MagicMock, patch

import httpx
import pytest

from rocketmail.domain.email import (
    Attachment,
    EmailPayload,
    SmtpConfig,
    SmtpTransport,
    TransportError,
    VerificationError,
)


def make_config(**overrides):
    params = {
        'host': 'smtp.test',
        'port': 587,
        'user': 'a@b.com',
        'password': 'x',
    }
    params.update(overrides)
    return SmtpConfig(**params)


def make_payload(**overrides):
    params = {
        'to': 'to@example.com',
        'subject': 'Hello',
        'html': '<p>Hi there</p>',
    }
    params.update(overrides)
    return EmailPayload(**params)


def sent_message(server):
    """Parse the message handed to sendmail."""
    _, _, raw = server.sendmail.call_args[0]
    return message_from_string(raw)


class TestFromHeader:
    """Test sender formatting."""

    def test_display_name_quoted(self):
        transport = SmtpTransport(make_config(name='Acme Sales'))

        assert transport.from_header == '"Acme Sales" <a@b.com>'

    def test_bare_address_without_name(self):
        transport = SmtpTransport(make_config())

        assert transport.from_header == 'a@b.com'

    @patch('smtplib.SMTP_SSL')
    def test_non_ascii_name_keeps_parseable_address(self, mock_ssl):
        server = mock_ssl.return_value
        server.sendmail.return_value = {}
        config = make_config(port=465, user='joao@empresa.com', name='João')

        SmtpTransport(config).send(make_payload())

        name, address = parseaddr(sent_message(server)['From'])
        assert address == 'joao@empresa.com'
        assert str(make_header(decode_header(name))) == 'João'

    @patch('smtplib.SMTP_SSL')
    def test_quotes_in_name_escaped(self, mock_ssl):
        server = mock_ssl.return_value
        server.sendmail.return_value = {}

        SmtpTransport(make_config(port=465, name='Acme "Sales"')).send(make_payload())

        _, address = parseaddr(sent_message(server)['From'])
        assert address == 'a@b.com'


class TestConnection:
    """Test how the connection is opened and verified."""

    @patch('smtplib.SMTP')
    @patch('smtplib.SMTP_SSL')
    def test_port_465_forces_implicit_tls(self, mock_ssl, mock_plain):
        transport = SmtpTransport(make_config(port=465, secure=False))

        transport.verify()

        mock_ssl.assert_called_once()
        mock_plain.assert_not_called()
        assert transport.use_implicit_tls

    @patch('smtplib.SMTP')
    @patch('smtplib.SMTP_SSL')
    def test_secure_flag_uses_implicit_tls(self, mock_ssl, mock_plain):
        SmtpTransport(make_config(port=2465, secure=True)).verify()

        mock_ssl.assert_called_once()
        mock_plain.assert_not_called()

    @patch('smtplib.SMTP')
    def test_starttls_when_advertised(self, mock_plain):
        server = mock_plain.return_value
        server.has_extn.return_value = True

        SmtpTransport(make_config()).verify()

        server.starttls.assert_called_once()
        server.login.assert_called_once_with('a@b.com', 'x')

    @patch('smtplib.SMTP')
    def test_no_starttls_when_not_advertised(self, mock_plain):
        server = mock_plain.return_value
        server.has_extn.return_value = False

        SmtpTransport(make_config()).verify()

        server.starttls.assert_not_called()
        server.login.assert_called_once()

    @patch('smtplib.SMTP_SSL')
    def test_connect_timeout_and_relaxed_tls(self, mock_ssl):
        SmtpTransport(make_config(port=465), connect_timeout=15, socket_timeout=30).verify()

        args, kwargs = mock_ssl.call_args
        assert args == ('smtp.test', 465)
        assert kwargs['timeout'] == 15
        context = kwargs['context']
        assert context.verify_mode == ssl.CERT_NONE
        assert context.check_hostname is False

    @patch('smtplib.SMTP_SSL')
    def test_auth_failure_raises_verification_error(self, mock_ssl):
        server = mock_ssl.return_value
        server.login.side_effect = smtplib.SMTPAuthenticationError(535, b'auth error')

        with pytest.raises(VerificationError, match='auth error') as exc_info:
            SmtpTransport(make_config(port=465)).verify()

        assert exc_info.value.provider == 'smtp'
        server.quit.assert_called_once()

    @patch('smtplib.SMTP_SSL')
    def test_connect_failure_raises_verification_error(self, mock_ssl):
        mock_ssl.side_effect = ConnectionRefusedError('Connection refused')

        with pytest.raises(VerificationError, match='Connection refused'):
            SmtpTransport(make_config(port=465)).verify()


class TestSend:
    """Test sending through a verified connection."""

    @patch('smtplib.SMTP_SSL')
    def test_send_success(self, mock_ssl):
        server = mock_ssl.return_value
        server.sendmail.return_value = {}

        result = SmtpTransport(make_config(port=465, name='Acme')).send(make_payload())

        assert result.success is True
        assert result.provider == 'smtp'
        assert result.from_address == '"Acme" <a@b.com>'
        assert result.reply_to == 'a@b.com'
        assert result.message_id.endswith('@b.com>')
        server.quit.assert_called_once()

    @patch('smtplib.SMTP_SSL')
    def test_socket_idle_timeout_applied(self, mock_ssl):
        server = mock_ssl.return_value
        server.sendmail.return_value = {}

        SmtpTransport(make_config(port=465), socket_timeout=30).send(make_payload())

        server.sock.settimeout.assert_called_once_with(30)

    @patch('smtplib.SMTP_SSL')
    def test_envelope_and_headers(self, mock_ssl):
        server = mock_ssl.return_value
        server.sendmail.return_value = {}
        payload = make_payload(cc=['cc@example.com'], bcc=['hidden@example.com'])

        result = SmtpTransport(make_config(port=465)).send(payload)

        envelope_from, recipients, _ = server.sendmail.call_args[0]
        assert envelope_from == 'a@b.com'
        assert recipients == ['to@example.com', 'cc@example.com', 'hidden@example.com']

        message = sent_message(server)
        assert message['To'] == 'to@example.com'
        assert message['Cc'] == 'cc@example.com'
        assert message['Bcc'] is None
        assert message['X-Mailer'] == 'RocketMail'
        assert message['Message-ID'] == result.message_id

    @patch('smtplib.SMTP_SSL')
    def test_html_body(self, mock_ssl):
        server = mock_ssl.return_value
        server.sendmail.return_value = {}

        SmtpTransport(make_config(port=465)).send(make_payload())

        parts = [p for p in sent_message(server).walk() if p.get_content_type() == 'text/html']
        assert len(parts) == 1
        assert parts[0].get_payload(decode=True).decode() == '<p>Hi there</p>'

    @patch('smtplib.SMTP_SSL')
    def test_inline_attachments(self, mock_ssl):
        server = mock_ssl.return_value
        server.sendmail.return_value = {}
        payload = make_payload(attachments=[
            Attachment.from_raw(filename='report.pdf', content=b'%PDF-1.4', content_type='application/pdf'),
            Attachment.from_raw(content='data:text/plain;base64,' + base64.b64encode(b'notes').decode()),
        ])

        SmtpTransport(make_config(port=465)).send(payload)

        attachments = [p for p in sent_message(server).walk() if p.get_filename()]
        assert [a.get_filename() for a in attachments] == ['report.pdf', 'attachment.file']
        assert attachments[0].get_content_type() == 'application/pdf'
        assert attachments[0].get_payload(decode=True) == b'%PDF-1.4'
        assert attachments[1].get_payload(decode=True) == b'notes'

    @patch('rocketmail.domain.email.smtp.httpx.get')
    @patch('smtplib.SMTP_SSL')
    def test_remote_attachment_fetched(self, mock_ssl, mock_get):
        server = mock_ssl.return_value
        server.sendmail.return_value = {}
        mock_get.return_value = MagicMock(content=b'PNGDATA')
        payload = make_payload(attachments=[
            Attachment.from_raw(filename='logo.png', url='https://files.example.com/logo.png'),
        ])

        SmtpTransport(make_config(port=465)).send(payload)

        mock_get.assert_called_once()
        assert mock_get.call_args[0][0] == 'https://files.example.com/logo.png'
        attachments = [p for p in sent_message(server).walk() if p.get_filename()]
        assert attachments[0].get_content_type() == 'image/png'
        assert attachments[0].get_payload(decode=True) == b'PNGDATA'

    @patch('rocketmail.domain.email.smtp.httpx.get')
    @patch('smtplib.SMTP_SSL')
    def test_remote_attachment_failure_is_transport_error(self, mock_ssl, mock_get):
        mock_get.side_effect = httpx.ConnectError('unreachable')
        payload = make_payload(attachments=[
            Attachment.from_raw(filename='logo.png', url='https://files.example.com/logo.png'),
        ])

        with pytest.raises(TransportError, match='Could not prepare attachments'):
            SmtpTransport(make_config(port=465)).send(payload)

        mock_ssl.assert_not_called()

    @patch('smtplib.SMTP_SSL')
    def test_unparseable_attachment_url_is_transport_error(self, mock_ssl):
        payload = make_payload(attachments=[
            Attachment.from_raw(filename='f.pdf', url='http://a\x00b/f.pdf'),
        ])

        with pytest.raises(TransportError, match='Could not prepare attachments'):
            SmtpTransport(make_config(port=465)).send(payload)

        mock_ssl.assert_not_called()

    @patch('smtplib.SMTP_SSL')
    def test_send_failure_raises_transport_error(self, mock_ssl):
        server = mock_ssl.return_value
        server.sendmail.side_effect = smtplib.SMTPDataError(554, b'message rejected')

        with pytest.raises(TransportError, match='message rejected'):
            SmtpTransport(make_config(port=465)).send(make_payload())

        server.quit.assert_called_once()

    @patch('smtplib.SMTP_SSL')
    def test_verification_failure_skips_send(self, mock_ssl):
        server = mock_ssl.return_value
        server.login.side_effect = smtplib.SMTPAuthenticationError(535, b'auth error')

        with pytest.raises(VerificationError):
            SmtpTransport(make_config(port=465)).send(make_payload())

        server.sendmail.assert_not_called()

    @patch('smtplib.SMTP_SSL')
    def test_close_falls_back_when_quit_fails(self, mock_ssl):
        server = mock_ssl.return_value
        server.sendmail.return_value = {}
        server.quit.side_effect = smtplib.SMTPServerDisconnected('gone')

        SmtpTransport(make_config(port=465)).send(make_payload())

        server.close.assert_called_once()


class TestContextualize:
    """Test the error reported when SMTP has no fallback."""

    def test_names_host_and_cause(self):
        transport = SmtpTransport(make_config())
        cause = VerificationError('SMTP verification failed: auth error', provider='smtp')

        error = transport.contextualize(cause)

        assert isinstance(error, TransportError)
        assert 'smtp.test' in error.message
        assert 'auth error' in error.message
        assert error.__cause__ is cause
