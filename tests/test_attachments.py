"""
Tests for attachment normalization.
"""

import base64

from rocketmail.domain.email import Attachment
from rocketmail.domain.email.attachments import (
    DEFAULT_ATTACHMENT_FILENAME,
    OutboundAttachment,
    normalize_attachment,
    normalize_attachments,
    strip_data_uri,
)


class TestStripDataUri:
    """Test data-URI prefix removal."""

    def test_prefix_removed(self):
        assert strip_data_uri('data:image/png;base64,iVBORw0KGgo=') == 'iVBORw0KGgo='

    def test_plain_base64_untouched(self):
        assert strip_data_uri('iVBORw0KGgo=') == 'iVBORw0KGgo='


class TestNormalizeAttachment:
    """Test the shared outbound attachment shape."""

    def test_data_uri_matches_stripped_equivalent(self):
        with_prefix = Attachment.from_raw(filename='doc.pdf', content='data:application/pdf;base64,SGVsbG8=')
        stripped = Attachment.from_raw(filename='doc.pdf', content='SGVsbG8=')

        assert normalize_attachment(with_prefix) == normalize_attachment(stripped)

    def test_binary_matches_base64_equivalent(self):
        raw = b'Hello'
        binary = Attachment.from_raw(filename='hello.txt', content=raw)
        encoded = Attachment.from_raw(filename='hello.txt', content=base64.b64encode(raw).decode())

        assert normalize_attachment(binary) == normalize_attachment(encoded)
        assert normalize_attachment(binary).content == 'SGVsbG8='

    def test_remote_ref_becomes_path(self):
        attachment = Attachment.from_raw(filename='logo.png', url='https://files.example.com/logo.png')

        result = normalize_attachment(attachment)

        assert result.path == 'https://files.example.com/logo.png'
        assert result.content is None

    def test_missing_filename_gets_default(self):
        attachment = Attachment.from_raw(content=b'data')

        assert normalize_attachment(attachment).filename == DEFAULT_ATTACHMENT_FILENAME

    def test_content_type_preserved(self):
        attachment = Attachment.from_raw(filename='a.csv', content=b'a,b', content_type='text/csv')

        assert normalize_attachment(attachment).content_type == 'text/csv'

    def test_order_preserved(self):
        attachments = [
            Attachment.from_raw(filename='first.txt', content=b'1'),
            Attachment.from_raw(filename='second.txt', url='https://files.example.com/2.txt'),
        ]

        result = normalize_attachments(attachments)

        assert [a.filename for a in result] == ['first.txt', 'second.txt']


class TestOutboundAttachmentToResend:
    """Test Resend attachment dicts."""

    def test_inline_content(self):
        outbound = OutboundAttachment('a.txt', 'text/plain', content='SGVsbG8=')

        assert outbound.to_resend() == {
            'filename': 'a.txt',
            'content': 'SGVsbG8=',
            'content_type': 'text/plain',
        }

    def test_remote_path_without_type(self):
        outbound = OutboundAttachment('a.png', path='https://files.example.com/a.png')

        assert outbound.to_resend() == {
            'filename': 'a.png',
            'path': 'https://files.example.com/a.png',
        }
