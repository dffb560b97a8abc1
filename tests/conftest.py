"""
Pytest configuration and fixtures for all tests.
"""

import os
from unittest.mock import MagicMock

import pytest

# Set up test environment variables before importing any modules
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ['TEMPLATE_ATTACHMENTS_PUBLIC_URL'] = 'https://attachments.example.com'
os.environ['TEMPLATE_FILES_PUBLIC_URL'] = 'https://files.example.com'
os.environ['TEMPLATE_IMAGES_PUBLIC_URL'] = 'https://images.example.com'
os.environ['SMTP_ENCRYPTION_KEY'] = 'YWFhYWFhYWFhYWFhYWFhYWFhYWFhYWFhYWFhYWFhYWE='
os.environ.pop('RESEND_API_KEY', None)
os.environ.setdefault('LOG_LEVEL', 'INFO')

from rocketmail import models  # noqa: E402,F401
from rocketmail.database import Base, SessionLocal, engine  # noqa: E402
from rocketmail.utils.storage import R2BlobStore  # noqa: E402


@pytest.fixture
def db_session():
    """Fresh in-memory database per test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


def make_blob_store(bucket, public_base_url):
    store = MagicMock(spec=R2BlobStore)
    store.bucket = bucket
    store.public_base_url = public_base_url
    store.get_public_url.side_effect = lambda path: f"{public_base_url}/{path}"
    return store


@pytest.fixture
def blob_stores():
    """Mock attachment, file and image stores."""
    return {
        'attachments': make_blob_store('template-attachments', 'https://attachments.example.com'),
        'files': make_blob_store('template-files', 'https://files.example.com'),
        'images': make_blob_store('template-images', 'https://images.example.com'),
    }
