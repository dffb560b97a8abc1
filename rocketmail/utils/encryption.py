"""SMTP password encryption at rest"""

import logging
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from ..config import SMTP_ENCRYPTION_KEY

logger = logging.getLogger(__name__)

# Initialize encryption
fernet = Fernet(SMTP_ENCRYPTION_KEY) if SMTP_ENCRYPTION_KEY else None


def encrypt_password(password: str) -> str:
    """Encrypt SMTP password for storage"""
    if not fernet:
        logger.warning("SMTP_ENCRYPTION_KEY not set, storing password in plain text")
        return password
    return fernet.encrypt(password.encode()).decode()


def decrypt_password(encrypted: Optional[str]) -> str:
    """Decrypt SMTP password for use"""
    if not fernet or not encrypted:
        return encrypted or ""
    try:
        return fernet.decrypt(encrypted.encode()).decode()
    except InvalidToken:
        return encrypted  # Stored before encryption was enabled
