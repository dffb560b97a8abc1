import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./rocketmail.db")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Cloudflare R2 Configuration
R2_ACCOUNT_ID = os.getenv("R2_ACCOUNT_ID")
R2_ACCESS_KEY_ID = os.getenv("R2_ACCESS_KEY_ID")
R2_SECRET_ACCESS_KEY = os.getenv("R2_SECRET_ACCESS_KEY")
TEMPLATE_ATTACHMENTS_BUCKET = os.getenv("TEMPLATE_ATTACHMENTS_BUCKET", "template-attachments")
TEMPLATE_FILES_BUCKET = os.getenv("TEMPLATE_FILES_BUCKET", "template-files")
TEMPLATE_IMAGES_BUCKET = os.getenv("TEMPLATE_IMAGES_BUCKET", "template-images")

# Public domain of each bucket (r2.dev subdomain or custom domain); objects are served at its root
TEMPLATE_ATTACHMENTS_PUBLIC_URL = os.getenv("TEMPLATE_ATTACHMENTS_PUBLIC_URL", "").rstrip("/")
TEMPLATE_FILES_PUBLIC_URL = os.getenv("TEMPLATE_FILES_PUBLIC_URL", "").rstrip("/")
TEMPLATE_IMAGES_PUBLIC_URL = os.getenv("TEMPLATE_IMAGES_PUBLIC_URL", "").rstrip("/")

# Resend Email Configuration (fallback)
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
RESEND_FROM_ADDRESS = os.getenv("RESEND_FROM_ADDRESS", "onboarding@resend.dev")
DEFAULT_FROM_NAME = os.getenv("DEFAULT_FROM_NAME", "RocketMail")

# Custom SMTP Encryption Key (generate with: python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())")
SMTP_ENCRYPTION_KEY = os.getenv("SMTP_ENCRYPTION_KEY")

# SMTP timeouts in seconds: connect/greeting, then socket idle once authenticated
SMTP_CONNECT_TIMEOUT = float(os.getenv("SMTP_CONNECT_TIMEOUT", "15"))
SMTP_SOCKET_TIMEOUT = float(os.getenv("SMTP_SOCKET_TIMEOUT", "30"))
