"""Template domain - Email template CRUD and attachment storage"""

from .router import router
from .service import TemplateService

__all__ = ["router", "TemplateService"]
