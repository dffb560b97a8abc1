import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from . import models  # noqa: F401
from .config import LOG_LEVEL
from .database import Base, engine
from .domain.email import ConfigurationError, EmailDispatchError
from .domain.templates import router as templates_router
from .routes.email import router as email_router
from .routes.settings import router as settings_router

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("botocore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")
            raise

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="RocketMail API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(EmailDispatchError)
async def email_dispatch_exception_handler(request: Request, exc: EmailDispatchError):
    """Configuration problems are the caller's to fix (400); provider failures are upstream (502)"""
    status_code = 400 if isinstance(exc, ConfigurationError) else 502
    logger.warning(f"Email dispatch failed for {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": exc.message,
            "error": exc.__class__.__name__,
            "provider": exc.provider,
        },
    )


app.include_router(templates_router)
app.include_router(email_router)
app.include_router(settings_router)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
