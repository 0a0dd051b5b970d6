"""
FastAPI Main Application
HTTP surface of the 835 toolkit: generate, validate and parse remittances
Source: https://fastapi.tiangolo.com/
"""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.config import settings
from src.api.routes import edi, health
from src.core.config import get_edi_settings
from src.utils.logging import get_logger, setup_logging

setup_logging(
    level=settings.LOG_LEVEL,
    log_file=settings.LOG_FILE,
    json_logs=settings.is_production,
)

logger = get_logger(__name__)

docs_enabled = not settings.is_production


@asynccontextmanager
async def lifespan(app: FastAPI):  # type: ignore[no-untyped-def]  # noqa: ARG001
    """Log the effective envelope configuration on startup."""
    edi_settings = get_edi_settings()
    logger.info(f"{settings.SERVICE_NAME} starting ({settings.ENVIRONMENT}, debug={settings.DEBUG})")
    logger.info(
        f"835 envelope: sender={edi_settings.INTERCHANGE_SENDER_ID} "
        f"receiver={edi_settings.INTERCHANGE_RECEIVER_ID} "
        f"usage={edi_settings.USAGE_INDICATOR} "
        f"delimiters={edi_settings.DELIMITERS!r}"
    )

    yield

    logger.info(f"{settings.SERVICE_NAME} stopped")


app = FastAPI(
    title=settings.API_TITLE,
    description="Generate, validate and parse X12 835 remittance advice",
    version=settings.API_VERSION,
    debug=settings.DEBUG,
    docs_url="/docs" if docs_enabled else None,
    redoc_url="/redoc" if docs_enabled else None,
    openapi_url="/openapi.json" if docs_enabled else None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_CREDENTIALS,
    allow_methods=settings.CORS_METHODS,
    allow_headers=settings.CORS_HEADERS,
)

app.include_router(health.router)
app.include_router(edi.router)


@app.get("/")
async def root() -> dict[str, Any]:
    """API name, version and where to find the docs."""
    return {
        "name": settings.API_TITLE,
        "version": settings.API_VERSION,
        "environment": settings.ENVIRONMENT,
        "endpoints": [route.path for route in edi.router.routes],
        "docs": "/docs" if docs_enabled else "disabled",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("src.api.main:app", host=settings.API_HOST, port=settings.API_PORT)
