"""
FastAPI application for examdeck.

Provides a read-only REST API for:
- The fully assembled exam content (guideline, domains, glossary)
- Service health

There are no write endpoints: progress and quiz scores live with the client.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from config import configure_logging, get_settings
from src.curriculum.store import FileResourceStore

settings = get_settings()


def _check_content_health() -> tuple[str, str | None]:
    """
    Check that the content root is present.

    Returns:
        Tuple of (status, error_message). Status is "ok" or "error".
    """
    store = FileResourceStore(settings.data_dir)
    if not store.exists():
        return "error", f"Content directory not found: {settings.data_dir}"
    return "ok", None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    configure_logging(settings)
    logger.info("Starting examdeck content API...")
    logger.info(f"Serving content from {settings.data_dir}")

    yield

    logger.info("Shutting down examdeck content API...")


app = FastAPI(
    title="examdeck",
    description="""
    Content delivery service for self-paced exam study.

    ## Data Flow

    ```
    data/ (definitions, guideline, domains/…)
        ↓ hierarchy loader (validate + skip missing)
    Curriculum (read-only)
        ↓
    GET /api/data → study client
    ```
    """,
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_methods=["GET"],
    allow_headers=["*"],
)


# ========================================
# Health & Status Endpoints
# ========================================


@app.get("/", tags=["Health"])
def root() -> dict[str, str]:
    """Root endpoint returning service info."""
    return {
        "service": "examdeck",
        "version": "1.0.0",
        "status": "ok",
    }


@app.get("/health", tags=["Health"])
def health_check() -> dict[str, Any]:
    """Health check: reports whether the content root exists."""
    content_status, content_error = _check_content_health()

    result = {
        "status": "healthy" if content_status == "ok" else "unhealthy",
        "timestamp": datetime.now().isoformat(),
        "components": {"content": content_status},
    }
    if content_error:
        result["errors"] = {"content": content_error}
    return result


# ========================================
# Import and mount routers
# ========================================

from src.api.routers import data_router

app.include_router(data_router.router, prefix="/api", tags=["Content"])
