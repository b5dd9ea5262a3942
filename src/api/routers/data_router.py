"""
Content data router.

One read endpoint returning the assembled curriculum as a single document:
    {"success": true, "data": {"guideline": ..., "domains": [...], "definitions": {...}}}

Load failures return HTTP 500 with
    {"success": false, "error": "...", "path": "...", "kind": "MissingResource" | "MalformedResource"}
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from loguru import logger

from config import Settings, get_settings
from src.curriculum.errors import CurriculumError
from src.curriculum.loader import HierarchyLoader
from src.curriculum.store import FileResourceStore

router = APIRouter()


def get_loader(settings: Settings = Depends(get_settings)) -> HierarchyLoader:
    """Loader over the configured content root. Overridable in tests."""
    return HierarchyLoader(
        FileResourceStore(settings.data_dir),
        default_domain_order=settings.default_domain_order,
    )


@router.get("/data", summary="Load all study materials")
def load_data(loader: HierarchyLoader = Depends(get_loader)) -> Any:
    """
    Load the whole exam: guideline, domains (with topics, pages and quizzes)
    and glossary definitions.

    The content is read on every request so edits show up without a restart.
    """
    try:
        curriculum = loader.load()
    except CurriculumError as e:
        logger.error(f"Content load failed: {e.message}")
        return JSONResponse(status_code=500, content=e.to_dict())

    logger.debug(f"Serving '{curriculum.guideline.exam}' ({curriculum.total_units} units)")
    return {"success": True, "data": curriculum.to_dict()}
