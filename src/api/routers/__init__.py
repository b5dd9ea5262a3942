"""API routers for examdeck."""

from src.api.routers import data_router

__all__ = [
    "data_router",
]
