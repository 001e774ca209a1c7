"""API layer - FastAPI endpoints."""

from .data import router as data_router
from .records import router as records_router
from .tags import router as tags_router

__all__ = [
    "records_router",
    "tags_router",
    "data_router",
]
