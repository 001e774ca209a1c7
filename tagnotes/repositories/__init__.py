"""Repository layer for data access."""

from .base import BaseRepository, storage_operation
from .ports import (
    RecordRepository,
    RecordSearchOptions,
    RecordSearchResult,
    TagRepository,
    TagSearchOptions,
    TagSuggestion,
    TagUsageInfo,
    UnitOfWork,
)
from .record import SqlRecordRepository
from .tag import SqlTagRepository
from .unit_of_work import SqlAlchemyUnitOfWork

__all__ = [
    "BaseRepository",
    "storage_operation",
    "RecordRepository",
    "TagRepository",
    "UnitOfWork",
    "RecordSearchOptions",
    "RecordSearchResult",
    "TagSearchOptions",
    "TagSuggestion",
    "TagUsageInfo",
    "SqlRecordRepository",
    "SqlTagRepository",
    "SqlAlchemyUnitOfWork",
]
