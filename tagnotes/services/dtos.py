"""
Data transfer objects returned by the use-cases.

Pydantic models, so the API layer can return them directly and import
payloads are validated by the same classes that exports are built from.
"""

import math
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..domain import Record
from ..domain.record import MAX_CONTENT_LENGTH
from ..repositories.ports import RecordSearchResult

ExportFormat = Literal["json", "csv", "xml", "yaml"]
SUPPORTED_EXPORT_FORMATS: tuple[str, ...] = ("json", "csv", "xml", "yaml")
EXPORT_VERSION = "1.0"


# ============================================================================
# RECORDS
# ============================================================================


class RecordDTO(BaseModel):
    """
    Запись для передачи наружу.

    В ответах use-case tag_ids — идентификаторы тегов; в экспорте —
    нормализованные значения тегов.

    Пример:
    {
        "id": "0b6c...",
        "content": "python fastapi backend",
        "tag_ids": ["4f1a...", "9e2d...", "c3b7..."],
        "created_at": "2026-01-18T12:00:00Z",
        "updated_at": "2026-01-18T12:00:00Z"
    }
    """

    id: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1, max_length=MAX_CONTENT_LENGTH)
    tag_ids: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(frozen=True)

    @field_validator("created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # naive timestamps in import files are read as UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @model_validator(mode="after")
    def _check_content_and_timestamps(self) -> "RecordDTO":
        if not self.content.strip():
            raise ValueError("Content cannot be empty")
        if self.updated_at < self.created_at:
            raise ValueError("updated_at cannot be before created_at")
        return self

    @classmethod
    def from_record(cls, record: Record) -> "RecordDTO":
        return cls(
            id=record.id,
            content=record.content.value,
            tag_ids=sorted(record.tag_ids),
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class PaginationDTO(BaseModel):
    limit: int
    offset: int
    current_page: int
    total_pages: int


class SearchResultDTO(BaseModel):
    records: list[RecordDTO]
    total: int
    has_more: bool
    pagination: PaginationDTO | None = None
    search_query: str | None = None

    @classmethod
    def from_result(
        cls,
        result: RecordSearchResult,
        limit: int | None = None,
        offset: int = 0,
        search_query: str | None = None,
    ) -> "SearchResultDTO":
        pagination = None
        if limit:
            pagination = PaginationDTO(
                limit=limit,
                offset=offset,
                current_page=offset // limit + 1,
                total_pages=math.ceil(result.total / limit),
            )
        return cls(
            records=[RecordDTO.from_record(r) for r in result.records],
            total=result.total,
            has_more=result.has_more,
            pagination=pagination,
            search_query=search_query,
        )


# ============================================================================
# TAGS
# ============================================================================


class TagSuggestionDTO(BaseModel):
    id: str
    normalized_value: str
    match_score: float


class TagCloudItemDTO(BaseModel):
    id: str
    normalized_value: str
    usage_count: int


# ============================================================================
# EXPORT / IMPORT
# ============================================================================


class ExportMetadata(BaseModel):
    total_records: int = Field(..., ge=0)
    export_source: str = "full-database"

    model_config = ConfigDict(extra="allow")


class ExportDTO(BaseModel):
    """
    Снимок всех данных. Он же — формат входных данных импорта.

    Идентификаторы хранилища в экспорт не попадают: id записи заменяется
    переносимым "record_<hash>", а tag_ids — нормализованными значениями.

    Пример:
    {
        "records": [{"id": "record_1x2y3z", "content": "café ÜBER", "tag_ids": ["cafe", "uber"], ...}],
        "format": "json",
        "exported_at": "2026-01-18T12:00:00Z",
        "version": "1.0",
        "metadata": {"total_records": 1, "export_source": "full-database"}
    }
    """

    records: list[RecordDTO]
    format: ExportFormat = "json"
    exported_at: datetime
    version: str = EXPORT_VERSION
    metadata: ExportMetadata


class ImportWarning(BaseModel):
    message: str
    code: str
    details: dict[str, Any] | None = None


class ImportSummary(BaseModel):
    records_created: int = 0
    records_updated: int = 0
    records_skipped: int = 0
    records_failed: int = 0


class ImportResultDTO(BaseModel):
    success: bool
    total_processed: int
    success_count: int
    error_count: int
    imported_at: datetime
    duration_ms: int
    summary: ImportSummary
    warnings: list[ImportWarning] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
