"""Replace all data with the contents of an export snapshot."""

import time
from typing import Any

from pydantic import ValidationError

from ..core.logging import get_logger
from ..domain import (
    DomainError,
    Err,
    ErrorCode,
    Ok,
    Record,
    RecordContent,
    RecordId,
    Result,
    Tag,
    TagFactory,
    generate_id,
    utc_now,
)
from ..repositories.ports import UnitOfWork
from .base import require
from .dtos import ExportDTO, ImportResultDTO, ImportSummary, ImportWarning

logger = get_logger(__name__)

DEFAULT_BATCH_SIZE = 500
SUPPORTED_IMPORT_VERSIONS: tuple[str, ...] = ("1.0",)


def _format_validation_errors(exc: ValidationError) -> list[str]:
    return [
        f"{'.'.join(str(part) for part in error['loc']) or 'data'}: {error['msg']}"
        for error in exc.errors()
    ]


class ImportDataUseCase:
    """
    Импорт снимка данных с полной заменой содержимого.

    Шаги:
        1. Валидация payload (pydantic) → IMPORT_VALIDATION_FAILED
        2. Построение тегов фабрикой (по одному на значение) и записей
           с новыми id и исходными timestamps
        3. В одной транзакции (uow.execute): удалить все записи и теги,
           сохранить теги, затем записи пачками по batch_size

    Если база не пуста, в результат добавляется предупреждение
    BACKUP_RECOMMENDED: данные будут заменены.
    """

    def __init__(
        self,
        unit_of_work: UnitOfWork,
        tag_factory: TagFactory | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        if batch_size <= 0:
            raise ValueError("Batch size must be positive")
        self.unit_of_work = require(unit_of_work, "UnitOfWork")
        self.tag_factory = tag_factory or TagFactory()
        self.batch_size = batch_size

    def validate(self, data: Any) -> Result[ExportDTO, DomainError]:
        """Validate an import payload without touching storage."""
        if isinstance(data, ExportDTO):
            snapshot = data
        else:
            try:
                snapshot = ExportDTO.model_validate(data)
            except ValidationError as e:
                errors = _format_validation_errors(e)
                return Err(
                    DomainError(
                        ErrorCode.IMPORT_VALIDATION_FAILED,
                        "Import data validation failed",
                        {"errors": errors},
                    )
                )

        if snapshot.version not in SUPPORTED_IMPORT_VERSIONS:
            return Err(
                DomainError(
                    ErrorCode.IMPORT_VALIDATION_FAILED,
                    "Import data validation failed",
                    {
                        "errors": [
                            f"version: Unsupported version: {snapshot.version}. "
                            f"Supported versions: {', '.join(SUPPORTED_IMPORT_VERSIONS)}"
                        ]
                    },
                )
            )
        return Ok(snapshot)

    def _build(self, snapshot: ExportDTO) -> Result[tuple[list[Tag], list[Record]], DomainError]:
        tags: dict[str, Tag] = {}
        records: list[Record] = []
        try:
            for index, dto in enumerate(snapshot.records):
                tag_ids = set()
                for raw_value in dto.tag_ids:
                    tag = self.tag_factory.create_from_string(raw_value)
                    # one tag per normalized value
                    tag = tags.setdefault(tag.normalized_value, tag)
                    tag_ids.add(tag.id)
                records.append(
                    Record(
                        id=RecordId(generate_id()),
                        content=RecordContent(dto.content),
                        tag_ids=tag_ids,
                        created_at=dto.created_at,
                        updated_at=dto.updated_at,
                    )
                )
        except ValueError as e:
            return Err(
                DomainError(
                    ErrorCode.IMPORT_VALIDATION_FAILED,
                    "Import data validation failed",
                    {"errors": [f"records.{index}: {e}"]},
                )
            )
        return Ok((list(tags.values()), records))

    async def _replace_all(
        self, uow: UnitOfWork, tags: list[Tag], records: list[Record]
    ) -> Result[int, DomainError]:
        for clear in (uow.records.delete_all, uow.tags.delete_all):
            cleared = await clear()
            if cleared.is_err():
                return cleared

        for start in range(0, len(tags), self.batch_size):
            saved = await uow.tags.save_batch(tags[start : start + self.batch_size])
            if saved.is_err():
                return saved

        for start in range(0, len(records), self.batch_size):
            saved = await uow.records.save_batch(records[start : start + self.batch_size])
            if saved.is_err():
                return saved

        return Ok(len(records))

    async def execute(self, data: Any) -> Result[ImportResultDTO, DomainError]:
        started = time.perf_counter()

        validated = self.validate(data)
        if validated.is_err():
            logger.info("Import rejected", extra={"errors": (validated.error.context or {}).get("errors")})
            return validated
        snapshot = validated.value

        warnings: list[ImportWarning] = []
        if not snapshot.records:
            warnings.append(ImportWarning(message="Import data contains no records", code="EMPTY_IMPORT"))

        try:
            existing = await self.unit_of_work.records.count()
            if existing.is_err():
                return existing
            if existing.value > 0:
                warnings.append(
                    ImportWarning(
                        message="Existing data will be replaced, export a backup first",
                        code="BACKUP_RECOMMENDED",
                        details={"existing_records": existing.value},
                    )
                )

            built = self._build(snapshot)
            if built.is_err():
                return built
            tags, records = built.value

            imported = await self.unit_of_work.execute(
                lambda uow: self._replace_all(uow, tags, records)
            )
            if imported.is_err():
                logger.error(
                    "Import failed",
                    extra={"code": imported.error.code, "error": imported.error.message},
                )
                return imported
        except Exception as e:
            logger.exception("Import failed")
            return Err(DomainError(ErrorCode.IMPORT_OPERATION_FAILED, f"Import operation failed: {e}"))

        count = imported.value
        duration_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            "Data imported",
            extra={"records": count, "tags": len(tags), "duration_ms": duration_ms},
        )
        return Ok(
            ImportResultDTO(
                success=True,
                total_processed=count,
                success_count=count,
                error_count=0,
                imported_at=utc_now(),
                duration_ms=duration_ms,
                summary=ImportSummary(records_created=count),
                warnings=warnings,
            )
        )
