"""Export all records into a portable snapshot."""

from dataclasses import dataclass

from ..core.logging import get_logger
from ..domain import DomainError, Err, ErrorCode, Ok, Result, utc_now
from ..repositories.ports import RecordRepository, TagRepository
from .base import require
from .dtos import SUPPORTED_EXPORT_FORMATS, ExportDTO, ExportMetadata, RecordDTO

logger = get_logger(__name__)

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def portable_record_id(content: str) -> str:
    """
    Stable id derived from the content: ``record_<base36 hash>``.

    32-bit ``hash * 31 + code_unit`` over the UTF-16 code units, so the same
    content gives the same id in every export.
    """
    data = content.encode("utf-16-le")
    value = 0
    for i in range(0, len(data), 2):
        code_unit = data[i] | (data[i + 1] << 8)
        value = ((value << 5) - value + code_unit) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return f"record_{_to_base36(abs(value))}"


@dataclass(frozen=True)
class ExportDataRequest:
    format: str = "json"
    include_metadata: bool = True


@dataclass(frozen=True)
class ExportDataResponse:
    success: bool
    export_data: ExportDTO


class ExportDataUseCase:
    """
    Экспорт всех записей.

    В экспорт не попадают идентификаторы хранилища: tag_ids заменяются
    нормализованными значениями тегов, id записи — хешем контента.
    Такой снимок можно импортировать в пустую базу через ImportDataUseCase.
    """

    def __init__(self, record_repository: RecordRepository, tag_repository: TagRepository):
        self.record_repository = require(record_repository, "RecordRepository")
        self.tag_repository = require(tag_repository, "TagRepository")

    async def execute(self, request: ExportDataRequest) -> Result[ExportDataResponse, DomainError]:
        if request.format not in SUPPORTED_EXPORT_FORMATS:
            return Err(
                DomainError(
                    ErrorCode.INVALID_EXPORT_FORMAT,
                    f"Unsupported export format: {request.format}",
                    {"supported_formats": list(SUPPORTED_EXPORT_FORMATS)},
                )
            )

        try:
            records = await self.record_repository.find_all()
            if records.is_err():
                return records
            tags = await self.tag_repository.find_all()
            if tags.is_err():
                return tags

            values = {tag.id: tag.normalized_value for tag in tags.value}
            exported = [
                RecordDTO(
                    id=portable_record_id(record.content.value),
                    content=record.content.value,
                    tag_ids=sorted(
                        values[tag_id] for tag_id in record.tag_ids if tag_id in values
                    ),
                    created_at=record.created_at,
                    updated_at=record.updated_at,
                )
                for record in records.value.records
            ]

            export_data = ExportDTO(
                records=exported,
                format=request.format,
                exported_at=utc_now(),
                metadata=ExportMetadata(
                    total_records=len(exported),
                    export_source="full-database" if exported else "empty-export",
                ),
            )
            logger.info("Data exported", extra={"total_records": len(exported), "format": request.format})
            return Ok(ExportDataResponse(success=True, export_data=export_data))
        except Exception as e:
            logger.exception("Export failed")
            return Err(DomainError(ErrorCode.EXPORT_FAILED, f"Export operation failed: {e}"))
