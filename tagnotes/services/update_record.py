"""Update record use-case."""

from dataclasses import dataclass

from ..core.logging import get_logger
from ..domain import (
    DomainError,
    Err,
    ErrorCode,
    Ok,
    RecordContent,
    RecordId,
    Result,
    TagFactory,
    TagId,
    TagParser,
)
from ..repositories.ports import RecordRepository, TagRepository, UnitOfWork
from .base import TransactionalUseCase, require, validate_content, validate_record_id
from .dtos import RecordDTO

logger = get_logger(__name__)


@dataclass(frozen=True)
class UpdateRecordRequest:
    id: str
    content: str


@dataclass(frozen=True)
class UpdateRecordResponse:
    record: RecordDTO


class UpdateRecordUseCase(TransactionalUseCase):
    """
    Изменение контента записи.

    Новые теги сохраняются сразу, через нетранзакционный репозиторий;
    в транзакции выполняются только обновление записи и удаление
    тегов, оставшихся без записей.

    Проверка дубликата исключает саму обновляемую запись, поэтому
    сохранение того же набора тегов с другим текстом разрешено.
    """

    def __init__(
        self,
        record_repository: RecordRepository,
        tag_repository: TagRepository,
        unit_of_work: UnitOfWork,
        tag_parser: TagParser | None = None,
        tag_factory: TagFactory | None = None,
    ):
        super().__init__(unit_of_work)
        self.record_repository = require(record_repository, "RecordRepository")
        self.tag_repository = require(tag_repository, "TagRepository")
        self.tag_parser = tag_parser or TagParser()
        self.tag_factory = tag_factory or TagFactory()

    async def _resolve_tags(self, content: str) -> Result[set[TagId], DomainError]:
        tag_ids: set[TagId] = set()
        for tag_value in self.tag_parser.parse(content):
            found = await self.tag_repository.find_by_normalized_value(tag_value)
            if found.is_err():
                return found

            tag = found.value
            if tag is None:
                try:
                    new_tag = self.tag_factory.create_from_string(tag_value)
                except ValueError as e:
                    return Err(DomainError(ErrorCode.TAG_CREATION_ERROR, f"Failed to create tag: {e}"))
                saved = await self.tag_repository.save(new_tag)
                if saved.is_err():
                    return saved
                tag = saved.value
            tag_ids.add(tag.id)
        return Ok(tag_ids)

    async def execute(self, request: UpdateRecordRequest) -> Result[UpdateRecordResponse, DomainError]:
        if request is None:
            return Err(DomainError(ErrorCode.VALIDATION_ERROR, "Request cannot be None"))
        invalid = validate_record_id(request.id) or validate_content(request.content)
        if invalid:
            return invalid

        record_id = RecordId(request.id)
        try:
            existing = await self.record_repository.find_by_id(record_id)
            if existing.is_err():
                return existing
            if existing.value is None:
                return Err(DomainError(ErrorCode.RECORD_NOT_FOUND, "Record not found", {"record_id": record_id}))
            current = existing.value

            resolved = await self._resolve_tags(request.content)
            if resolved.is_err():
                return resolved
            tag_ids = resolved.value

            duplicates = await self.record_repository.find_by_tag_set(tag_ids, exclude_id=record_id)
            if duplicates.is_err():
                return duplicates
            if duplicates.value:
                logger.info(
                    "Duplicate record rejected",
                    extra={"record_id": record_id, "duplicate_of": duplicates.value[0].id},
                )
                return Err(
                    DomainError(
                        ErrorCode.DUPLICATE_RECORD,
                        "A record with the same tag set already exists",
                        {"existing_record_id": duplicates.value[0].id},
                    )
                )

            try:
                content = RecordContent(request.content)
            except ValueError as e:
                return Err(DomainError(ErrorCode.VALIDATION_ERROR, f"Invalid record content: {e}"))

            updated = current.update_content(content, tag_ids)

            began = await self.unit_of_work.begin()
            if began.is_err():
                return began

            try:
                saved = await self.unit_of_work.records.update(updated)
                if saved.is_err():
                    return await self._abort(saved.error)

                orphaned = await self.unit_of_work.tags.find_orphaned()
                if orphaned.is_err():
                    return await self._abort(orphaned.error)

                orphaned_ids = [tag.id for tag in orphaned.value]
                if orphaned_ids:
                    deleted = await self.unit_of_work.tags.delete_batch(orphaned_ids)
                    if deleted.is_err():
                        return await self._abort(deleted.error)

                failed = await self._commit()
                if failed:
                    return failed
            except Exception as e:
                await self._rollback()
                logger.exception("Update record transaction failed")
                return self.transaction_failed(e)

            logger.info(
                "Record updated",
                extra={"record_id": record_id, "tag_count": len(tag_ids), "orphaned_tags_deleted": len(orphaned_ids)},
            )
            return Ok(UpdateRecordResponse(record=RecordDTO.from_record(saved.value)))
        except Exception as e:
            logger.exception("Update record failed")
            return self.use_case_failed(e)
