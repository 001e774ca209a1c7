"""Create record use-case."""

from dataclasses import dataclass

from ..core.logging import get_logger
from ..domain import (
    DomainError,
    Err,
    ErrorCode,
    Ok,
    Record,
    RecordContent,
    Result,
    Tag,
    TagFactory,
    TagId,
    TagParser,
)
from ..repositories.ports import RecordRepository, TagRepository, UnitOfWork
from .base import TransactionalUseCase, require, validate_content
from .dtos import RecordDTO

logger = get_logger(__name__)


@dataclass(frozen=True)
class CreateRecordRequest:
    content: str


@dataclass(frozen=True)
class CreateRecordResponse:
    record: RecordDTO


class CreateRecordUseCase(TransactionalUseCase):
    """
    Создание записи из текста.

    Шаги:
        1. Проверка контента
        2. Разбор тегов; существующие теги переиспользуются, новые
           создаются фабрикой, но сохраняются только внутри транзакции
        3. Проверка дубликата по точному набору тегов (до транзакции)
        4. begin → сохранить новые теги → сохранить запись → commit

    Пример:
        use_case = CreateRecordUseCase(records, tags, uow)
        result = await use_case.execute(CreateRecordRequest("python backend"))
        if result.is_ok():
            print(result.value.record.id)
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

    async def execute(self, request: CreateRecordRequest) -> Result[CreateRecordResponse, DomainError]:
        invalid = validate_content(request.content)
        if invalid:
            return invalid

        try:
            tag_ids: set[TagId] = set()
            new_tags: list[Tag] = []

            for tag_value in self.tag_parser.parse(request.content):
                found = await self.tag_repository.find_by_normalized_value(tag_value)
                if found.is_err():
                    return found

                tag = found.value
                if tag is None:
                    try:
                        tag = self.tag_factory.create_from_string(tag_value)
                    except ValueError as e:
                        return Err(DomainError(ErrorCode.TAG_CREATION_ERROR, f"Failed to create tag: {e}"))
                    new_tags.append(tag)
                tag_ids.add(tag.id)

            try:
                content = RecordContent(request.content)
            except ValueError as e:
                return Err(DomainError(ErrorCode.VALIDATION_ERROR, f"Invalid record content: {e}"))

            record = Record.create(content, tag_ids)

            duplicates = await self.record_repository.find_by_tag_set(tag_ids)
            if duplicates.is_err():
                return duplicates
            if duplicates.value:
                logger.info(
                    "Duplicate record rejected",
                    extra={"duplicate_of": duplicates.value[0].id, "tag_count": len(tag_ids)},
                )
                return Err(
                    DomainError(
                        ErrorCode.DUPLICATE_RECORD,
                        "A record with the same tag set already exists",
                        {"existing_record_id": duplicates.value[0].id},
                    )
                )

            began = await self.unit_of_work.begin()
            if began.is_err():
                return began

            try:
                for tag in new_tags:
                    saved_tag = await self.unit_of_work.tags.save(tag)
                    if saved_tag.is_err():
                        return await self._abort(saved_tag.error)

                saved = await self.unit_of_work.records.save(record)
                if saved.is_err():
                    return await self._abort(saved.error)

                failed = await self._commit()
                if failed:
                    return failed
            except Exception as e:
                await self._rollback()
                logger.exception("Create record transaction failed")
                return self.transaction_failed(e)

            logger.info(
                "Record created",
                extra={"record_id": record.id, "tag_count": len(tag_ids), "new_tags": len(new_tags)},
            )
            return Ok(CreateRecordResponse(record=RecordDTO.from_record(saved.value)))
        except Exception as e:
            logger.exception("Create record failed")
            return self.use_case_failed(e)
