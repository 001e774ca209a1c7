"""Delete record use-case."""

from dataclasses import dataclass, field

from ..core.logging import get_logger
from ..domain import DomainError, Err, ErrorCode, Ok, RecordId, Result
from ..repositories.ports import RecordRepository, TagRepository, UnitOfWork
from .base import TransactionalUseCase, require, validate_record_id

logger = get_logger(__name__)


@dataclass(frozen=True)
class DeleteRecordRequest:
    id: str


@dataclass(frozen=True)
class DeleteRecordResponse:
    deleted_record_id: str
    deleted_orphaned_tags: list[str] = field(default_factory=list)


class DeleteRecordUseCase(TransactionalUseCase):
    """
    Удаление записи с очисткой тегов-сирот.

    Удаление записи и удаление тегов, на которые больше никто не
    ссылается, выполняются в одной транзакции.

    Пример:
        # единственная запись с тегами {t1, t2}
        result = await use_case.execute(DeleteRecordRequest(record_id))
        result.value.deleted_orphaned_tags  # [t1, t2]
    """

    def __init__(
        self,
        record_repository: RecordRepository,
        tag_repository: TagRepository,
        unit_of_work: UnitOfWork,
    ):
        super().__init__(unit_of_work)
        self.record_repository = require(record_repository, "RecordRepository")
        self.tag_repository = require(tag_repository, "TagRepository")

    async def execute(self, request: DeleteRecordRequest) -> Result[DeleteRecordResponse, DomainError]:
        if request is None:
            return Err(DomainError(ErrorCode.VALIDATION_ERROR, "Request cannot be None"))
        invalid = validate_record_id(request.id)
        if invalid:
            return invalid

        record_id = RecordId(request.id)
        try:
            existing = await self.record_repository.find_by_id(record_id)
            if existing.is_err():
                return existing
            if existing.value is None:
                return Err(DomainError(ErrorCode.RECORD_NOT_FOUND, "Record not found", {"record_id": record_id}))

            began = await self.unit_of_work.begin()
            if began.is_err():
                return began

            try:
                deleted = await self.unit_of_work.records.delete(record_id)
                if deleted.is_err():
                    return await self._abort(deleted.error)

                orphaned = await self.unit_of_work.tags.find_orphaned()
                if orphaned.is_err():
                    return await self._abort(orphaned.error)

                orphaned_ids = [tag.id for tag in orphaned.value]
                if orphaned_ids:
                    removed = await self.unit_of_work.tags.delete_batch(orphaned_ids)
                    if removed.is_err():
                        return await self._abort(removed.error)

                failed = await self._commit()
                if failed:
                    return failed
            except Exception as e:
                await self._rollback()
                logger.exception("Delete record transaction failed")
                return self.transaction_failed(e)

            logger.info(
                "Record deleted",
                extra={"record_id": record_id, "orphaned_tags_deleted": len(orphaned_ids)},
            )
            return Ok(DeleteRecordResponse(deleted_record_id=record_id, deleted_orphaned_tags=orphaned_ids))
        except Exception as e:
            logger.exception("Delete record failed")
            return self.use_case_failed(e)
