"""SQLAlchemy unit of work.

One AsyncSession per request is shared by the plain repositories and the
unit of work, so everything a use-case reads is visible inside its
transaction.
"""

from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.logging import get_logger
from ..domain import DomainError, Err, ErrorCode, Ok, Result
from .ports import UnitOfWork
from .record import SqlRecordRepository
from .tag import SqlTagRepository

logger = get_logger(__name__)

T = TypeVar("T")


class SqlAlchemyUnitOfWork:
    """
    Unit of Work поверх AsyncSession.

    begin() фиксирует неявную работу, сделанную до транзакции (например,
    теги, созданные в UpdateRecordUseCase), и открывает явную транзакцию.
    commit() и rollback() без активной транзакции ничего не делают.
    Ошибка rollback логируется и не пробрасывается.

    Пример:
        uow = SqlAlchemyUnitOfWork(session)
        await uow.begin()
        await uow.records.save(record)
        result = await uow.commit()
        if result.is_err():
            await uow.rollback()
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self._records = SqlRecordRepository(session)
        self._tags = SqlTagRepository(session)
        self._active = False

    @property
    def records(self) -> SqlRecordRepository:
        return self._records

    @property
    def tags(self) -> SqlTagRepository:
        return self._tags

    def is_active(self) -> bool:
        return self._active

    async def begin(self) -> Result[None, DomainError]:
        if self._active:
            return Ok(None)
        try:
            if self.session.in_transaction():
                await self.session.commit()
            await self.session.begin()
        except SQLAlchemyError as e:
            logger.error("Failed to begin transaction", extra={"error": str(e)})
            return Err(DomainError(ErrorCode.TRANSACTION_ERROR, f"Failed to begin transaction: {e}"))
        self._active = True
        return Ok(None)

    async def commit(self) -> Result[None, DomainError]:
        if not self._active:
            return Ok(None)
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to commit transaction", extra={"error": str(e)})
            await self._rollback_quietly()
            return Err(DomainError(ErrorCode.TRANSACTION_ERROR, f"Failed to commit transaction: {e}"))
        self._active = False
        return Ok(None)

    async def rollback(self) -> Result[None, DomainError]:
        if not self._active:
            return Ok(None)
        await self._rollback_quietly()
        return Ok(None)

    async def _rollback_quietly(self) -> None:
        self._active = False
        try:
            await self.session.rollback()
        except SQLAlchemyError as e:
            # rollback failures must not mask the original error
            logger.error("Rollback failed", extra={"error": str(e)})
        else:
            logger.warning("Transaction rolled back")

    async def execute(
        self, operation: Callable[[UnitOfWork], Awaitable[Result[T, DomainError]]]
    ) -> Result[T, DomainError]:
        """
        Выполнить operation в транзакции.

        Ok → commit, Err → rollback и тот же Err,
        исключение → rollback и TRANSACTION_ERROR.
        """
        begin_result = await self.begin()
        if begin_result.is_err():
            return begin_result

        try:
            result = await operation(self)
        except Exception as e:
            await self._rollback_quietly()
            logger.exception("Transaction operation raised")
            return Err(DomainError(ErrorCode.TRANSACTION_ERROR, f"Transaction failed: {e}"))

        if result.is_err():
            await self._rollback_quietly()
            return result

        commit_result = await self.commit()
        if commit_result.is_err():
            return commit_result
        return result

    async def dispose(self) -> None:
        """Roll back an unfinished transaction. The session itself is owned by get_db."""
        if self._active:
            await self._rollback_quietly()
