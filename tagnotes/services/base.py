"""Shared plumbing for use-cases that write through a unit of work."""

from ..core.logging import get_logger
from ..domain import DomainError, Err, ErrorCode, is_valid_id
from ..repositories.ports import UnitOfWork


def require(dependency, name: str):
    """Reject a missing constructor dependency."""
    if dependency is None:
        raise ValueError(f"{name} cannot be None")
    return dependency


def validation_error(message: str, **context) -> Err[DomainError]:
    return Err(DomainError(ErrorCode.VALIDATION_ERROR, message, context or None))


def validate_record_id(value: object) -> Err[DomainError] | None:
    """Return an Err for a missing or malformed record id, None when it is fine."""
    if value is None:
        return validation_error("Record ID cannot be None")
    if not isinstance(value, str) or not value.strip():
        return validation_error("Record ID cannot be empty")
    if not is_valid_id(value):
        return validation_error(f"Invalid record ID: {value}", record_id=value)
    return None


def validate_content(value: object) -> Err[DomainError] | None:
    if value is None:
        return validation_error("Content cannot be None")
    if not isinstance(value, str) or not value.strip():
        return validation_error("Content cannot be empty")
    return None


class TransactionalUseCase:
    """
    Базовый класс use-case с транзакцией через UnitOfWork.

    Шаблон выполнения (одинаков для Create / Update / Delete):
        1. Валидация входа и чтение (вне транзакции)
        2. begin()
        3. Запись через uow.records / uow.tags
        4. commit(); при ошибке коммита — rollback() и ошибка коммита наружу
        5. Любая ошибка после begin() → rollback() и та же ошибка
    """

    def __init__(self, unit_of_work: UnitOfWork):
        self.unit_of_work = require(unit_of_work, "UnitOfWork")
        self.logger = get_logger(type(self).__module__)

    async def _rollback(self) -> None:
        """Roll back; a failing rollback is logged and never replaces the original error."""
        try:
            result = await self.unit_of_work.rollback()
        except Exception:
            self.logger.exception("Rollback raised")
            return
        if result.is_err():
            self.logger.error(
                "Rollback failed",
                extra={"code": result.error.code, "error": result.error.message},
            )

    async def _abort(self, error: DomainError) -> Err[DomainError]:
        await self._rollback()
        self.logger.warning(
            "Transaction aborted", extra={"code": error.code, "error": error.message}
        )
        return Err(error)

    async def _commit(self) -> Err[DomainError] | None:
        """Commit; on failure roll back and return the commit error."""
        result = await self.unit_of_work.commit()
        if result.is_err():
            return await self._abort(result.error)
        return None

    @staticmethod
    def transaction_failed(exc: Exception) -> Err[DomainError]:
        return Err(DomainError(ErrorCode.TRANSACTION_ERROR, f"Transaction failed: {exc}"))

    @staticmethod
    def use_case_failed(exc: Exception) -> Err[DomainError]:
        return Err(DomainError(ErrorCode.USE_CASE_ERROR, f"Use case execution failed: {exc}"))
