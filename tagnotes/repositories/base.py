"""Base repository and shared decorators for database operations."""

from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, Generic, ParamSpec, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.logging import get_logger
from ..domain import DomainError, Err, ErrorCode, Result
from ..models.base import Base

logger = get_logger(__name__)

# TypeVar для Generic класса - позволяет работать с любой моделью
ModelType = TypeVar("ModelType", bound=Base)

P = ParamSpec("P")
R = TypeVar("R")


def storage_operation(operation_name: str):
    """
    Decorator that turns database exceptions into STORAGE_ERROR results.

    Repository methods return Result; a SQLAlchemyError raised inside the
    wrapped coroutine is logged and returned as Err instead of propagating.

    Args:
        operation_name: Name used in the error message and the log record

    Returns:
        Decorator function
    """

    def decorator(
        function: Callable[P, Awaitable[Result[R, DomainError]]],
    ) -> Callable[P, Awaitable[Result[R, DomainError]]]:
        @wraps(function)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> Result[R, DomainError]:
            try:
                return await function(*args, **kwargs)
            except IntegrityError as e:
                logger.warning(
                    "Integrity violation",
                    extra={"operation": operation_name, "error": str(e.orig)},
                )
                return Err(
                    DomainError(
                        ErrorCode.STORAGE_ERROR,
                        f"Failed to {operation_name}: data integrity violation: {e.orig}",
                        {"operation": operation_name},
                    )
                )
            except SQLAlchemyError as e:
                logger.error(
                    "Database operation failed",
                    extra={"operation": operation_name, "error": str(e)},
                )
                return Err(
                    DomainError(
                        ErrorCode.STORAGE_ERROR,
                        f"Failed to {operation_name}: {e}",
                        {"operation": operation_name},
                    )
                )

        return wrapper

    return decorator


class BaseRepository(Generic[ModelType]):
    """
    Базовый репозиторий поверх AsyncSession.

    Generic[ModelType] означает, что этот класс работает с любой моделью,
    наследующейся от Base. Наследники переводят строки ORM в доменные
    объекты и возвращают Result.

    Пример использования:
        class SqlTagRepository(BaseRepository[TagModel]):
            def __init__(self, db: AsyncSession):
                super().__init__(TagModel, db)
    """

    def __init__(self, model: type[ModelType], db: AsyncSession):
        """
        Инициализация репозитория.

        Args:
            model: Класс модели SQLAlchemy (RecordModel, TagModel)
            db: Асинхронная сессия базы данных
        """
        self.model = model
        self.db = db

    async def _add(self, obj: ModelType) -> ModelType:
        """
        Добавить объект в сессию и отправить INSERT.

        flush() отправляет в БД, но не делает commit: границы транзакции
        задаёт get_db или unit of work.
        """
        self.db.add(obj)
        await self.db.flush()
        return obj

    async def _get(self, id: Any) -> ModelType | None:
        """
        Получить строку по первичному ключу.

        SQL эквивалент:
            SELECT * FROM table WHERE id = {id} LIMIT 1;
        """
        result = await self.db.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def _exists(self, id: Any) -> bool:
        """
        SQL эквивалент:
            SELECT EXISTS(SELECT 1 FROM table WHERE id={id});
        """
        result = await self.db.execute(
            select(select(self.model.id).where(self.model.id == id).exists())
        )
        return bool(result.scalar())

    async def _count(self) -> int:
        """
        SQL эквивалент:
            SELECT COUNT(*) FROM table;
        """
        result = await self.db.execute(select(func.count()).select_from(self.model))
        return result.scalar_one()
