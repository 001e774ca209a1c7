"""
Dependencies для FastAPI endpoints.

Цепочка зависимостей одного запроса:
    get_db → AsyncSession (одна на запрос, commit/rollback в конце)
        → репозитории и SqlAlchemyUnitOfWork на этой же сессии
        → use-case

FastAPI кеширует зависимости в пределах запроса, поэтому репозитории
и unit of work гарантированно работают с одной и той же сессией.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.database import get_db
from ..domain import TagFactory, TagNormalizer, TagParser
from ..repositories import SqlAlchemyUnitOfWork, SqlRecordRepository, SqlTagRepository
from ..services import (
    CreateRecordUseCase,
    DeleteRecordUseCase,
    ExportDataUseCase,
    GetTagCloudUseCase,
    GetTagSuggestionsUseCase,
    ImportDataUseCase,
    SearchRecordsUseCase,
    UpdateRecordUseCase,
)

__all__ = [
    "get_db",
    "verify_api_key",
    "get_normalizer",
    "get_record_repository",
    "get_tag_repository",
    "get_unit_of_work",
    "get_create_record_use_case",
    "get_update_record_use_case",
    "get_delete_record_use_case",
    "get_search_records_use_case",
    "get_tag_suggestions_use_case",
    "get_tag_cloud_use_case",
    "get_export_data_use_case",
    "get_import_data_use_case",
]

# ============================================================================
# API KEY AUTHENTICATION
# ============================================================================

api_key_header = APIKeyHeader(
    name="X-API-Key",
    auto_error=False,  # Не выбрасывать ошибку автоматически, мы сами обработаем
    description="API ключ для авторизации. Передавайте в заголовке X-API-Key",
)


async def verify_api_key(api_key: str = Depends(api_key_header)) -> str:
    """
    Dependency для проверки API ключа.

    Пример запроса:
        curl -H "X-API-Key: your-secret-key" http://localhost:8000/api/v1/records
    """
    if api_key is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API key is missing. Add header: X-API-Key: your-key",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    if api_key != settings.API_KEY:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    return api_key


# ============================================================================
# INFRASTRUCTURE
# ============================================================================


def get_normalizer() -> TagNormalizer:
    """TagNormalizer, настроенный из TAG_* переменных окружения."""
    return TagNormalizer(settings.tag_normalizer_config())


async def get_record_repository(db: AsyncSession = Depends(get_db)) -> SqlRecordRepository:
    return SqlRecordRepository(db)


async def get_tag_repository(db: AsyncSession = Depends(get_db)) -> SqlTagRepository:
    return SqlTagRepository(db)


async def get_unit_of_work(db: AsyncSession = Depends(get_db)):
    """
    Unit of Work на сессии запроса.

    dispose() откатывает транзакцию, если use-case её не завершил.
    """
    uow = SqlAlchemyUnitOfWork(db)
    try:
        yield uow
    finally:
        await uow.dispose()


# ============================================================================
# USE-CASE DEPENDENCIES
# ============================================================================


async def get_create_record_use_case(
    records: SqlRecordRepository = Depends(get_record_repository),
    tags: SqlTagRepository = Depends(get_tag_repository),
    uow: SqlAlchemyUnitOfWork = Depends(get_unit_of_work),
    normalizer: TagNormalizer = Depends(get_normalizer),
) -> CreateRecordUseCase:
    return CreateRecordUseCase(
        records,
        tags,
        uow,
        tag_parser=TagParser(normalizer=normalizer),
        tag_factory=TagFactory(normalizer=normalizer),
    )


async def get_update_record_use_case(
    records: SqlRecordRepository = Depends(get_record_repository),
    tags: SqlTagRepository = Depends(get_tag_repository),
    uow: SqlAlchemyUnitOfWork = Depends(get_unit_of_work),
    normalizer: TagNormalizer = Depends(get_normalizer),
) -> UpdateRecordUseCase:
    return UpdateRecordUseCase(
        records,
        tags,
        uow,
        tag_parser=TagParser(normalizer=normalizer),
        tag_factory=TagFactory(normalizer=normalizer),
    )


async def get_delete_record_use_case(
    records: SqlRecordRepository = Depends(get_record_repository),
    tags: SqlTagRepository = Depends(get_tag_repository),
    uow: SqlAlchemyUnitOfWork = Depends(get_unit_of_work),
) -> DeleteRecordUseCase:
    return DeleteRecordUseCase(records, tags, uow)


async def get_search_records_use_case(
    records: SqlRecordRepository = Depends(get_record_repository),
    normalizer: TagNormalizer = Depends(get_normalizer),
) -> SearchRecordsUseCase:
    return SearchRecordsUseCase(records, normalizer=normalizer, default_limit=settings.DEFAULT_PAGE_SIZE)


async def get_tag_suggestions_use_case(
    tags: SqlTagRepository = Depends(get_tag_repository),
    normalizer: TagNormalizer = Depends(get_normalizer),
) -> GetTagSuggestionsUseCase:
    return GetTagSuggestionsUseCase(tags, normalizer=normalizer)


async def get_tag_cloud_use_case(
    tags: SqlTagRepository = Depends(get_tag_repository),
) -> GetTagCloudUseCase:
    return GetTagCloudUseCase(tags)


async def get_export_data_use_case(
    records: SqlRecordRepository = Depends(get_record_repository),
    tags: SqlTagRepository = Depends(get_tag_repository),
) -> ExportDataUseCase:
    return ExportDataUseCase(records, tags)


async def get_import_data_use_case(
    uow: SqlAlchemyUnitOfWork = Depends(get_unit_of_work),
    normalizer: TagNormalizer = Depends(get_normalizer),
) -> ImportDataUseCase:
    return ImportDataUseCase(
        uow,
        tag_factory=TagFactory(normalizer=normalizer),
        batch_size=settings.IMPORT_BATCH_SIZE,
    )
