"""
API endpoints для работы с записями.

Запись — свободный текст; каждое слово, прошедшее валидацию,
становится нормализованным тегом.
"""

from typing import Literal

from fastapi import APIRouter, Depends, Query, status

from ..domain import RecordId
from ..repositories import RecordSearchOptions, SqlRecordRepository
from ..services import (
    CreateRecordRequest,
    CreateRecordUseCase,
    DeleteRecordRequest,
    DeleteRecordUseCase,
    RecordDTO,
    SearchRecordsRequest,
    SearchRecordsUseCase,
    SearchResultDTO,
    UpdateRecordRequest,
    UpdateRecordUseCase,
)
from .dependencies import (
    get_create_record_use_case,
    get_delete_record_use_case,
    get_record_repository,
    get_search_records_use_case,
    get_update_record_use_case,
)
from .errors import NotFoundError, unwrap_or_raise
from .schemas import ErrorResponse, RecordCreate, RecordDeleted, RecordUpdate

router = APIRouter(prefix="/records", tags=["records"])


# ============================================================================
# SEARCH RECORDS
# ============================================================================


@router.get("", response_model=SearchResultDTO, summary="Поиск записей")
async def search_records(
    q: str = Query("", description="Термы поиска через пробел (AND)"),
    limit: int | None = Query(None, ge=1, le=100, description="Размер страницы"),
    offset: int = Query(0, ge=0),
    sort_by: Literal["created_at", "updated_at"] = Query("created_at"),
    sort_order: Literal["asc", "desc"] = Query("desc"),
    use_case: SearchRecordsUseCase = Depends(get_search_records_use_case),
) -> SearchResultDTO:
    """
    Найти записи, у которых каждый терм входит хотя бы в один тег.

    Пустой q возвращает все записи.

    Пример запроса:
    ```
    GET /records?q=java%20rea&limit=10
    ```
    """
    options = RecordSearchOptions(limit=limit, offset=offset, sort_by=sort_by, sort_order=sort_order)
    response = unwrap_or_raise(await use_case.execute(SearchRecordsRequest(query=q, options=options)))
    return response.search_result


# ============================================================================
# GET RECORD
# ============================================================================


@router.get(
    "/{record_id}",
    response_model=RecordDTO,
    responses={404: {"model": ErrorResponse}},
    summary="Получить запись по ID",
)
async def get_record(
    record_id: str,
    repository: SqlRecordRepository = Depends(get_record_repository),
) -> RecordDTO:
    record = unwrap_or_raise(await repository.find_by_id(RecordId(record_id)))
    if record is None:
        raise NotFoundError("Record not found")
    return RecordDTO.from_record(record)


# ============================================================================
# CREATE RECORD
# ============================================================================


@router.post(
    "",
    response_model=RecordDTO,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Создать запись",
)
async def create_record(
    data: RecordCreate,
    use_case: CreateRecordUseCase = Depends(get_create_record_use_case),
) -> RecordDTO:
    """
    Создать запись.

    Пример запроса:
    ```json
    {"content": "python fastapi backend"}
    ```

    Запись с тем же набором тегов уже есть → 409 DUPLICATE_RECORD.
    """
    response = unwrap_or_raise(await use_case.execute(CreateRecordRequest(content=data.content)))
    return response.record


# ============================================================================
# UPDATE RECORD
# ============================================================================


@router.put(
    "/{record_id}",
    response_model=RecordDTO,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Обновить запись",
)
async def update_record(
    record_id: str,
    data: RecordUpdate,
    use_case: UpdateRecordUseCase = Depends(get_update_record_use_case),
) -> RecordDTO:
    response = unwrap_or_raise(
        await use_case.execute(UpdateRecordRequest(id=record_id, content=data.content))
    )
    return response.record


# ============================================================================
# DELETE RECORD
# ============================================================================


@router.delete(
    "/{record_id}",
    response_model=RecordDeleted,
    responses={404: {"model": ErrorResponse}},
    summary="Удалить запись",
)
async def delete_record(
    record_id: str,
    use_case: DeleteRecordUseCase = Depends(get_delete_record_use_case),
) -> RecordDeleted:
    """
    Удалить запись и теги, которые после этого ни на что не ссылаются.
    """
    response = unwrap_or_raise(await use_case.execute(DeleteRecordRequest(id=record_id)))
    return RecordDeleted(
        deleted_record_id=response.deleted_record_id,
        deleted_orphaned_tags=response.deleted_orphaned_tags,
    )
