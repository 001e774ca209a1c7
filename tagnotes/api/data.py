"""API endpoints для экспорта и импорта данных."""

from typing import Any

from fastapi import APIRouter, Body, Depends, Query

from ..services import ExportDataRequest, ExportDataUseCase, ExportDTO, ImportDataUseCase, ImportResultDTO
from .dependencies import get_export_data_use_case, get_import_data_use_case
from .errors import unwrap_or_raise
from .schemas import ErrorResponse

router = APIRouter(prefix="/data", tags=["data"])


@router.get(
    "/export",
    response_model=ExportDTO,
    responses={400: {"model": ErrorResponse}},
    summary="Экспорт всех записей",
)
async def export_data(
    format: str = Query("json", description="json | csv | xml | yaml"),
    use_case: ExportDataUseCase = Depends(get_export_data_use_case),
) -> ExportDTO:
    response = unwrap_or_raise(await use_case.execute(ExportDataRequest(format=format)))
    return response.export_data


@router.post(
    "/import",
    response_model=ImportResultDTO,
    responses={400: {"model": ErrorResponse}},
    summary="Импорт (полная замена данных)",
)
async def import_data(
    payload: dict[str, Any] = Body(..., description="Снимок в формате GET /data/export"),
    use_case: ImportDataUseCase = Depends(get_import_data_use_case),
) -> ImportResultDTO:
    """
    Заменить все записи и теги содержимым снимка.

    Некорректный снимок → 400 IMPORT_VALIDATION_FAILED, данные не меняются.
    """
    return unwrap_or_raise(await use_case.execute(payload))
