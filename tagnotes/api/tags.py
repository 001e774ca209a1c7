"""API endpoints для тегов: автодополнение и облако тегов."""

from fastapi import APIRouter, Depends, Query

from ..services import (
    GetTagCloudUseCase,
    GetTagSuggestionsRequest,
    GetTagSuggestionsUseCase,
    TagCloudItemDTO,
    TagSuggestionDTO,
)
from .dependencies import get_tag_cloud_use_case, get_tag_suggestions_use_case
from .errors import unwrap_or_raise

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("/suggestions", response_model=list[TagSuggestionDTO], summary="Подсказки тегов")
async def get_tag_suggestions(
    prefix: str = Query(..., min_length=1, description="Начало тега"),
    limit: int = Query(5, ge=1, le=50),
    use_case: GetTagSuggestionsUseCase = Depends(get_tag_suggestions_use_case),
) -> list[TagSuggestionDTO]:
    """
    Теги, начинающиеся с prefix (после нормализации).

    Пример ответа для `GET /tags/suggestions?prefix=java`:
    ```json
    [
        {"id": "...", "normalized_value": "java", "match_score": 1.0},
        {"id": "...", "normalized_value": "javascript", "match_score": 0.4}
    ]
    ```
    """
    response = unwrap_or_raise(await use_case.execute(GetTagSuggestionsRequest(prefix=prefix, limit=limit)))
    return response.suggestions


@router.get("/cloud", response_model=list[TagCloudItemDTO], summary="Облако тегов")
async def get_tag_cloud(
    limit: int | None = Query(None, ge=1, le=500),
    use_case: GetTagCloudUseCase = Depends(get_tag_cloud_use_case),
) -> list[TagCloudItemDTO]:
    """Теги с количеством записей, самые используемые первыми."""
    return unwrap_or_raise(await use_case.execute(limit))
