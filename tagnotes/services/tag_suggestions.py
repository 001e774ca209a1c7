"""Tag autocomplete and tag cloud use-cases."""

from dataclasses import dataclass, field

from ..core.logging import get_logger
from ..domain import DomainError, Err, ErrorCode, Ok, Result, TagNormalizer
from ..repositories.ports import TagRepository, TagSearchOptions
from .base import require
from .dtos import TagCloudItemDTO, TagSuggestionDTO

logger = get_logger(__name__)

DEFAULT_SUGGESTION_LIMIT = 5


@dataclass(frozen=True)
class GetTagSuggestionsRequest:
    prefix: str
    limit: int | None = None


@dataclass(frozen=True)
class GetTagSuggestionsResponse:
    suggestions: list[TagSuggestionDTO] = field(default_factory=list)


class GetTagSuggestionsUseCase:
    """
    Подсказки тегов по префиксу.

    Префикс нормализуется так же, как теги, поэтому "CAF" и "Caf"
    находят "cafe".

    Пример:
        result = await use_case.execute(GetTagSuggestionsRequest("java"))
        [s.normalized_value for s in result.value.suggestions]
        # ["java", "javascript"]
    """

    def __init__(self, tag_repository: TagRepository, normalizer: TagNormalizer | None = None):
        self.tag_repository = require(tag_repository, "TagRepository")
        self.normalizer = normalizer or TagNormalizer()

    async def execute(
        self, request: GetTagSuggestionsRequest
    ) -> Result[GetTagSuggestionsResponse, DomainError]:
        if request is None:
            return Err(DomainError(ErrorCode.VALIDATION_ERROR, "Request cannot be None"))
        if not isinstance(request.prefix, str) or not request.prefix.strip():
            return Err(DomainError(ErrorCode.VALIDATION_ERROR, "Prefix cannot be empty or whitespace only"))

        limit = DEFAULT_SUGGESTION_LIMIT if request.limit is None else request.limit
        if limit <= 0:
            return Err(DomainError(ErrorCode.VALIDATION_ERROR, "Limit must be a positive number"))

        try:
            prefix = self.normalizer.normalize(request.prefix.strip())
            found = await self.tag_repository.find_by_prefix(prefix, limit)
            if found.is_err():
                return found
            return Ok(
                GetTagSuggestionsResponse(
                    suggestions=[
                        TagSuggestionDTO(
                            id=s.tag.id,
                            normalized_value=s.tag.normalized_value,
                            match_score=s.match_score,
                        )
                        for s in found.value
                    ]
                )
            )
        except Exception as e:
            logger.exception("Tag suggestions failed")
            return Err(DomainError(ErrorCode.USE_CASE_ERROR, f"Use case execution failed: {e}"))


class GetTagCloudUseCase:
    """Теги с количеством использований, самые частые первыми."""

    def __init__(self, tag_repository: TagRepository):
        self.tag_repository = require(tag_repository, "TagRepository")

    async def execute(self, limit: int | None = None) -> Result[list[TagCloudItemDTO], DomainError]:
        if limit is not None and limit <= 0:
            return Err(DomainError(ErrorCode.VALIDATION_ERROR, "Limit must be a positive number"))

        found = await self.tag_repository.get_usage_info(
            TagSearchOptions(limit=limit, sort_by="usage", sort_order="desc")
        )
        if found.is_err():
            return found
        return Ok(
            [
                TagCloudItemDTO(
                    id=info.tag.id,
                    normalized_value=info.tag.normalized_value,
                    usage_count=info.usage_count,
                )
                for info in found.value
            ]
        )
