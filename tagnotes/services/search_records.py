"""Search records use-case."""

from dataclasses import dataclass, replace

from ..core.logging import get_logger
from ..domain import DomainError, Err, ErrorCode, Ok, Result, SearchQuery, TagNormalizer
from ..repositories.ports import RecordRepository, RecordSearchOptions
from .base import require
from .dtos import SearchResultDTO

logger = get_logger(__name__)

DEFAULT_LIMIT = 10


@dataclass(frozen=True)
class SearchRecordsRequest:
    query: str = ""
    options: RecordSearchOptions | None = None


@dataclass(frozen=True)
class SearchRecordsResponse:
    search_result: SearchResultDTO


class SearchRecordsUseCase:
    """
    Поиск записей по тегам.

    Пустой запрос (или только пробелы) возвращает все записи.
    По умолчанию: limit=10, offset=0, сортировка по created_at desc.
    """

    def __init__(
        self,
        record_repository: RecordRepository,
        normalizer: TagNormalizer | None = None,
        default_limit: int = DEFAULT_LIMIT,
    ):
        self.record_repository = require(record_repository, "RecordRepository")
        self.normalizer = normalizer or TagNormalizer()
        self.default_limit = default_limit

    def _options(self, requested: RecordSearchOptions | None) -> RecordSearchOptions:
        options = requested or RecordSearchOptions()
        if options.limit is None:
            options = replace(options, limit=self.default_limit)
        return options

    async def execute(self, request: SearchRecordsRequest) -> Result[SearchRecordsResponse, DomainError]:
        if request is None:
            return Err(DomainError(ErrorCode.VALIDATION_ERROR, "Request cannot be None"))

        options = self._options(request.options)
        if options.limit <= 0:
            return Err(DomainError(ErrorCode.VALIDATION_ERROR, "Limit must be a positive number"))
        if options.offset < 0:
            return Err(DomainError(ErrorCode.VALIDATION_ERROR, "Offset cannot be negative"))

        query_string = (request.query or "").strip()
        try:
            if not query_string:
                found = await self.record_repository.find_all(options)
            else:
                found = await self.record_repository.search(
                    SearchQuery(query_string, self.normalizer), options
                )
            if found.is_err():
                return found

            logger.debug(
                "Records searched",
                extra={"query": query_string, "total": found.value.total},
            )
            return Ok(
                SearchRecordsResponse(
                    search_result=SearchResultDTO.from_result(
                        found.value,
                        limit=options.limit,
                        offset=options.offset,
                        search_query=query_string or None,
                    )
                )
            )
        except Exception as e:
            logger.exception("Search records failed")
            return Err(DomainError(ErrorCode.USE_CASE_ERROR, f"Use case execution failed: {e}"))
