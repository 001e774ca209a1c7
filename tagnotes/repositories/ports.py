"""Repository and unit-of-work ports.

The use-cases depend on these protocols only. Every method returns a Result
and never raises for expected failure modes.
"""

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import Literal, Protocol, TypeVar

from ..domain import DomainError, Record, RecordId, Result, SearchQuery, Tag, TagId

T = TypeVar("T")


@dataclass(frozen=True)
class RecordSearchOptions:
    """Pagination and sorting for record queries."""

    limit: int | None = None
    offset: int = 0
    sort_by: Literal["created_at", "updated_at"] = "created_at"
    sort_order: Literal["asc", "desc"] = "desc"


@dataclass(frozen=True)
class RecordSearchResult:
    records: list[Record] = field(default_factory=list)
    total: int = 0
    has_more: bool = False


@dataclass(frozen=True)
class TagSearchOptions:
    limit: int | None = None
    offset: int = 0
    sort_by: Literal["normalized_value", "usage"] = "normalized_value"
    sort_order: Literal["asc", "desc"] = "asc"


@dataclass(frozen=True)
class TagUsageInfo:
    tag: Tag
    usage_count: int


@dataclass(frozen=True)
class TagSuggestion:
    tag: Tag
    match_score: float


class RecordRepository(Protocol):
    """Persistence port for records."""

    async def find_by_id(self, id: RecordId) -> Result[Record | None, DomainError]: ...

    async def find_all(
        self, options: RecordSearchOptions | None = None
    ) -> Result[RecordSearchResult, DomainError]: ...

    async def search(
        self, query: SearchQuery, options: RecordSearchOptions | None = None
    ) -> Result[RecordSearchResult, DomainError]: ...

    async def find_by_tag_ids(
        self, tag_ids: Iterable[TagId], options: RecordSearchOptions | None = None
    ) -> Result[RecordSearchResult, DomainError]:
        """Records containing ANY of the given tags."""
        ...

    async def find_by_tag_set(
        self, tag_ids: Iterable[TagId], exclude_id: RecordId | None = None
    ) -> Result[list[Record], DomainError]:
        """Records whose tag set is exactly `tag_ids` (duplicate check)."""
        ...

    async def save(self, record: Record) -> Result[Record, DomainError]: ...

    async def update(self, record: Record) -> Result[Record, DomainError]: ...

    async def delete(self, id: RecordId) -> Result[None, DomainError]: ...

    async def save_batch(self, records: list[Record]) -> Result[list[Record], DomainError]: ...

    async def delete_all(self) -> Result[None, DomainError]: ...

    async def count(self) -> Result[int, DomainError]: ...

    async def exists(self, id: RecordId) -> Result[bool, DomainError]: ...


class TagRepository(Protocol):
    """Persistence port for tags."""

    async def find_by_id(self, id: TagId) -> Result[Tag | None, DomainError]: ...

    async def find_by_normalized_value(self, value: str) -> Result[Tag | None, DomainError]: ...

    async def find_by_normalized_values(
        self, values: Iterable[str]
    ) -> Result[list[Tag], DomainError]: ...

    async def find_all(
        self, options: TagSearchOptions | None = None
    ) -> Result[list[Tag], DomainError]: ...

    async def find_by_prefix(
        self, prefix: str, limit: int = 10
    ) -> Result[list[TagSuggestion], DomainError]:
        """Suggestions sorted by match score (desc), then alphabetically."""
        ...

    async def get_usage_info(
        self, options: TagSearchOptions | None = None
    ) -> Result[list[TagUsageInfo], DomainError]: ...

    async def find_orphaned(self) -> Result[list[Tag], DomainError]:
        """Tags not referenced by any record."""
        ...

    async def save(self, tag: Tag) -> Result[Tag, DomainError]: ...

    async def delete(self, id: TagId) -> Result[None, DomainError]: ...

    async def delete_batch(self, ids: Iterable[TagId]) -> Result[None, DomainError]: ...

    async def save_batch(self, tags: list[Tag]) -> Result[list[Tag], DomainError]: ...

    async def delete_all(self) -> Result[None, DomainError]: ...

    async def count(self) -> Result[int, DomainError]: ...

    async def exists(self, id: TagId) -> Result[bool, DomainError]: ...

    async def exists_by_normalized_value(self, value: str) -> Result[bool, DomainError]: ...

    async def get_usage_count(self, id: TagId) -> Result[int, DomainError]: ...


class UnitOfWork(Protocol):
    """
    Транзакционная граница для записи в несколько репозиториев.

    records / tags — репозитории, работающие внутри транзакции.
    begin() идемпотентен; commit() и rollback() без активной
    транзакции ничего не делают.
    """

    @property
    def records(self) -> RecordRepository: ...

    @property
    def tags(self) -> TagRepository: ...

    async def begin(self) -> Result[None, DomainError]: ...

    async def commit(self) -> Result[None, DomainError]: ...

    async def rollback(self) -> Result[None, DomainError]: ...

    async def execute(
        self, operation: Callable[["UnitOfWork"], Awaitable[Result[T, DomainError]]]
    ) -> Result[T, DomainError]:
        """Run operation in a transaction: commit on Ok, rollback on Err or exception."""
        ...

    def is_active(self) -> bool: ...

    async def dispose(self) -> None: ...
