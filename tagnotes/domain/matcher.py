"""Matching records against search queries."""

from collections.abc import Mapping

from .ids import TagId
from .normalizer import TagNormalizer
from .record import Record
from .tag import Tag


class SearchQuery:
    """
    Поисковый запрос — строка, разбитая на термы по пробелам.

    Термы нормализуются тем же TagNormalizer, что и теги,
    поэтому запрос "Café" находит тег "cafe".
    """

    def __init__(self, value: str, normalizer: TagNormalizer | None = None):
        if value is None:
            raise ValueError("Search query cannot be None")
        self.value = value
        self.normalizer = normalizer or TagNormalizer()

    def tokens(self) -> list[str]:
        return self.value.split()

    def normalized_tokens(self) -> list[str]:
        tokens = [self.normalizer.normalize(token) for token in self.tokens()]
        return [token for token in tokens if token]

    def is_empty(self) -> bool:
        return not self.normalized_tokens()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SearchQuery):
            return NotImplemented
        return self.value == other.value

    def __hash__(self) -> int:
        return hash(self.value)

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"<SearchQuery('{self.value}')>"


class RecordMatcher:
    """Decide whether a record matches a query.

    Semantics: every query term (AND) must be a substring of at least one
    (OR) of the record's tag values. An empty query matches everything;
    a record without tags matches only the empty query.
    """

    def matches(
        self,
        record: Record | None,
        query: SearchQuery | None,
        tag_lookup: Mapping[TagId, Tag] | None,
    ) -> bool:
        """Check a single record.

        Args:
            record: Record to check
            query: Search query
            tag_lookup: Map of tag ID to Tag used to resolve record tags;
                IDs missing from it are ignored

        Returns:
            True if the record matches the query
        """
        if record is None or query is None or tag_lookup is None:
            return False

        terms = query.normalized_tokens()
        if not terms:
            return True

        tag_values = self._resolve_tag_values(record, tag_lookup)
        return all(any(term in value for value in tag_values) for term in terms)

    def filter(
        self,
        records: list[Record],
        query: SearchQuery,
        tag_lookup: Mapping[TagId, Tag],
    ) -> list[Record]:
        return [record for record in records if self.matches(record, query, tag_lookup)]

    def _resolve_tag_values(self, record: Record, tag_lookup: Mapping[TagId, Tag]) -> list[str]:
        values = []
        for tag_id in record.tag_ids:
            tag = tag_lookup.get(tag_id)
            if tag is not None:
                values.append(tag.normalized_value)
        return values
