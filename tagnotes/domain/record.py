"""Record entity, content value object and factory."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

from .ids import RecordId, TagId, generate_id
from .parser import TagParser
from .tag import TagFactory

MAX_CONTENT_LENGTH = 10_000


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


@dataclass(frozen=True)
class RecordContent:
    """Raw record text. Must not be empty or whitespace-only."""

    value: str

    def __post_init__(self) -> None:
        if self.value is None:
            raise ValueError("Record content cannot be None")
        if not isinstance(self.value, str) or not self.value.strip():
            raise ValueError("Record content cannot be empty")
        if len(self.value) > MAX_CONTENT_LENGTH:
            raise ValueError(
                f"Record content exceeds maximum length of {MAX_CONTENT_LENGTH} characters"
            )

    def tokens(self) -> list[str]:
        return self.value.split()

    def __str__(self) -> str:
        return self.value


class Record:
    """
    Запись — неизменяемая сущность с контентом и набором тегов.

    Любое изменение (контент, теги) создаёт НОВЫЙ экземпляр с тем же ID,
    тем же created_at и обновлённым updated_at.

    tag_ids хранится как frozenset; свойство tag_ids возвращает копию,
    поэтому изменение полученного множества не затрагивает запись.

    Пример:
        record = Record.create(RecordContent("python backend"), {tag1.id, tag2.id})
        updated = record.update_tags({tag1.id})
        assert updated.id == record.id
        assert updated.created_at == record.created_at
    """

    __slots__ = ("_id", "_content", "_tag_ids", "_created_at", "_updated_at")

    def __init__(
        self,
        id: RecordId,
        content: RecordContent,
        tag_ids: Iterable[TagId],
        created_at: datetime,
        updated_at: datetime,
    ):
        if id is None:
            raise ValueError("Record ID cannot be None")
        if content is None:
            raise ValueError("Record content cannot be None")
        if tag_ids is None:
            raise ValueError("Tag IDs cannot be None")
        if created_at is None:
            raise ValueError("Created date cannot be None")
        if updated_at is None:
            raise ValueError("Updated date cannot be None")
        if updated_at < created_at:
            raise ValueError("Updated date cannot be before created date")

        self._id = id
        self._content = content
        self._tag_ids = frozenset(tag_ids)
        self._created_at = created_at
        self._updated_at = updated_at

    @classmethod
    def create(cls, content: RecordContent, tag_ids: Iterable[TagId]) -> "Record":
        """Create a new record with a fresh ID and current timestamps."""
        now = utc_now()
        return cls(RecordId(generate_id()), content, tag_ids, now, now)

    @property
    def id(self) -> RecordId:
        return self._id

    @property
    def content(self) -> RecordContent:
        return self._content

    @property
    def tag_ids(self) -> set[TagId]:
        return set(self._tag_ids)

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    def has_tag(self, tag_id: TagId | None) -> bool:
        if tag_id is None:
            return False
        return tag_id in self._tag_ids

    def has_same_tag_set(self, other: "Record") -> bool:
        """Exact set equality of tag IDs (order and content are ignored)."""
        if not isinstance(other, Record):
            return False
        return self._tag_ids == other._tag_ids

    def update_tags(self, tag_ids: Iterable[TagId]) -> "Record":
        if tag_ids is None:
            raise ValueError("Tag IDs cannot be None")
        return self._replace(tag_ids=tag_ids)

    def update_content(self, content: RecordContent, tag_ids: Iterable[TagId]) -> "Record":
        if content is None:
            raise ValueError("Record content cannot be None")
        return self._replace(content=content, tag_ids=tag_ids)

    def _replace(
        self,
        content: RecordContent | None = None,
        tag_ids: Iterable[TagId] | None = None,
    ) -> "Record":
        # updated_at never goes below created_at even if the clock moves back
        now = max(utc_now(), self._created_at)
        return Record(
            self._id,
            content if content is not None else self._content,
            tag_ids if tag_ids is not None else self._tag_ids,
            self._created_at,
            now,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        preview = str(self._content)
        preview = preview[:50] + "..." if len(preview) > 50 else preview
        return f"<Record(id={self._id}, content='{preview}', tags={len(self._tag_ids)})>"


class RecordFactory:
    """Build a Record from raw content, creating a new Tag for every parsed value."""

    def __init__(self, tag_parser: TagParser | None = None, tag_factory: TagFactory | None = None):
        self.tag_parser = tag_parser or TagParser()
        self.tag_factory = tag_factory or TagFactory()

    def create_from_content(self, content: str) -> Record:
        """
        Args:
            content: Raw record content

        Returns:
            New record with freshly created tag IDs

        Raises:
            ValueError: If content is None/empty or a tag cannot be created
        """
        if content is None:
            raise ValueError("Cannot create record: Content cannot be None")
        if not content.strip():
            raise ValueError("Cannot create record: Content cannot be empty")

        record_content = RecordContent(content)
        tag_ids = {
            self.tag_factory.create_from_string(value).id
            for value in self.tag_parser.parse(content)
        }
        return Record.create(record_content, tag_ids)
