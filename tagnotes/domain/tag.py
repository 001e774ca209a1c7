"""Tag entity and factory."""

import re
from dataclasses import dataclass

from .ids import TagId, generate_id
from .normalizer import TagNormalizer
from .validator import TagValidator

_WHITESPACE = re.compile(r"\s")


@dataclass(frozen=True, eq=False)
class Tag:
    """
    Тег — нормализованное значение с уникальным ID.

    Сравнение по ID, а не по значению: два тега с одинаковым
    normalized_value, но разными ID — разные сущности.
    """

    id: TagId
    normalized_value: str

    def __post_init__(self) -> None:
        if self.id is None:
            raise ValueError("Tag ID cannot be None")
        if self.normalized_value is None:
            raise ValueError("Normalized value cannot be None")
        if self.normalized_value == "":
            raise ValueError("Normalized value cannot be empty")
        if _WHITESPACE.search(self.normalized_value):
            raise ValueError("Normalized value cannot contain whitespace")

    @classmethod
    def create(cls, normalized_value: str) -> "Tag":
        """Create a tag with a freshly generated ID."""
        return cls(id=TagId(generate_id()), normalized_value=normalized_value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tag):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, normalized_value='{self.normalized_value}')>"


class TagFactory:
    """
    Фабрика тегов: нормализация → валидация → генерация ID.

    Валидируется уже нормализованное значение, поэтому ошибки,
    появившиеся после нормализации, тоже отлавливаются.

    Пример:
        factory = TagFactory()
        tag = factory.create_from_string("Café")
        print(tag.normalized_value)  # "cafe"
    """

    def __init__(
        self,
        normalizer: TagNormalizer | None = None,
        validator: TagValidator | None = None,
    ):
        self.normalizer = normalizer or TagNormalizer()
        self.validator = validator or TagValidator()

    def create_from_string(self, raw: str) -> Tag:
        """
        Создать тег из строки.

        Args:
            raw: Исходная строка тега

        Returns:
            Новый тег

        Raises:
            ValueError: "Cannot create tag: ..." если строка пустая
                или невалидна после нормализации
        """
        if raw is None:
            raise ValueError("Cannot create tag: Tag cannot be None")
        if raw == "":
            raise ValueError("Cannot create tag: Tag cannot be empty")

        normalized = self.normalizer.normalize(raw)

        validation = self.validator.validate(normalized)
        if not validation.is_valid:
            raise ValueError(f"Cannot create tag: {'; '.join(validation.errors)}")

        return Tag.create(normalized)
