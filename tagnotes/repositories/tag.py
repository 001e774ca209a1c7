"""Tag repository with specific queries."""

from collections.abc import Iterable

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain import DomainError, Err, ErrorCode, Ok, Result, Tag, TagId
from ..models import TagModel, record_tags
from .base import BaseRepository, storage_operation
from .ports import TagSearchOptions, TagSuggestion, TagUsageInfo


def match_score(normalized_value: str, prefix: str) -> float:
    """1.0 for an exact match, otherwise the matched share of the value."""
    if normalized_value == prefix:
        return 1.0
    if normalized_value.startswith(prefix):
        return len(prefix) / len(normalized_value)
    return 0.0


class SqlTagRepository(BaseRepository[TagModel]):
    """
    Репозиторий для работы с тегами.

    normalized_value — естественный ключ тега (UNIQUE в таблице tags),
    поэтому поиск и проверка дубликатов идут по нему.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(TagModel, db)

    @staticmethod
    def _to_domain(model: TagModel) -> Tag:
        return Tag(id=TagId(model.id), normalized_value=model.normalized_value)

    @storage_operation("find tag by id")
    async def find_by_id(self, id: TagId) -> Result[Tag | None, DomainError]:
        model = await self._get(id)
        return Ok(self._to_domain(model) if model else None)

    @storage_operation("find tag by normalized value")
    async def find_by_normalized_value(self, value: str) -> Result[Tag | None, DomainError]:
        """
        Получить тег по нормализованному значению.

        SQL эквивалент:
            SELECT * FROM tags WHERE normalized_value = {value};
        """
        result = await self.db.execute(select(TagModel).where(TagModel.normalized_value == value))
        model = result.scalar_one_or_none()
        return Ok(self._to_domain(model) if model else None)

    @storage_operation("find tags by normalized values")
    async def find_by_normalized_values(self, values: Iterable[str]) -> Result[list[Tag], DomainError]:
        values = list(values)
        if not values:
            return Ok([])
        result = await self.db.execute(select(TagModel).where(TagModel.normalized_value.in_(values)))
        by_value = {m.normalized_value: m for m in result.scalars().all()}
        # input order, unknown values skipped
        return Ok([self._to_domain(by_value[v]) for v in dict.fromkeys(values) if v in by_value])

    @storage_operation("find all tags")
    async def find_all(self, options: TagSearchOptions | None = None) -> Result[list[Tag], DomainError]:
        usage = await self._usage(options or TagSearchOptions())
        return Ok([info.tag for info in usage])

    @storage_operation("find tags by prefix")
    async def find_by_prefix(self, prefix: str, limit: int = 10) -> Result[list[TagSuggestion], DomainError]:
        """
        Подсказки тегов по префиксу.

        Сортировка: match_score по убыванию, затем значение по алфавиту.

        SQL эквивалент:
            SELECT * FROM tags WHERE normalized_value LIKE '{prefix}%';

        Пример:
            # теги "java", "javascript"
            await repo.find_by_prefix("java")
            # [TagSuggestion(java, 1.0), TagSuggestion(javascript, 0.4)]
        """
        if not prefix or limit <= 0:
            return Ok([])

        result = await self.db.execute(
            select(TagModel).where(TagModel.normalized_value.startswith(prefix, autoescape=True))
        )
        suggestions = [
            TagSuggestion(tag=self._to_domain(m), match_score=match_score(m.normalized_value, prefix))
            for m in result.scalars().all()
        ]
        suggestions.sort(key=lambda s: (-s.match_score, s.tag.normalized_value))
        return Ok(suggestions[:limit])

    @storage_operation("get tag usage info")
    async def get_usage_info(
        self, options: TagSearchOptions | None = None
    ) -> Result[list[TagUsageInfo], DomainError]:
        """
        Теги с количеством использований (облако тегов).

        SQL эквивалент:
            SELECT tags.*, COUNT(record_tags.record_id) as usage_count
            FROM tags
            LEFT JOIN record_tags ON tags.id = record_tags.tag_id
            GROUP BY tags.id;
        """
        return Ok(await self._usage(options or TagSearchOptions()))

    async def _usage(self, options: TagSearchOptions) -> list[TagUsageInfo]:
        usage_count = func.count(record_tags.c.record_id).label("usage_count")
        query = (
            select(TagModel, usage_count)
            .outerjoin(record_tags, TagModel.id == record_tags.c.tag_id)
            .group_by(TagModel.id)
        )

        key = usage_count if options.sort_by == "usage" else TagModel.normalized_value
        if options.sort_order == "desc":
            query = query.order_by(key.desc(), TagModel.normalized_value)
        else:
            query = query.order_by(key.asc(), TagModel.normalized_value)

        if options.offset:
            query = query.offset(options.offset)
        if options.limit is not None:
            query = query.limit(options.limit)

        result = await self.db.execute(query)
        return [TagUsageInfo(tag=self._to_domain(tag), usage_count=count) for tag, count in result.all()]

    @storage_operation("find orphaned tags")
    async def find_orphaned(self) -> Result[list[Tag], DomainError]:
        """
        Теги, на которые не ссылается ни одна запись.

        SQL эквивалент:
            SELECT * FROM tags
            WHERE NOT EXISTS (SELECT 1 FROM record_tags WHERE tag_id = tags.id);
        """
        referenced = select(record_tags.c.tag_id).where(record_tags.c.tag_id == TagModel.id).exists()
        result = await self.db.execute(select(TagModel).where(~referenced).order_by(TagModel.normalized_value))
        return Ok([self._to_domain(m) for m in result.scalars().all()])

    @storage_operation("save tag")
    async def save(self, tag: Tag) -> Result[Tag, DomainError]:
        existing = await self.db.execute(
            select(TagModel.id).where(TagModel.normalized_value == tag.normalized_value)
        )
        existing_id = existing.scalar_one_or_none()
        if existing_id is not None and existing_id != tag.id:
            return Err(
                DomainError(
                    ErrorCode.TAG_ALREADY_EXISTS,
                    "Tag with this normalized value already exists",
                    {"normalized_value": tag.normalized_value},
                )
            )
        if existing_id is None:
            await self._add(TagModel(id=tag.id, normalized_value=tag.normalized_value))
        return Ok(tag)

    @storage_operation("delete tag")
    async def delete(self, id: TagId) -> Result[None, DomainError]:
        model = await self._get(id)
        if model is None:
            return Err(DomainError(ErrorCode.TAG_NOT_FOUND, "Tag not found", {"tag_id": id}))
        await self.db.execute(delete(record_tags).where(record_tags.c.tag_id == id))
        await self.db.delete(model)
        await self.db.flush()
        return Ok(None)

    @storage_operation("delete tag batch")
    async def delete_batch(self, ids: Iterable[TagId]) -> Result[None, DomainError]:
        """
        Удалить теги пачкой. Несуществующие id пропускаются.

        SQL эквивалент:
            DELETE FROM tags WHERE id IN ({ids});
        """
        ids = list(ids)
        if not ids:
            return Ok(None)
        await self.db.execute(delete(record_tags).where(record_tags.c.tag_id.in_(ids)))
        await self.db.execute(delete(TagModel).where(TagModel.id.in_(ids)))
        await self.db.flush()
        return Ok(None)

    @storage_operation("save tag batch")
    async def save_batch(self, tags: list[Tag]) -> Result[list[Tag], DomainError]:
        values = [t.normalized_value for t in tags]
        if len(set(values)) != len(values):
            return Err(DomainError(ErrorCode.TAG_ALREADY_EXISTS, "Duplicate normalized values in batch"))

        if values:
            result = await self.db.execute(
                select(TagModel.normalized_value, TagModel.id).where(TagModel.normalized_value.in_(values))
            )
            existing = dict(result.all())
            for tag in tags:
                if existing.get(tag.normalized_value, tag.id) != tag.id:
                    return Err(
                        DomainError(
                            ErrorCode.TAG_ALREADY_EXISTS,
                            f"Tag with normalized value '{tag.normalized_value}' already exists",
                        )
                    )
            self.db.add_all(
                TagModel(id=t.id, normalized_value=t.normalized_value)
                for t in tags
                if t.normalized_value not in existing
            )
            await self.db.flush()
        return Ok(tags)

    @storage_operation("delete all tags")
    async def delete_all(self) -> Result[None, DomainError]:
        await self.db.execute(delete(record_tags))
        await self.db.execute(delete(TagModel))
        await self.db.flush()
        return Ok(None)

    @storage_operation("count tags")
    async def count(self) -> Result[int, DomainError]:
        return Ok(await self._count())

    @storage_operation("check tag existence")
    async def exists(self, id: TagId) -> Result[bool, DomainError]:
        return Ok(await self._exists(id))

    @storage_operation("check tag existence by normalized value")
    async def exists_by_normalized_value(self, value: str) -> Result[bool, DomainError]:
        result = await self.db.execute(
            select(select(TagModel.id).where(TagModel.normalized_value == value).exists())
        )
        return Ok(bool(result.scalar()))

    @storage_operation("get tag usage count")
    async def get_usage_count(self, id: TagId) -> Result[int, DomainError]:
        result = await self.db.execute(
            select(func.count()).select_from(record_tags).where(record_tags.c.tag_id == id)
        )
        return Ok(result.scalar_one())
