"""Record repository with specific queries."""

from collections import defaultdict
from collections.abc import Iterable, Sequence

from sqlalchemy import Select, delete, func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain import (
    DomainError,
    Err,
    ErrorCode,
    Ok,
    Record,
    RecordContent,
    RecordId,
    RecordMatcher,
    Result,
    SearchQuery,
    Tag,
    TagId,
)
from ..models import RecordModel, TagModel, as_utc, record_tags
from .base import BaseRepository, storage_operation
from .ports import RecordSearchOptions, RecordSearchResult


def paginate(records: list[Record], options: RecordSearchOptions) -> RecordSearchResult:
    """Slice an already sorted list of records."""
    total = len(records)
    end = total if options.limit is None else options.offset + options.limit
    return RecordSearchResult(
        records=records[options.offset : end],
        total=total,
        has_more=end < total,
    )


def sort_records(records: list[Record], options: RecordSearchOptions) -> list[Record]:
    return sorted(
        records,
        key=lambda r: (getattr(r, options.sort_by), r.id),
        reverse=options.sort_order == "desc",
    )


class SqlRecordRepository(BaseRepository[RecordModel]):
    """
    Репозиторий для работы с записями.

    Связи запись-тег хранятся в таблице record_tags. Строки этой таблицы
    пишутся и удаляются явно (SQLite без PRAGMA foreign_keys не выполняет
    ON DELETE CASCADE).
    """

    def __init__(self, db: AsyncSession, matcher: RecordMatcher | None = None):
        super().__init__(RecordModel, db)
        self.matcher = matcher or RecordMatcher()

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------

    async def _tag_ids_for(self, record_ids: Sequence[str]) -> dict[str, set[TagId]]:
        """
        SQL эквивалент:
            SELECT record_id, tag_id FROM record_tags WHERE record_id IN ({ids});
        """
        tag_ids: dict[str, set[TagId]] = defaultdict(set)
        if not record_ids:
            return tag_ids
        result = await self.db.execute(
            select(record_tags.c.record_id, record_tags.c.tag_id).where(
                record_tags.c.record_id.in_(record_ids)
            )
        )
        for record_id, tag_id in result.all():
            tag_ids[record_id].add(TagId(tag_id))
        return tag_ids

    async def _to_domain(self, models: Sequence[RecordModel]) -> list[Record]:
        tag_ids = await self._tag_ids_for([m.id for m in models])
        return [
            Record(
                id=RecordId(m.id),
                content=RecordContent(m.content),
                tag_ids=tag_ids.get(m.id, set()),
                created_at=as_utc(m.created_at),
                updated_at=as_utc(m.updated_at),
            )
            for m in models
        ]

    async def _fetch(self, query: Select) -> list[Record]:
        result = await self.db.execute(query)
        return await self._to_domain(result.scalars().all())

    def _ordered(self, query: Select, options: RecordSearchOptions) -> Select:
        column = getattr(RecordModel, options.sort_by)
        if options.sort_order == "desc":
            return query.order_by(column.desc(), RecordModel.id.desc())
        return query.order_by(column.asc(), RecordModel.id.asc())

    async def _page(self, query: Select, options: RecordSearchOptions) -> RecordSearchResult:
        """Run a record query with SQL-side sorting and pagination."""
        total = (await self.db.execute(select(func.count()).select_from(query.subquery()))).scalar_one()

        paged = self._ordered(query, options)
        if options.offset:
            paged = paged.offset(options.offset)
        if options.limit is not None:
            paged = paged.limit(options.limit)

        records = await self._fetch(paged)
        end = total if options.limit is None else options.offset + options.limit
        return RecordSearchResult(records=records, total=total, has_more=end < total)

    async def _write_tags(self, record_id: str, tag_ids: Iterable[TagId]) -> None:
        rows = [{"record_id": record_id, "tag_id": tag_id} for tag_id in tag_ids]
        if rows:
            await self.db.execute(insert(record_tags), rows)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @storage_operation("find record by id")
    async def find_by_id(self, id: RecordId) -> Result[Record | None, DomainError]:
        model = await self._get(id)
        if model is None:
            return Ok(None)
        return Ok((await self._to_domain([model]))[0])

    @storage_operation("find all records")
    async def find_all(
        self, options: RecordSearchOptions | None = None
    ) -> Result[RecordSearchResult, DomainError]:
        """
        Все записи с сортировкой и пагинацией.

        SQL эквивалент:
            SELECT * FROM records ORDER BY created_at DESC OFFSET {offset} LIMIT {limit};
        """
        return Ok(await self._page(select(RecordModel), options or RecordSearchOptions()))

    @storage_operation("search records")
    async def search(
        self, query: SearchQuery, options: RecordSearchOptions | None = None
    ) -> Result[RecordSearchResult, DomainError]:
        """
        Поиск записей по подстроке тегов.

        Каждый терм запроса должен входить хотя бы в один тег записи (AND по
        термам, OR по тегам). В SQL отбираются записи, у которых есть тег,
        содержащий любой из термов; точную семантику применяет RecordMatcher.

        Пример:
            # запись с тегами "javascript", "react"
            await repo.search(SearchQuery("java rea"))  # найдёт
            await repo.search(SearchQuery("java vue"))  # не найдёт
        """
        options = options or RecordSearchOptions()
        terms = query.normalized_tokens()
        if not terms:
            return await self.find_all(options)

        term_filter = TagModel.normalized_value.contains(terms[0], autoescape=True)
        for term in terms[1:]:
            term_filter = term_filter | TagModel.normalized_value.contains(term, autoescape=True)

        candidate_ids = (
            select(record_tags.c.record_id)
            .join(TagModel, TagModel.id == record_tags.c.tag_id)
            .where(term_filter)
        )
        candidates = await self._fetch(select(RecordModel).where(RecordModel.id.in_(candidate_ids)))

        tag_ids = {tag_id for record in candidates for tag_id in record.tag_ids}
        tag_lookup: dict[TagId, Tag] = {}
        if tag_ids:
            result = await self.db.execute(select(TagModel).where(TagModel.id.in_(tag_ids)))
            tag_lookup = {
                TagId(m.id): Tag(id=TagId(m.id), normalized_value=m.normalized_value)
                for m in result.scalars().all()
            }

        matched = self.matcher.filter(candidates, query, tag_lookup)
        return Ok(paginate(sort_records(matched, options), options))

    @storage_operation("find records by tag ids")
    async def find_by_tag_ids(
        self, tag_ids: Iterable[TagId], options: RecordSearchOptions | None = None
    ) -> Result[RecordSearchResult, DomainError]:
        """
        Записи, содержащие ЛЮБОЙ из тегов.

        SQL эквивалент:
            SELECT * FROM records WHERE id IN
                (SELECT record_id FROM record_tags WHERE tag_id IN ({tag_ids}));
        """
        options = options or RecordSearchOptions()
        tag_ids = list(tag_ids)
        if not tag_ids:
            return Ok(RecordSearchResult())
        linked = select(record_tags.c.record_id).where(record_tags.c.tag_id.in_(tag_ids))
        return Ok(await self._page(select(RecordModel).where(RecordModel.id.in_(linked)), options))

    @storage_operation("find records by tag set")
    async def find_by_tag_set(
        self, tag_ids: Iterable[TagId], exclude_id: RecordId | None = None
    ) -> Result[list[Record], DomainError]:
        """
        Записи с ТОЧНО таким же набором тегов (проверка дубликатов).

        Пустой набор совпадает с записями без тегов.

        SQL эквивалент:
            SELECT record_id FROM record_tags
            WHERE tag_id IN ({tag_ids})
            GROUP BY record_id
            HAVING COUNT(tag_id) = {len(tag_ids)};
        """
        wanted = set(tag_ids)

        if wanted:
            having_all = (
                select(record_tags.c.record_id)
                .where(record_tags.c.tag_id.in_(wanted))
                .group_by(record_tags.c.record_id)
                .having(func.count(record_tags.c.tag_id) == len(wanted))
            )
            query = select(RecordModel).where(RecordModel.id.in_(having_all))
        else:
            linked = select(record_tags.c.record_id).where(record_tags.c.record_id == RecordModel.id)
            query = select(RecordModel).where(~linked.exists())

        if exclude_id is not None:
            query = query.where(RecordModel.id != exclude_id)

        candidates = await self._fetch(query)
        # the prefilter also admits supersets
        return Ok([record for record in candidates if record.tag_ids == wanted])

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @storage_operation("save record")
    async def save(self, record: Record) -> Result[Record, DomainError]:
        """
        Сохранить новую запись вместе со связями record_tags.

        Теги должны быть сохранены раньше (внешний ключ tag_id).
        """
        if await self._exists(record.id):
            return Err(
                DomainError(
                    ErrorCode.RECORD_ALREADY_EXISTS,
                    "Record with this ID already exists",
                    {"record_id": record.id},
                )
            )
        await self._add(
            RecordModel(
                id=record.id,
                content=record.content.value,
                created_at=record.created_at,
                updated_at=record.updated_at,
            )
        )
        await self._write_tags(record.id, record.tag_ids)
        return Ok(record)

    @storage_operation("update record")
    async def update(self, record: Record) -> Result[Record, DomainError]:
        """
        Обновить контент, updated_at и набор тегов записи.

        SQL эквивалент:
            UPDATE records SET content=..., updated_at=... WHERE id={id};
            DELETE FROM record_tags WHERE record_id={id};
            INSERT INTO record_tags ...;
        """
        model = await self._get(record.id)
        if model is None:
            return Err(DomainError(ErrorCode.RECORD_NOT_FOUND, "Record not found", {"record_id": record.id}))

        model.content = record.content.value
        model.updated_at = record.updated_at
        await self.db.flush()

        await self.db.execute(delete(record_tags).where(record_tags.c.record_id == record.id))
        await self._write_tags(record.id, record.tag_ids)
        return Ok(record)

    @storage_operation("delete record")
    async def delete(self, id: RecordId) -> Result[None, DomainError]:
        model = await self._get(id)
        if model is None:
            return Err(DomainError(ErrorCode.RECORD_NOT_FOUND, "Record not found", {"record_id": id}))

        await self.db.execute(delete(record_tags).where(record_tags.c.record_id == id))
        await self.db.delete(model)
        await self.db.flush()
        return Ok(None)

    @storage_operation("save record batch")
    async def save_batch(self, records: list[Record]) -> Result[list[Record], DomainError]:
        if not records:
            return Ok([])

        self.db.add_all(
            RecordModel(
                id=r.id,
                content=r.content.value,
                created_at=r.created_at,
                updated_at=r.updated_at,
            )
            for r in records
        )
        await self.db.flush()

        rows = [{"record_id": r.id, "tag_id": tag_id} for r in records for tag_id in r.tag_ids]
        if rows:
            await self.db.execute(insert(record_tags), rows)
        return Ok(records)

    @storage_operation("delete all records")
    async def delete_all(self) -> Result[None, DomainError]:
        await self.db.execute(delete(record_tags))
        await self.db.execute(delete(RecordModel))
        await self.db.flush()
        return Ok(None)

    @storage_operation("count records")
    async def count(self) -> Result[int, DomainError]:
        return Ok(await self._count())

    @storage_operation("check record existence")
    async def exists(self, id: RecordId) -> Result[bool, DomainError]:
        return Ok(await self._exists(id))
