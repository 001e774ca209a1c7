"""
Тесты для use-case слоя.

Используют in-memory репозитории из tests/fakes.py, поэтому проверяют
только логику use-case: валидацию, проверку дубликатов, границы
транзакции и откат при ошибках.
"""

import uuid
from datetime import UTC, datetime

import pytest

from tagnotes.domain import ErrorCode, Record, RecordContent
from tagnotes.repositories.ports import RecordSearchOptions
from tagnotes.services import (
    CreateRecordRequest,
    CreateRecordUseCase,
    DeleteRecordRequest,
    DeleteRecordUseCase,
    ExportDataRequest,
    ExportDataUseCase,
    GetTagCloudUseCase,
    GetTagSuggestionsRequest,
    GetTagSuggestionsUseCase,
    ImportDataUseCase,
    SearchRecordsRequest,
    SearchRecordsUseCase,
    UpdateRecordRequest,
    UpdateRecordUseCase,
    portable_record_id,
)

from fakes import make_stores

# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def stores():
    return make_stores()


@pytest.fixture
def create_use_case(stores):
    records, tags, uow = stores
    return CreateRecordUseCase(records, tags, uow)


@pytest.fixture
def update_use_case(stores):
    records, tags, uow = stores
    return UpdateRecordUseCase(records, tags, uow)


@pytest.fixture
def delete_use_case(stores):
    records, tags, uow = stores
    return DeleteRecordUseCase(records, tags, uow)


async def create(use_case: CreateRecordUseCase, content: str):
    result = await use_case.execute(CreateRecordRequest(content))
    assert result.is_ok(), result
    return result.value.record


# ============================================================================
# CREATE
# ============================================================================


class TestCreateRecord:
    """Тесты CreateRecordUseCase."""

    @pytest.mark.asyncio
    async def test_create_success(self, stores, create_use_case):
        """Test: запись и новые теги сохраняются в одной транзакции."""
        records, tags, uow = stores

        record = await create(create_use_case, "Python FastAPI python")

        assert record.content == "Python FastAPI python"
        assert len(record.tag_ids) == 2
        assert set(records.records) == {record.id}
        assert {t.normalized_value for t in tags.tags.values()} == {"python", "fastapi"}
        assert uow.begin_calls == 1
        assert uow.commit_calls == 1
        assert uow.rollback_calls == 0

    @pytest.mark.asyncio
    async def test_existing_tags_are_reused(self, stores, create_use_case):
        """Test: существующий тег не создаётся заново."""
        _, tags, _ = stores
        (python,) = tags.add("python")

        record = await create(create_use_case, "python docker")

        assert python.id in record.tag_ids
        assert len(tags.tags) == 2

    @pytest.mark.asyncio
    async def test_duplicate_rejected(self, stores, create_use_case):
        """Test: тот же набор тегов в другом порядке → DUPLICATE_RECORD."""
        records, _, uow = stores
        first = await create(create_use_case, "python fastapi")

        result = await create_use_case.execute(CreateRecordRequest("FastAPI Python"))

        assert result.is_err()
        assert result.error.code == ErrorCode.DUPLICATE_RECORD
        assert result.error.message == "A record with the same tag set already exists"
        assert result.error.context == {"existing_record_id": first.id}
        assert len(records.records) == 1
        # проверка дубликата идёт до транзакции
        assert uow.begin_calls == 1

    @pytest.mark.asyncio
    async def test_content_without_valid_tags(self, stores, create_use_case):
        """Test: запись без тегов допустима, вторая такая же — дубликат."""
        record = await create(create_use_case, "a:b {c}")
        assert record.tag_ids == []

        result = await create_use_case.execute(CreateRecordRequest("x:y"))
        assert result.error.code == ErrorCode.DUPLICATE_RECORD

    @pytest.mark.asyncio
    async def test_stray_combining_mark_in_content(self, stores, create_use_case):
        """Test: отдельный диакритический знак в тексте не ломает создание."""
        _, tags, _ = stores

        record = await create(create_use_case, "hello \u0301")

        assert record.content == "hello \u0301"
        assert [t.normalized_value for t in tags.tags.values()] == ["hello"]
        assert len(record.tag_ids) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "content,message",
        [(None, "Content cannot be None"), ("", "Content cannot be empty"), ("  \n", "Content cannot be empty")],
    )
    async def test_invalid_content(self, create_use_case, content, message):
        """Test: пустой контент → VALIDATION_ERROR."""
        result = await create_use_case.execute(CreateRecordRequest(content))
        assert result.error.code == ErrorCode.VALIDATION_ERROR
        assert result.error.message == message

    @pytest.mark.asyncio
    async def test_content_too_long(self, create_use_case):
        """Test: контент длиннее лимита → VALIDATION_ERROR."""
        result = await create_use_case.execute(CreateRecordRequest("a" * 10_001))
        assert result.error.code == ErrorCode.VALIDATION_ERROR
        assert result.error.message.startswith("Invalid record content:")

    @pytest.mark.asyncio
    async def test_commit_failure_rolls_back(self, stores, create_use_case):
        """Test: ошибка commit → rollback и ошибка commit наружу."""
        records, tags, uow = stores
        uow.fail_commit = True

        result = await create_use_case.execute(CreateRecordRequest("python"))

        assert result.error.code == ErrorCode.TRANSACTION_ERROR
        assert result.error.message.startswith("Failed to commit transaction")
        assert uow.rollback_calls == 1
        assert records.records == {}
        assert tags.tags == {}

    @pytest.mark.asyncio
    async def test_save_failure_rolls_back(self, stores, create_use_case):
        """Test: ошибка сохранения записи → rollback, новые теги тоже откатываются."""
        records, tags, uow = stores
        records.fail_on.add("save")

        result = await create_use_case.execute(CreateRecordRequest("python"))

        assert result.error.code == ErrorCode.STORAGE_ERROR
        assert uow.rollback_calls == 1
        assert tags.tags == {}

    @pytest.mark.asyncio
    async def test_begin_failure(self, stores, create_use_case):
        """Test: ошибка begin возвращается как есть."""
        _, _, uow = stores
        uow.fail_begin = True

        result = await create_use_case.execute(CreateRecordRequest("python"))

        assert result.error.code == ErrorCode.TRANSACTION_ERROR
        assert uow.commit_calls == 0

    @pytest.mark.asyncio
    async def test_lookup_failure(self, stores, create_use_case):
        """Test: ошибка чтения тегов до транзакции."""
        _, tags, uow = stores
        tags.fail_on.add("find_by_normalized_value")

        result = await create_use_case.execute(CreateRecordRequest("python"))

        assert result.error.code == ErrorCode.STORAGE_ERROR
        assert uow.begin_calls == 0

    def test_missing_dependency(self, stores):
        """Test: None вместо репозитория → ValueError."""
        _, tags, uow = stores
        with pytest.raises(ValueError, match="RecordRepository cannot be None"):
            CreateRecordUseCase(None, tags, uow)


# ============================================================================
# UPDATE
# ============================================================================


class TestUpdateRecord:
    """Тесты UpdateRecordUseCase."""

    @pytest.mark.asyncio
    async def test_update_success(self, stores, create_use_case, update_use_case):
        """Test: контент и теги меняются, created_at сохраняется."""
        _, tags, _ = stores
        original = await create(create_use_case, "python fastapi")

        result = await update_use_case.execute(UpdateRecordRequest(original.id, "python django"))

        assert result.is_ok()
        updated = result.value.record
        assert updated.id == original.id
        assert updated.content == "python django"
        assert updated.created_at == original.created_at
        assert updated.updated_at >= original.updated_at
        # fastapi больше никем не используется
        assert {t.normalized_value for t in tags.tags.values()} == {"python", "django"}

    @pytest.mark.asyncio
    async def test_same_tags_different_content(self, create_use_case, update_use_case):
        """Test: тот же набор тегов самой записи — не дубликат."""
        original = await create(create_use_case, "python fastapi")

        result = await update_use_case.execute(
            UpdateRecordRequest(original.id, "FastAPI  Python")
        )

        assert result.is_ok()
        assert result.value.record.content == "FastAPI  Python"

    @pytest.mark.asyncio
    async def test_duplicate_of_another_record(self, create_use_case, update_use_case):
        """Test: набор тегов другой записи → DUPLICATE_RECORD."""
        first = await create(create_use_case, "python fastapi")
        second = await create(create_use_case, "python django")

        result = await update_use_case.execute(UpdateRecordRequest(second.id, "fastapi python"))

        assert result.error.code == ErrorCode.DUPLICATE_RECORD
        assert result.error.context == {"existing_record_id": first.id}

    @pytest.mark.asyncio
    async def test_not_found(self, update_use_case):
        """Test: несуществующий id → RECORD_NOT_FOUND."""
        result = await update_use_case.execute(UpdateRecordRequest(str(uuid.uuid4()), "python"))
        assert result.error.code == ErrorCode.RECORD_NOT_FOUND

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "record_id,message",
        [
            (None, "Record ID cannot be None"),
            ("", "Record ID cannot be empty"),
            ("not-a-uuid", "Invalid record ID: not-a-uuid"),
        ],
    )
    async def test_invalid_id(self, update_use_case, record_id, message):
        """Test: проверка id до обращения к хранилищу."""
        result = await update_use_case.execute(UpdateRecordRequest(record_id, "python"))
        assert result.error.code == ErrorCode.VALIDATION_ERROR
        assert result.error.message == message

    @pytest.mark.asyncio
    async def test_update_failure_rolls_back(self, stores, create_use_case, update_use_case):
        """Test: ошибка update в транзакции → rollback, запись не меняется."""
        records, _, uow = stores
        original = await create(create_use_case, "python")
        records.fail_on.add("update")

        result = await update_use_case.execute(UpdateRecordRequest(original.id, "django"))

        assert result.error.code == ErrorCode.STORAGE_ERROR
        assert uow.rollback_calls == 1
        assert records.records[original.id].content.value == "python"


# ============================================================================
# DELETE
# ============================================================================


class TestDeleteRecord:
    """Тесты DeleteRecordUseCase."""

    @pytest.mark.asyncio
    async def test_delete_removes_orphans(self, stores, create_use_case, delete_use_case):
        """Test: удаление последней записи удаляет её теги в той же транзакции."""
        records, tags, uow = stores
        record = await create(create_use_case, "t1 t2")

        result = await delete_use_case.execute(DeleteRecordRequest(record.id))

        assert result.is_ok()
        assert result.value.deleted_record_id == record.id
        assert sorted(result.value.deleted_orphaned_tags) == sorted(record.tag_ids)
        assert records.records == {}
        assert tags.tags == {}
        assert uow.commit_calls == 2

    @pytest.mark.asyncio
    async def test_shared_tags_kept(self, stores, create_use_case, delete_use_case):
        """Test: теги, которые использует другая запись, остаются."""
        _, tags, _ = stores
        record = await create(create_use_case, "python fastapi")
        await create(create_use_case, "python django")

        result = await delete_use_case.execute(DeleteRecordRequest(record.id))

        orphaned = result.value.deleted_orphaned_tags
        assert len(orphaned) == 1
        assert {t.normalized_value for t in tags.tags.values()} == {"python", "django"}

    @pytest.mark.asyncio
    async def test_not_found(self, delete_use_case):
        result = await delete_use_case.execute(DeleteRecordRequest(str(uuid.uuid4())))
        assert result.error.code == ErrorCode.RECORD_NOT_FOUND

    @pytest.mark.asyncio
    async def test_orphan_cleanup_failure_restores_record(
        self, stores, create_use_case, delete_use_case
    ):
        """Test: ошибка удаления тегов → запись восстанавливается откатом."""
        records, tags, uow = stores
        record = await create(create_use_case, "python")
        tags.fail_on.add("delete_batch")

        result = await delete_use_case.execute(DeleteRecordRequest(record.id))

        assert result.error.code == ErrorCode.STORAGE_ERROR
        assert uow.rollback_calls == 1
        assert record.id in records.records


# ============================================================================
# SEARCH
# ============================================================================


class TestSearchRecords:
    """Тесты SearchRecordsUseCase."""

    @pytest.mark.asyncio
    async def test_empty_query_returns_all(self, stores, create_use_case):
        """Test: пустой запрос → все записи, limit по умолчанию 10."""
        for i in range(12):
            await create(create_use_case, f"tag{i}")
        use_case = SearchRecordsUseCase(stores[0])

        result = await use_case.execute(SearchRecordsRequest("  "))

        found = result.value.search_result
        assert found.total == 12
        assert len(found.records) == 10
        assert found.has_more is True
        assert found.search_query is None
        assert found.pagination.total_pages == 2

    @pytest.mark.asyncio
    async def test_query_terms_are_anded(self, stores, create_use_case):
        """Test: "py fast" находит только запись с обоими тегами."""
        for content in ("python fastapi", "python django", "rust tokio"):
            await create(create_use_case, content)
        use_case = SearchRecordsUseCase(stores[0])

        result = await use_case.execute(SearchRecordsRequest("PY fast"))

        found = result.value.search_result
        assert [r.content for r in found.records] == ["python fastapi"]
        assert found.search_query == "PY fast"

    @pytest.mark.asyncio
    async def test_sorting(self, stores):
        """Test: сортировка по created_at asc."""
        records, _, _ = stores
        old = records.add(
            Record("a", RecordContent("old"), set(), datetime(2020, 1, 1, tzinfo=UTC), datetime(2020, 1, 1, tzinfo=UTC))
        )
        new = records.add(
            Record("b", RecordContent("new"), set(), datetime(2024, 1, 1, tzinfo=UTC), datetime(2024, 1, 1, tzinfo=UTC))
        )
        use_case = SearchRecordsUseCase(records)

        desc = await use_case.execute(SearchRecordsRequest(""))
        asc = await use_case.execute(
            SearchRecordsRequest("", RecordSearchOptions(sort_order="asc"))
        )

        assert [r.id for r in desc.value.search_result.records] == [new.id, old.id]
        assert [r.id for r in asc.value.search_result.records] == [old.id, new.id]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "options,message",
        [
            (RecordSearchOptions(limit=0), "Limit must be a positive number"),
            (RecordSearchOptions(offset=-1), "Offset cannot be negative"),
        ],
    )
    async def test_invalid_options(self, stores, options, message):
        use_case = SearchRecordsUseCase(stores[0])
        result = await use_case.execute(SearchRecordsRequest("", options))
        assert result.error.code == ErrorCode.VALIDATION_ERROR
        assert result.error.message == message


# ============================================================================
# TAGS
# ============================================================================


class TestTagSuggestions:
    """Тесты GetTagSuggestionsUseCase и GetTagCloudUseCase."""

    @pytest.mark.asyncio
    async def test_suggestions_ordered_by_score(self, stores):
        """Test: точное совпадение первым, затем по доле совпадения и алфавиту."""
        _, tags, _ = stores
        tags.add("javascript", "java", "javafx", "python")
        use_case = GetTagSuggestionsUseCase(tags)

        result = await use_case.execute(GetTagSuggestionsRequest("JAVA"))

        suggestions = result.value.suggestions
        assert [s.normalized_value for s in suggestions] == ["java", "javafx", "javascript"]
        assert suggestions[0].match_score == 1.0
        assert suggestions[1].match_score == pytest.approx(4 / 6)

    @pytest.mark.asyncio
    async def test_default_limit(self, stores):
        """Test: по умолчанию не больше 5 подсказок."""
        _, tags, _ = stores
        tags.add(*(f"tag{i}" for i in range(8)))

        result = await GetTagSuggestionsUseCase(tags).execute(GetTagSuggestionsRequest("tag"))

        assert len(result.value.suggestions) == 5

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "request_,message",
        [
            (GetTagSuggestionsRequest("   "), "Prefix cannot be empty or whitespace only"),
            (GetTagSuggestionsRequest("py", limit=0), "Limit must be a positive number"),
        ],
    )
    async def test_invalid_request(self, stores, request_, message):
        result = await GetTagSuggestionsUseCase(stores[1]).execute(request_)
        assert result.error.code == ErrorCode.VALIDATION_ERROR
        assert result.error.message == message

    @pytest.mark.asyncio
    async def test_tag_cloud(self, stores, create_use_case):
        """Test: облако тегов отсортировано по числу использований."""
        await create(create_use_case, "python fastapi")
        await create(create_use_case, "python django")

        result = await GetTagCloudUseCase(stores[1]).execute()

        cloud = result.value
        assert cloud[0].normalized_value == "python"
        assert cloud[0].usage_count == 2
        assert {item.usage_count for item in cloud[1:]} == {1}


# ============================================================================
# EXPORT / IMPORT
# ============================================================================


class TestExportImport:
    """Тесты ExportDataUseCase и ImportDataUseCase."""

    @pytest.mark.asyncio
    async def test_export_replaces_ids_with_values(self, stores, create_use_case):
        """Test: в экспорте значения тегов и переносимый id записи."""
        records, tags, _ = stores
        await create(create_use_case, "Python FastAPI")

        result = await ExportDataUseCase(records, tags).execute(ExportDataRequest())

        export = result.value.export_data
        assert export.metadata.total_records == 1
        assert export.metadata.export_source == "full-database"
        assert export.records[0].tag_ids == ["fastapi", "python"]
        assert export.records[0].id == portable_record_id("Python FastAPI")

    @pytest.mark.asyncio
    async def test_export_skips_unknown_tag_ids(self, stores):
        """Test: id тега без значения не попадает в экспорт."""
        records, tags, _ = stores
        (python,) = tags.add("python")
        created = datetime(2024, 1, 1, tzinfo=UTC)
        records.add(
            Record("a", RecordContent("python ghost"), {python.id, "missing-tag-id"}, created, created)
        )

        result = await ExportDataUseCase(records, tags).execute(ExportDataRequest())

        assert result.value.export_data.records[0].tag_ids == ["python"]

    @pytest.mark.asyncio
    async def test_export_empty(self, stores):
        records, tags, _ = stores
        result = await ExportDataUseCase(records, tags).execute(ExportDataRequest())
        assert result.value.export_data.records == []
        assert result.value.export_data.metadata.export_source == "empty-export"

    @pytest.mark.asyncio
    async def test_export_unsupported_format(self, stores):
        records, tags, _ = stores
        result = await ExportDataUseCase(records, tags).execute(ExportDataRequest(format="pdf"))
        assert result.error.code == ErrorCode.INVALID_EXPORT_FORMAT
        assert result.error.message == "Unsupported export format: pdf"

    def test_portable_id_is_stable(self):
        """Test: id зависит только от контента."""
        assert portable_record_id("hello") == portable_record_id("hello")
        assert portable_record_id("hello") != portable_record_id("hello!")
        assert portable_record_id("hello") == "record_1n1e4y"

    @pytest.mark.asyncio
    async def test_round_trip(self, stores, create_use_case):
        """Test: экспорт → импорт сохраняет контент, теги и timestamps."""
        records, tags, uow = stores
        first = await create(create_use_case, "python fastapi")
        await create(create_use_case, "Café ÜBER")
        exported = await ExportDataUseCase(records, tags).execute(ExportDataRequest())
        payload = exported.value.export_data.model_dump(mode="json")

        result = await ImportDataUseCase(uow).execute(payload)

        assert result.is_ok()
        imported = result.value
        assert imported.success is True
        assert imported.success_count == 2
        assert [w.code for w in imported.warnings] == ["BACKUP_RECOMMENDED"]

        by_content = {r.content.value: r for r in records.records.values()}
        assert set(by_content) == {"python fastapi", "Café ÜBER"}
        assert by_content["python fastapi"].id != first.id
        assert by_content["python fastapi"].created_at == first.created_at
        values = {t.id: t.normalized_value for t in tags.tags.values()}
        assert {values[i] for i in by_content["Café ÜBER"].tag_ids} == {"cafe", "uber"}
        assert len(tags.tags) == 4

    @pytest.mark.asyncio
    async def test_import_empty(self, stores):
        """Test: пустой импорт очищает хранилище и даёт предупреждение."""
        _, _, uow = stores
        payload = {
            "records": [],
            "exported_at": "2026-01-18T12:00:00Z",
            "metadata": {"total_records": 0},
        }

        result = await ImportDataUseCase(uow).execute(payload)

        assert [w.code for w in result.value.warnings] == ["EMPTY_IMPORT"]
        assert result.value.total_processed == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload,fragment",
        [
            ({}, "records: Field required"),
            (
                {"records": [], "exported_at": "2026-01-18T12:00:00Z", "metadata": {"total_records": 0}, "version": "2.0"},
                "version: Unsupported version: 2.0",
            ),
            (
                {
                    "records": [
                        {
                            "id": "r",
                            "content": "x",
                            "tag_ids": ["a b"],
                            "created_at": "2026-01-18T12:00:00Z",
                            "updated_at": "2026-01-18T12:00:00Z",
                        }
                    ],
                    "exported_at": "2026-01-18T12:00:00Z",
                    "metadata": {"total_records": 1},
                },
                "records.0: Cannot create tag",
            ),
        ],
    )
    async def test_import_validation(self, stores, payload, fragment):
        """Test: невалидный payload → IMPORT_VALIDATION_FAILED, данные не тронуты."""
        records, _, uow = stores
        records.add(Record.create(RecordContent("keep"), set()))

        result = await ImportDataUseCase(uow).execute(payload)

        assert result.error.code == ErrorCode.IMPORT_VALIDATION_FAILED
        assert any(fragment in error for error in result.error.context["errors"])
        assert len(records.records) == 1
        assert uow.begin_calls == 0

    @pytest.mark.asyncio
    async def test_import_failure_keeps_data(self, stores, create_use_case):
        """Test: ошибка внутри транзакции → откат, старые данные на месте."""
        records, tags, uow = stores
        await create(create_use_case, "python")
        payload = {
            "records": [
                {
                    "id": "record_1",
                    "content": "rust",
                    "tag_ids": ["rust"],
                    "created_at": "2026-01-18T12:00:00Z",
                    "updated_at": "2026-01-18T12:00:00Z",
                }
            ],
            "exported_at": "2026-01-18T12:00:00Z",
            "metadata": {"total_records": 1},
        }
        records.fail_on.add("save")

        result = await ImportDataUseCase(uow).execute(payload)

        assert result.error.code == ErrorCode.STORAGE_ERROR
        assert [r.content.value for r in records.records.values()] == ["python"]
        assert {t.normalized_value for t in tags.tags.values()} == {"python"}

