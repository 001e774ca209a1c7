"""
Тесты для API Layer (REST endpoints).

Проверяем:
- HTTP статус-коды
- Форматы запросов/ответов (JSON)
- Обработку ошибок (400, 401, 404, 409, 422)
- Интеграцию всех слоёв (API → Use case → Repository → DB)
"""

import uuid

import pytest
from httpx import ASGITransport, AsyncClient

from tagnotes.main import app

RECORDS = "/api/v1/records"


async def create_record(client: AsyncClient, content: str) -> dict:
    response = await client.post(RECORDS, json={"content": content})
    assert response.status_code == 201, response.json()
    return response.json()


# ============================================================================
# RECORDS API TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_create_record(test_client: AsyncClient):
    """Test: POST /records - создание записи, теги из слов контента."""
    response = await test_client.post(RECORDS, json={"content": "Python FastAPI python"})

    assert response.status_code == 201
    data = response.json()
    assert data["content"] == "Python FastAPI python"
    assert len(data["tag_ids"]) == 2
    assert "id" in data
    assert data["created_at"] == data["updated_at"]


@pytest.mark.asyncio
async def test_create_record_duplicate(test_client: AsyncClient):
    """Test: POST /records - тот же набор тегов → 409 DUPLICATE_RECORD."""
    first = await create_record(test_client, "python fastapi")

    response = await test_client.post(RECORDS, json={"content": "FastAPI PYTHON"})

    assert response.status_code == 409
    error = response.json()["error"]
    assert error["code"] == "DUPLICATE_RECORD"
    assert error["message"] == "A record with the same tag set already exists"

    listing = await test_client.get(RECORDS)
    assert [r["id"] for r in listing.json()["records"]] == [first["id"]]


@pytest.mark.asyncio
async def test_create_record_validation_error(test_client: AsyncClient):
    """Test: POST /records - пустой контент → 422 в едином формате."""
    response = await test_client.post(RECORDS, json={"content": ""})

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["details"][0]["field"] == "content"


@pytest.mark.asyncio
async def test_create_record_whitespace_only(test_client: AsyncClient):
    """Test: POST /records - только пробелы → 400 VALIDATION_ERROR."""
    response = await test_client.post(RECORDS, json={"content": "   "})

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Content cannot be empty"


@pytest.mark.asyncio
async def test_get_record(test_client: AsyncClient):
    """Test: GET /records/{id}."""
    created = await create_record(test_client, "python")

    response = await test_client.get(f"{RECORDS}/{created['id']}")

    assert response.status_code == 200
    assert response.json()["content"] == "python"


@pytest.mark.asyncio
async def test_get_record_not_found(test_client: AsyncClient):
    """Test: GET /records/{id} - 404."""
    response = await test_client.get(f"{RECORDS}/{uuid.uuid4()}")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "RECORD_NOT_FOUND"


@pytest.mark.asyncio
async def test_search_records(test_client: AsyncClient):
    """Test: GET /records?q= - AND по термам, подстрока тега."""
    await create_record(test_client, "javascript react")
    await create_record(test_client, "javascript vue")
    await create_record(test_client, "python django")

    response = await test_client.get(RECORDS, params={"q": "java rea"})

    assert response.status_code == 200
    data = response.json()
    assert [r["content"] for r in data["records"]] == ["javascript react"]
    assert data["total"] == 1
    assert data["search_query"] == "java rea"


@pytest.mark.asyncio
async def test_list_records_pagination(test_client: AsyncClient):
    """Test: GET /records?limit=&offset= - пагинация, новые записи первыми."""
    for i in range(3):
        await create_record(test_client, f"tag{i}")

    response = await test_client.get(RECORDS, params={"limit": 2})

    data = response.json()
    assert data["total"] == 3
    assert data["has_more"] is True
    assert [r["content"] for r in data["records"]] == ["tag2", "tag1"]
    assert data["pagination"] == {"limit": 2, "offset": 0, "current_page": 1, "total_pages": 2}


@pytest.mark.asyncio
async def test_update_record(test_client: AsyncClient):
    """Test: PUT /records/{id} - новые теги, сироты удаляются."""
    created = await create_record(test_client, "python fastapi")

    response = await test_client.put(
        f"{RECORDS}/{created['id']}", json={"content": "python django"}
    )

    assert response.status_code == 200
    assert response.json()["content"] == "python django"
    cloud = (await test_client.get("/api/v1/tags/cloud")).json()
    assert sorted(item["normalized_value"] for item in cloud) == ["django", "python"]


@pytest.mark.asyncio
async def test_update_record_invalid_id(test_client: AsyncClient):
    """Test: PUT /records/{id} - id не UUID → 400."""
    response = await test_client.put(f"{RECORDS}/not-a-uuid", json={"content": "python"})

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Invalid record ID: not-a-uuid"


@pytest.mark.asyncio
async def test_delete_record(test_client: AsyncClient):
    """Test: DELETE /records/{id} - запись и теги-сироты удаляются."""
    created = await create_record(test_client, "t1 t2")

    response = await test_client.delete(f"{RECORDS}/{created['id']}")

    assert response.status_code == 200
    data = response.json()
    assert data["deleted_record_id"] == created["id"]
    assert sorted(data["deleted_orphaned_tags"]) == sorted(created["tag_ids"])
    assert (await test_client.get(f"{RECORDS}/{created['id']}")).status_code == 404
    assert (await test_client.get("/api/v1/tags/cloud")).json() == []


@pytest.mark.asyncio
async def test_delete_record_not_found(test_client: AsyncClient):
    response = await test_client.delete(f"{RECORDS}/{uuid.uuid4()}")
    assert response.status_code == 404


# ============================================================================
# TAGS API TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_tag_suggestions(test_client: AsyncClient):
    """Test: GET /tags/suggestions - префикс нормализуется."""
    await create_record(test_client, "java javascript python")

    response = await test_client.get("/api/v1/tags/suggestions", params={"prefix": "JAVA"})

    assert response.status_code == 200
    suggestions = response.json()
    assert [s["normalized_value"] for s in suggestions] == ["java", "javascript"]
    assert suggestions[0]["match_score"] == 1.0


@pytest.mark.asyncio
async def test_tag_suggestions_whitespace_prefix(test_client: AsyncClient):
    response = await test_client.get("/api/v1/tags/suggestions", params={"prefix": "  "})

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Prefix cannot be empty or whitespace only"


@pytest.mark.asyncio
async def test_tag_cloud(test_client: AsyncClient):
    """Test: GET /tags/cloud - самые используемые теги первыми."""
    await create_record(test_client, "python fastapi")
    await create_record(test_client, "python django")

    response = await test_client.get("/api/v1/tags/cloud")

    cloud = response.json()
    assert cloud[0] == {"id": cloud[0]["id"], "normalized_value": "python", "usage_count": 2}
    assert len(cloud) == 3


# ============================================================================
# EXPORT / IMPORT API TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_export_import_round_trip(test_client: AsyncClient):
    """Test: GET /data/export → POST /data/import восстанавливает данные."""
    original = await create_record(test_client, "Café ÜBER")
    await create_record(test_client, "python fastapi")

    exported = await test_client.get("/api/v1/data/export")
    assert exported.status_code == 200
    snapshot = exported.json()
    assert snapshot["metadata"]["total_records"] == 2
    assert snapshot["version"] == "1.0"

    response = await test_client.post("/api/v1/data/import", json=snapshot)

    assert response.status_code == 200
    result = response.json()
    assert result["success"] is True
    assert result["success_count"] == 2
    assert [w["code"] for w in result["warnings"]] == ["BACKUP_RECOMMENDED"]

    records = (await test_client.get(RECORDS)).json()["records"]
    restored = {r["content"]: r for r in records}
    assert set(restored) == {"Café ÜBER", "python fastapi"}
    assert restored["Café ÜBER"]["created_at"] == original["created_at"]
    assert restored["Café ÜBER"]["id"] != original["id"]

    found = (await test_client.get(RECORDS, params={"q": "cafe"})).json()
    assert found["total"] == 1


@pytest.mark.asyncio
async def test_export_unsupported_format(test_client: AsyncClient):
    response = await test_client.get("/api/v1/data/export", params={"format": "pdf"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_EXPORT_FORMAT"


@pytest.mark.asyncio
async def test_import_invalid_payload(test_client: AsyncClient):
    """Test: POST /data/import - невалидный снимок → 400, данные не меняются."""
    await create_record(test_client, "python")

    response = await test_client.post("/api/v1/data/import", json={"records": "nope"})

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "IMPORT_VALIDATION_FAILED"
    assert {d["field"] for d in error["details"]} >= {"records", "exported_at", "metadata"}
    assert (await test_client.get(RECORDS)).json()["total"] == 1


# ============================================================================
# AUTH / SERVICE ENDPOINTS
# ============================================================================


@pytest.mark.asyncio
async def test_missing_api_key(test_client: AsyncClient):
    """Test: запрос без X-API-Key → 401."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get(RECORDS)

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_invalid_api_key(test_client: AsyncClient):
    response = await test_client.get(RECORDS, headers={"X-API-Key": "wrong"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_root(test_client: AsyncClient):
    response = await test_client.get("/")

    assert response.status_code == 200
    assert response.json()["endpoints"]["records"] == "/api/v1/records"


@pytest.mark.asyncio
async def test_request_id_header(test_client: AsyncClient):
    """Test: X-Request-ID клиента возвращается в ответе."""
    response = await test_client.get("/", headers={"X-Request-ID": "trace-1"})

    assert response.headers["X-Request-ID"] == "trace-1"
