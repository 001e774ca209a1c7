"""
Pydantic схемы для API.

Ответы use-case уже являются pydantic-моделями (services.dtos), поэтому
здесь только тела запросов, ответы без собственного DTO и формат ошибок.
"""

from pydantic import BaseModel, Field

from ..domain.record import MAX_CONTENT_LENGTH

# ============================================================================
# RECORD SCHEMAS
# ============================================================================


class RecordCreate(BaseModel):
    """
    Схема для создания записи (POST /records).

    Каждое слово контента, прошедшее валидацию, становится тегом.

    Пример запроса:
    {
        "content": "python fastapi backend"
    }
    """

    content: str = Field(..., min_length=1, max_length=MAX_CONTENT_LENGTH, description="Текст записи")


class RecordUpdate(RecordCreate):
    """
    Схема для обновления записи (PUT /records/{id}).

    Контент заменяется целиком, теги пересчитываются.
    """

    pass


class RecordDeleted(BaseModel):
    """
    Ответ на удаление записи.

    Пример ответа:
    {
        "deleted_record_id": "0b6c...",
        "deleted_orphaned_tags": ["4f1a..."]
    }
    """

    deleted_record_id: str
    deleted_orphaned_tags: list[str]


# ============================================================================
# COMMON SCHEMAS
# ============================================================================


class ErrorDetail(BaseModel):
    """
    Детали ошибки для конкретного поля.

    Пример:
    {
        "field": "records.0.content",
        "message": "String should have at least 1 character"
    }
    """

    field: str = Field(..., description="Название поля с ошибкой")
    message: str = Field(..., description="Описание ошибки")


class ErrorBody(BaseModel):
    """
    Тело ошибки с кодом и деталями.

    Примеры кодов:
    - VALIDATION_ERROR: ошибка валидации
    - RECORD_NOT_FOUND: запись не найдена
    - DUPLICATE_RECORD: запись с таким набором тегов уже есть
    - STORAGE_ERROR: ошибка базы данных
    """

    code: str = Field(..., description="Код ошибки (VALIDATION_ERROR, RECORD_NOT_FOUND, etc.)")
    message: str = Field(..., description="Человекочитаемое сообщение")
    details: list[ErrorDetail] | None = Field(
        default=None, description="Список ошибок по полям (для валидации)"
    )


class ErrorResponse(BaseModel):
    """
    Единый формат ответа для всех ошибок API.

    Пример:
    {
        "error": {
            "code": "DUPLICATE_RECORD",
            "message": "A record with the same tag set already exists",
            "details": null
        }
    }
    """

    error: ErrorBody


class HealthResponse(BaseModel):
    status: str
    app: str
