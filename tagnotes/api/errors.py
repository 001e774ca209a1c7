"""
Обработчики ошибок (Exception Handlers) для API.

Use-case возвращают Err(DomainError); роутер превращает его в APIError
через domain_error_to_api_error, а handler рендерит единый формат
{"error": {"code", "message", "details"}}.
"""

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..core.logging import get_logger
from ..domain import DomainError, ErrorCode
from .schemas import ErrorBody, ErrorDetail, ErrorResponse

logger = get_logger(__name__)


# =============================================================================
# CUSTOM EXCEPTIONS
# =============================================================================


class APIError(Exception):
    """
    Базовый класс для всех API ошибок.

    Использование:
        raise APIError(
            code="RECORD_NOT_FOUND",
            message="Record not found",
            status_code=404
        )
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 400,
        details: list[dict] | None = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class NotFoundError(APIError):
    """Ресурс не найден (404)."""

    def __init__(self, message: str, code: str = ErrorCode.RECORD_NOT_FOUND.value):
        super().__init__(code=code, message=message, status_code=status.HTTP_404_NOT_FOUND)


class AlreadyExistsError(APIError):
    """Конфликт с существующими данными (409)."""

    def __init__(self, message: str, code: str = ErrorCode.DUPLICATE_RECORD.value):
        super().__init__(code=code, message=message, status_code=status.HTTP_409_CONFLICT)


class ValidationError_(APIError):
    """Ошибка валидации бизнес-логики (400)."""

    def __init__(self, message: str, details: list[dict] | None = None, code: str = ErrorCode.VALIDATION_ERROR.value):
        super().__init__(
            code=code,
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
        )


# =============================================================================
# DOMAIN ERROR → HTTP
# =============================================================================

_BAD_REQUEST_CODES = {
    ErrorCode.VALIDATION_ERROR.value,
    ErrorCode.TAG_CREATION_ERROR.value,
    ErrorCode.INVALID_EXPORT_FORMAT.value,
    ErrorCode.IMPORT_VALIDATION_FAILED.value,
}
_NOT_FOUND_CODES = {ErrorCode.RECORD_NOT_FOUND.value, ErrorCode.TAG_NOT_FOUND.value}
_CONFLICT_CODES = {
    ErrorCode.DUPLICATE_RECORD.value,
    ErrorCode.RECORD_ALREADY_EXISTS.value,
    ErrorCode.TAG_ALREADY_EXISTS.value,
}


def _details(error: DomainError) -> list[dict] | None:
    """Field errors from context["errors"] ("field: message" strings)."""
    errors = (error.context or {}).get("errors")
    if not errors:
        return None
    details = []
    for item in errors:
        field, sep, message = str(item).partition(": ")
        details.append({"field": field, "message": message} if sep else {"field": "data", "message": field})
    return details


def domain_error_to_api_error(error: DomainError) -> APIError:
    """
    Преобразовать DomainError в APIError с подходящим HTTP статусом.

    VALIDATION_ERROR и ошибки входных данных → 400,
    *_NOT_FOUND → 404, дубликаты → 409, всё остальное → 500.
    """
    if error.code in _BAD_REQUEST_CODES:
        return ValidationError_(error.message, details=_details(error), code=error.code)
    if error.code in _NOT_FOUND_CODES:
        return NotFoundError(error.message, code=error.code)
    if error.code in _CONFLICT_CODES:
        return AlreadyExistsError(error.message, code=error.code)
    return APIError(
        code=error.code,
        message=error.message,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def unwrap_or_raise(result):
    """Return the Ok value or raise the APIError matching the DomainError."""
    if result.is_err():
        raise domain_error_to_api_error(result.error)
    return result.value


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Преобразует APIError в единый формат ErrorResponse."""
    if exc.status_code >= 500:
        logger.error("API Error", extra={"code": exc.code, "error": exc.message})
    else:
        logger.warning("API Error", extra={"code": exc.code, "error": exc.message})

    details = None
    if exc.details:
        details = [ErrorDetail(field=d["field"], message=d["message"]) for d in exc.details]

    error_response = ErrorResponse(error=ErrorBody(code=exc.code, message=exc.message, details=details))
    return JSONResponse(status_code=exc.status_code, content=error_response.model_dump())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Обработчик для ошибок валидации Pydantic (422).

    Ошибки pydantic {"loc": ["body", "content"], "msg": "..."} переводятся
    в details [{"field": "content", "message": "..."}].
    """
    logger.warning("Validation Error", extra={"errors": len(exc.errors())})

    details = []
    for error in exc.errors():
        field_path = error.get("loc", [])
        field_name = field_path[-1] if field_path else "unknown"

        # Если поле в body, убираем "body" из пути
        if len(field_path) > 1 and field_path[0] == "body":
            field_name = ".".join(str(p) for p in field_path[1:])

        details.append(ErrorDetail(field=str(field_name), message=error.get("msg", "Validation error")))

    error_response = ErrorResponse(
        error=ErrorBody(
            code=ErrorCode.VALIDATION_ERROR.value,
            message="Request validation failed",
            details=details,
        )
    )
    return JSONResponse(status_code=422, content=error_response.model_dump())


def register_error_handlers(app):
    """
    Регистрирует все error handlers в приложении FastAPI.

    Вызывается из main.py:
        register_error_handlers(app)
    """
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    logger.info("Error handlers registered")
