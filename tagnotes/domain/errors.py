"""Domain error type and error codes."""

import enum
from typing import Any


class ErrorCode(str, enum.Enum):
    """Error codes surfaced to callers of the use-cases."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    RECORD_NOT_FOUND = "RECORD_NOT_FOUND"
    DUPLICATE_RECORD = "DUPLICATE_RECORD"
    TAG_CREATION_ERROR = "TAG_CREATION_ERROR"
    TRANSACTION_ERROR = "TRANSACTION_ERROR"
    USE_CASE_ERROR = "USE_CASE_ERROR"

    # Storage layer
    STORAGE_ERROR = "STORAGE_ERROR"
    RECORD_ALREADY_EXISTS = "RECORD_ALREADY_EXISTS"
    TAG_ALREADY_EXISTS = "TAG_ALREADY_EXISTS"
    TAG_NOT_FOUND = "TAG_NOT_FOUND"

    # Import / export
    INVALID_EXPORT_FORMAT = "INVALID_EXPORT_FORMAT"
    EXPORT_FAILED = "EXPORT_FAILED"
    IMPORT_VALIDATION_FAILED = "IMPORT_VALIDATION_FAILED"
    IMPORT_OPERATION_FAILED = "IMPORT_OPERATION_FAILED"


class DomainError(Exception):
    """
    Ошибка предметной области.

    Используется как значение Err(...), а не бросается наружу:
    вызывающий код ветвится по `code`, а не по типу исключения.

    Пример:
        DomainError(ErrorCode.RECORD_NOT_FOUND, "Record not found", {"id": record_id})
    """

    def __init__(self, code: str, message: str, context: dict[str, Any] | None = None):
        self.code = code.value if isinstance(code, ErrorCode) else code
        self.message = message
        self.context = context
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "context": self.context}

    def __repr__(self) -> str:
        return f"<DomainError(code={self.code}, message='{self.message}')>"
