"""HTTP middleware: request id propagation and access logging."""

import logging
import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.logging import generate_request_id, get_logger, request_id_var

logger = get_logger("api.requests")

REQUEST_ID_HEADER = "X-Request-ID"

# Не логируются при успешном ответе
QUIET_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})


def _level_for(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware для логирования HTTP запросов.

    Request ID берётся из заголовка X-Request-ID клиента (или генерируется),
    кладётся в contextvar, чтобы попасть во все логи use-case и
    репозиториев этого запроса, и возвращается в ответе.

    Пример лога (JSON):
    {
        "timestamp": "2026-01-22T12:00:00Z",
        "level": "WARNING",
        "logger": "api.requests",
        "message": "Request completed",
        "request_id": "abc-123",
        "extra": {
            "method": "POST",
            "path": "/api/v1/records",
            "status": 409,
            "duration_ms": 12,
            "client_ip": "127.0.0.1"
        }
    }
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or generate_request_id()
        token = request_id_var.set(request_id)

        start_time = time.perf_counter()
        request_info = {
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else "unknown",
        }
        if request.url.query:
            request_info["query"] = request.url.query

        try:
            try:
                response = await call_next(request)
            except Exception as e:
                logger.error(
                    "Request failed",
                    extra={
                        **request_info,
                        "duration_ms": int((time.perf_counter() - start_time) * 1000),
                        "error": str(e),
                    },
                    exc_info=True,
                )
                raise

            response.headers[REQUEST_ID_HEADER] = request_id

            if request.url.path not in QUIET_PATHS or response.status_code >= 400:
                logger.log(
                    _level_for(response.status_code),
                    "Request completed",
                    extra={
                        **request_info,
                        "status": response.status_code,
                        "duration_ms": int((time.perf_counter() - start_time) * 1000),
                    },
                )
            return response
        finally:
            request_id_var.reset(token)
