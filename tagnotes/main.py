"""
Главный файл FastAPI приложения.

Точка входа в приложение Tagged Notes.

Запуск:
    uvicorn tagnotes.main:app --reload

API документация:
    http://localhost:8000/docs       - Swagger UI
    http://localhost:8000/redoc      - ReDoc

Версионирование:
    API доступно по путям /api/v1/...
"""

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from sqlalchemy.exc import SQLAlchemyError

from .api import data_router, records_router, tags_router
from .api.dependencies import verify_api_key
from .api.errors import register_error_handlers
from .api.middleware import RequestLoggingMiddleware
from .core.config import settings
from .core.database import check_connection
from .core.logging import get_logger, setup_logging

# LOG_LEVEL: DEBUG/INFO/WARNING/ERROR - что логировать
# LOG_FORMAT: json (production) / simple (development)
setup_logging(log_level=settings.LOG_LEVEL, log_format=settings.LOG_FORMAT)

logger = get_logger(__name__)

# ============================================================================
# APPLICATION METADATA
# ============================================================================

APP_VERSION = "1.0.0"
APP_START_TIME: float = 0.0  # Will be set on startup

# ============================================================================
# RATE LIMITER SETUP
# ============================================================================

# key_func определяет по какому ключу группировать запросы (по IP адресу)
limiter = Limiter(key_func=get_remote_address)


def custom_rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Превышение лимита запросов в едином формате ErrorResponse."""
    return JSONResponse(
        status_code=429,
        content={
            "error": {
                "code": "RATE_LIMIT_EXCEEDED",
                "message": f"Too many requests. Limit: {exc.detail}",
                "details": [{"field": "rate_limit", "message": str(exc.detail)}],
            }
        },
    )


# ============================================================================
# LIFESPAN EVENT HANDLER
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for startup/shutdown events.

    Схема БД создаётся миграциями alembic (или init_db.py), не здесь.
    """
    global APP_START_TIME

    APP_START_TIME = time.time()
    logger.info(
        "Application started",
        extra={
            "app_name": settings.APP_NAME,
            "version": APP_VERSION,
            "debug": settings.DEBUG,
            "log_level": settings.LOG_LEVEL,
        },
    )

    yield  # Application runs here

    uptime = int(time.time() - APP_START_TIME)
    logger.info("Application stopped", extra={"uptime_seconds": uptime})


# ============================================================================
# CREATE APPLICATION
# ============================================================================

app = FastAPI(
    lifespan=lifespan,
    title=settings.APP_NAME,
    description="""
    Заметки с автоматическими тегами.

    ## Возможности

    * **Записи** - каждое слово записи становится нормализованным тегом
      (`Café` → `cafe`)
    * **Поиск** - все термы запроса должны входить в теги записи
    * **Дубликаты** - запись с тем же набором тегов не создаётся (409)
    * **Теги-сироты** - удаляются вместе с последней записью
    * **Экспорт / импорт** - переносимый JSON снимок без внутренних ID

    ## Слои

    ```
    API (FastAPI) → Use-cases → Domain
                         ↓
               Repositories + Unit of Work (SQLAlchemy)
    ```
    """,
    version=APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.state.limiter = limiter
# slowapi handler имеет специфичный тип, но работает корректно
app.add_exception_handler(RateLimitExceeded, custom_rate_limit_exceeded_handler)  # type: ignore[arg-type]

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # В продакшене указать конкретные домены
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Каждый запрос логируется с методом, путём, статусом и временем
app.add_middleware(RequestLoggingMiddleware)


# ============================================================================
# ROUTERS
# ============================================================================

api_v1_router = APIRouter(prefix="/api/v1")
api_v1_router.include_router(records_router)
api_v1_router.include_router(tags_router)
api_v1_router.include_router(data_router)

# dependencies=[Depends(verify_api_key)] - все endpoints роутера требуют авторизации
app.include_router(api_v1_router, dependencies=[Depends(verify_api_key)])

register_error_handlers(app)


# ============================================================================
# ROOT ENDPOINT
# ============================================================================


@app.get("/", tags=["root"], summary="Root endpoint", description="Информация о API")
@limiter.limit("100/minute")
async def root(request: Request):
    return {
        "name": settings.APP_NAME,
        "version": APP_VERSION,
        "api_version": "v1",
        "docs": "/docs",
        "endpoints": {
            "records": "/api/v1/records",
            "tags": "/api/v1/tags",
            "data": "/api/v1/data",
        },
        "rate_limit": "100 requests/minute",
    }


# ============================================================================
# HEALTH CHECK
# ============================================================================


@app.get("/health", tags=["health"], summary="Health check", description="Проверка работоспособности API")
@limiter.limit("100/minute")
async def health_check(request: Request):
    """
    Health check endpoint.

    Пример ответа (200 OK):
    ```json
    {
        "status": "ok",
        "checks": {"database": "connected", "version": "1.0.0", "uptime_seconds": 3600},
        "timestamp": "2026-01-22T12:00:00Z"
    }
    ```

    Если база недоступна — 503 и "database": "disconnected".
    """
    uptime_seconds = int(time.time() - APP_START_TIME) if APP_START_TIME > 0 else 0

    db_status = "disconnected"
    try:
        await check_connection()
        db_status = "connected"
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Health check: database unavailable", extra={"error": str(e)})

    overall_status = "ok" if db_status == "connected" else "error"
    return JSONResponse(
        status_code=200 if overall_status == "ok" else 503,
        content={
            "status": overall_status,
            "checks": {
                "database": db_status,
                "version": APP_VERSION,
                "uptime_seconds": uptime_seconds,
            },
            "timestamp": datetime.now(UTC).isoformat(),
        },
    )
