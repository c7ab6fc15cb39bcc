"""
═══════════════════════════════════════════════════════════════════════════════
Workshop — Главная точка входа сервиса заказов (Application Entry Point)
═══════════════════════════════════════════════════════════════════════════════

Фабрика приложения (Application Factory Pattern): роутеры API,
раздача загруженных фото и единый обработчик доменных ошибок.
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

import uvicorn
from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from workshop import __version__
from workshop.config import get_settings
from workshop.database import close_pool, get_pool
from workshop.exceptions import WorkshopError

from workshop.api.auth import router as auth_router
from workshop.api.health import router as health_router
from workshop.api.orders import router as orders_router
from workshop.api.reports import router as reports_router
from workshop.api.users import router as users_router

# ═══════════════════════════════════════════════════════════════════════════════
# Настройка логирования
# ═══════════════════════════════════════════════════════════════════════════════
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

ERROR_STATUS_MAP = {
    "WORKSHOP_NOT_FOUND": 404,
    "WORKSHOP_CONFLICT": 409,
    "WORKSHOP_VALIDATION_ERROR": 422,
    "WORKSHOP_AUTH_ERROR": 401,
    "WORKSHOP_AUTHZ_ERROR": 403,
    "WORKSHOP_STORAGE_ERROR": 503,
}


# ═══════════════════════════════════════════════════════════════════════════════
# Автоматическое применение SQL-миграций
# ═══════════════════════════════════════════════════════════════════════════════

async def _apply_migrations(pool) -> None:
    """Применяет SQL-миграции из ``workshop/db/migrations/``."""
    migrations_dir = Path(__file__).parent / "db" / "migrations"
    if not migrations_dir.is_dir():
        logger.info("No migrations directory found, skipping")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))
    if not sql_files:
        logger.info("No SQL migration files found, skipping")
        return

    async with pool.acquire() as conn:
        await conn.execute("""
            CREATE TABLE IF NOT EXISTS _applied_migrations (
                filename TEXT PRIMARY KEY,
                applied_at TIMESTAMPTZ DEFAULT NOW()
            )
        """)

        rows = await conn.fetch("SELECT filename FROM _applied_migrations")
        applied = {row["filename"] for row in rows}

        for sql_file in sql_files:
            if sql_file.name in applied:
                continue

            logger.info(f"📄 Applying migration: {sql_file.name}")
            sql_text = sql_file.read_text(encoding="utf-8")
            async with conn.transaction():
                await conn.execute(sql_text)
                await conn.execute(
                    "INSERT INTO _applied_migrations (filename) VALUES ($1)",
                    sql_file.name,
                )
            logger.info(f"✅ Migration applied: {sql_file.name}")

    logger.info(f"✅ All migrations up to date ({len(sql_files)} files checked)")


# ═══════════════════════════════════════════════════════════════════════════════
# Lifespan — управление жизненным циклом
# ═══════════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup:
        1. Создаём пул соединений к PostgreSQL.
        2. Применяем миграции.
        3. При недоступности БД: graceful degradation (memory store).
        4. Подключаем NATS publisher.

    Shutdown:
        1. Закрываем NATS и пул БД.
    """
    settings = get_settings()
    logger.info(f"🚀 Workshop orders v{__version__} starting...")
    logger.info(f"   Log level: {settings.log_level}")

    pool = None
    try:
        pool = await get_pool()
        logger.info("✅ Database pool initialized")
    except Exception as e:
        logger.warning(f"⚠️  DB not available, activating memory store: {e}")
        from workshop.memory_store import activate_memory_store
        activate_memory_store()

    if pool is not None:
        try:
            await _apply_migrations(pool)
        except Exception as e:
            logger.warning(f"⚠️  Migration apply failed (non-fatal): {e}")

    try:
        from workshop.events import connect as nats_connect
        await nats_connect()
    except Exception as e:
        logger.warning(f"⚠️  NATS publisher not available (events will be skipped): {e}")

    yield

    try:
        from workshop.events import disconnect as nats_disconnect
        await nats_disconnect()
    except Exception as e:
        logger.warning(f"NATS disconnect failed: {e}")
    await close_pool()
    logger.info("🛑 Workshop orders stopped")


# ═══════════════════════════════════════════════════════════════════════════════
# Фабрика приложения
# ═══════════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Создаёт и конфигурирует FastAPI-приложение сервиса заказов."""
    settings = get_settings()

    _is_production = settings.app_env == "production"

    app = FastAPI(
        redirect_slashes=False,
        title="Souvenir Workshop Orders",
        description=(
            "Order management for a souvenir workshop: client orders with photos, "
            "master assignment, status tracking and staff reports."
        ),
        version=__version__,
        lifespan=lifespan,
        docs_url=None if _is_production else "/docs",
        redoc_url=None if _is_production else "/redoc",
        openapi_url=None if _is_production else "/api/v1/openapi.json",
    )

    # ── CORS middleware ──────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept", "X-Request-ID"],
    )

    # ── Подключение API-роутеров ─────────────────────────────────────────
    v1_router = APIRouter(prefix="/api/v1")
    v1_router.include_router(auth_router)
    v1_router.include_router(users_router)
    v1_router.include_router(orders_router)
    v1_router.include_router(reports_router)
    v1_router.include_router(health_router)
    app.include_router(v1_router)

    # ── Загруженные фото: /uploads/orders/photos/<filename> ──────────────
    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=upload_dir), name="uploads")

    # ── Глобальный обработчик WorkshopError ──────────────────────────────
    @app.exception_handler(WorkshopError)
    async def workshop_error_handler(request: Request, exc: WorkshopError) -> JSONResponse:
        """Маппинг кодов ошибок на HTTP-статусы."""
        status_code = ERROR_STATUS_MAP.get(exc.code, 500)
        return JSONResponse(
            status_code=status_code,
            content={
                "error": {
                    "code": exc.code,
                    "message": exc.message,
                    "details": exc.details,
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                }
            },
        )

    @app.get("/")
    async def root():
        return {
            "name": "Souvenir Workshop Orders",
            "version": __version__,
            "docs": "/docs",
            "api": {
                "v1": {
                    "health": "/api/v1/health",
                    "register": "/api/v1/register",
                    "login": "/api/v1/login",
                    "orders": "/api/v1/orders",
                    "product_types": "/api/v1/product-types",
                },
            },
        }

    return app


# ═══════════════════════════════════════════════════════════════════════════════
# Module-level singleton
# ═══════════════════════════════════════════════════════════════════════════════
app = create_app()


def main() -> None:
    """Запускает сервис через Uvicorn."""
    settings = get_settings()
    logger.info(f"Starting workshop server on {settings.api_host}:{settings.api_port}")
    uvicorn.run(
        "workshop.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
