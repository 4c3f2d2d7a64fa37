import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from food_service.config import Settings
from food_service.database import build_engine, build_session_factory, create_tables
from food_service.infrastructure.http_clients import HTTPObjectStorageClient
from food_service.infrastructure.security import BcryptPasswordHasher
from food_service.infrastructure.unit_of_work import UnitOfWork
from food_service.presentation import (
    chat_api, maintenance_api, notifications_api, orders_api, products_api, users_api
)
from food_service.presentation.errors import (
    http_exception_handler, unhandled_exception_handler, validation_exception_handler
)

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: database engine and unit of work"""
    settings: Settings = app.state.settings
    engine = build_engine(settings)
    if settings.CREATE_TABLES:
        await create_tables(engine)
        logger.info("Tables checked")
    app.state.unit_of_work = UnitOfWork(build_session_factory(engine))
    logger.info("Database ready")

    yield

    logger.info("Application stopping...")
    await engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()
    configure_logging(settings)

    app = FastAPI(
        title="Food Order Service",
        description="Users, catalog, orders, notifications and chat for the food ordering app",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.password_hasher = BcryptPasswordHasher()
    app.state.object_storage = HTTPObjectStorageClient(settings.STORAGE_URL, settings.STORAGE_KEY)

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info(f"{request.method} {request.url.path}")
        return await call_next(request)

    for module in (users_api, products_api, orders_api, notifications_api, chat_api, maintenance_api):
        app.include_router(module.router, prefix="/api")

    @app.get("/api/health")
    async def health():
        return {"status": "ok", "message": "Server is running"}

    return app


app = create_app()
