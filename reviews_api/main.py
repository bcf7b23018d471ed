"""FastAPI application factory and lifespan."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from reviews_api.api.v1 import api_router
from reviews_api.core.config import Settings, get_settings
from reviews_api.core.handlers import register_exception_handlers
from reviews_api.core.logging import configure_logging
from reviews_api.core.security import build_password_hasher, build_token_service
from reviews_api.db.session import create_engine, create_session_maker

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: build the engine and session factory; shutdown: dispose the pool."""
    settings: Settings = app.state.settings
    if not settings.jwt_secret:
        logger.warning("JWT_SECRET is not set: registration, login and protected routes will fail")
    engine = create_engine(settings)
    app.state.engine = engine
    app.state.session_maker = create_session_maker(engine)
    logger.info("%s started (%s)", settings.app_name, settings.environment)
    yield
    await engine.dispose()
    logger.info("Database engine disposed")


def create_application(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    # Immutable for the life of the process; handlers read them through dependencies.
    app.state.settings = settings
    app.state.password_hasher = build_password_hasher(settings)
    app.state.token_service = build_token_service(settings)

    if settings.debug:
        cors_origins = ["*"]
    elif settings.environment == "development":
        cors_origins = ["http://localhost:3000", "http://127.0.0.1:3000"]
    else:
        cors_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    @app.get("/")
    def root():
        return {"status": "ok", "message": settings.app_name}

    app.include_router(api_router, prefix=settings.api_prefix)
    return app


app = create_application()
