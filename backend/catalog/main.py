"""FastAPI application."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, settings
from .database import build_engine, build_session_factory, create_all
from .envelopes import ResponseEnvelope
from .logging_config import FAILURE_LOGGER_NAME, configure_logging
from .problem_details import FailureTranslator, register_failure_handlers
from .routers import categories, patterns

logger = logging.getLogger(__name__)


def _check_production_safety(app_settings: Settings) -> None:
    """Fail closed on insecure production configuration."""
    if not app_settings.is_production:
        return
    if app_settings.DEBUG:
        raise RuntimeError("DEBUG must be false in production.")
    if any(origin == "*" for origin in app_settings.cors_origins):
        raise RuntimeError("ALLOWED_ORIGINS must be explicit in production (no wildcard).")


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Build the application; the failure translator is installed as the outermost handler."""
    app_settings = app_settings or settings
    configure_logging(app_settings.LOG_LEVEL)
    _check_production_safety(app_settings)

    engine = build_engine(app_settings)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        if app_settings.DATABASE_CREATE_ALL:
            await create_all(engine)
        logger.info("%s started (env=%s)", app_settings.APP_NAME, app_settings.ENV)
        yield
        await engine.dispose()

    app = FastAPI(
        title=app_settings.APP_NAME,
        version=app_settings.VERSION,
        description="Design pattern catalog API",
        docs_url="/docs" if app_settings.DEBUG else None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-API-Key"],
    )
    # Added last so it wraps every other middleware.
    register_failure_handlers(app, FailureTranslator(logging.getLogger(FAILURE_LOGGER_NAME)))

    app.include_router(patterns.router, prefix="/api/v1")
    app.include_router(categories.router, prefix="/api/v1")

    @app.get("/api/v1/system/health", response_model=ResponseEnvelope[dict[str, str]])
    def health_check():
        """Health check endpoint."""
        return ResponseEnvelope[dict[str, str]].ok({"status": "ok", "version": app_settings.VERSION})

    return app


app = create_app()
