"""Shopping: FastAPI application factory.

Host applications either run this app directly or copy what create_app()
does: configure logging, register exception handlers, and open the
Typesense client for the lifetime of the process.
"""


import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI

from shopping.core.config import settings
from shopping.core.exceptions import register_exception_handlers
from shopping.dependencies import build_typesense_client
from shopping.schemas import HealthResponse

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    """Set up structured logging for the application."""
    level = logging.DEBUG if settings.app_env == "development" else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    # Quiet noisy libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.typesense = build_typesense_client(settings)
    if app.state.typesense is None:
        logger.info("Typesense not configured; queries are served by the database driver")
    try:
        yield
    finally:
        if app.state.typesense is not None:
            await app.state.typesense.close()


def create_app() -> FastAPI:
    _configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.app_env == "development" else None,
        redoc_url="/redoc" if settings.app_env == "development" else None,
    )
    # Populated by lifespan; None until startup
    app.state.typesense = None

    # --- Global exception handlers ---
    register_exception_handlers(app)

    # --- Health check ---
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health():
        return HealthResponse(
            app=settings.app_name,
            env=settings.app_env,
            query_driver=settings.query_method,
            search_index=app.state.typesense is not None,
        )

    return app


app = create_app()
