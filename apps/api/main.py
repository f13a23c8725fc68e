import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from apps.api.config import Settings, load_settings
from apps.api.container import ServiceContainer, build_container
from apps.api.exceptions import (
    DocChatException,
    docchat_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from apps.api.middleware import RequestIDMiddleware
from apps.api.routes import chat, documents, health, search

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manages application startup and shutdown lifecycle."""

    # --- Startup ---
    settings: Settings = app.state.settings
    logger.info("%s v%s starting up (%s)...", settings.app_name, settings.app_version, settings.environment)

    owns_container = getattr(app.state, "container", None) is None
    if owns_container:
        app.state.container = build_container(settings)

    yield  # App runs and handles requests here

    # --- Shutdown ---
    logger.info("%s shutting down...", settings.app_name)
    if owns_container:
        await app.state.container.close()


def create_app(
    settings: Settings | None = None,
    container: ServiceContainer | None = None,
) -> FastAPI:
    """Application factory.

    Settings are read once here (or passed in) and flow into every service
    through the container. Tests pass a prebuilt container with in-memory
    storage and fake providers.
    """
    settings = settings or (container.settings if container else load_settings())

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )

    application = FastAPI(
        title=settings.app_name,
        description="Document store with retrieval-augmented chat.",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url=f"{settings.api_prefix}/docs",
        redoc_url=f"{settings.api_prefix}/redoc",
        openapi_url=f"{settings.api_prefix}/openapi.json",
    )
    application.state.settings = settings
    application.state.container = container

    # --- Middleware ---
    # Applied in REVERSE order: CORS is outermost, RequestID closest to the routes
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(RequestIDMiddleware)

    # --- Exception Handlers ---
    application.add_exception_handler(DocChatException, docchat_exception_handler)
    application.add_exception_handler(RequestValidationError, validation_exception_handler)
    application.add_exception_handler(Exception, unhandled_exception_handler)

    # --- Routes ---
    prefix = settings.api_prefix
    application.include_router(health.router, prefix=prefix, tags=["health"])  # /api/health
    application.include_router(documents.router, prefix=prefix)  # /api/document, /api/document/{id}
    application.include_router(search.router, prefix=prefix)     # /api/search/document
    application.include_router(chat.router, prefix=prefix)       # /api/chat

    return application


def run() -> None:
    """Console entry point: `docchat-api`."""
    import uvicorn

    settings = load_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
