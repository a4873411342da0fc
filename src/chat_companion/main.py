"""Chat Companion FastAPI application.

Hosts the event webhooks and the synchronous refinement endpoint. The
pipeline is built in the lifespan from Neo4j and Gemini unless one is
passed to ``create_app``.
"""

from collections.abc import AsyncGenerator
from contextlib import AsyncExitStack, asynccontextmanager

import logfire
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from chat_companion.api import dependencies
from chat_companion.api import router as api_router
from chat_companion.core.base import ApplicationError, ValidationErrorDetails
from chat_companion.core.config import Settings, settings
from chat_companion.core.errors import InvalidRequestError
from chat_companion.core.handlers import GlobalErrorHandler
from chat_companion.core.logging import get_logger, setup_logging
from chat_companion.events.bus import EventBus
from chat_companion.events.handlers import register_pipeline_handlers
from chat_companion.infrastructure.neo4j.document_store import Neo4jDocumentStore
from chat_companion.infrastructure.neo4j.driver import ensure_constraints, open_neo4j_driver
from chat_companion.infrastructure.oracle.gemini import GeminiOracle
from chat_companion.services.pipeline import ChatPipeline, build_pipeline

logger = get_logger(__name__)


def _install_error_handlers(app: FastAPI) -> None:
    error_handler = GlobalErrorHandler()

    @app.exception_handler(ApplicationError)
    async def application_error_handler(request: Request, exc: ApplicationError) -> JSONResponse:
        status_code, body = await error_handler.handle_application_error(exc, path=request.url.path)
        return JSONResponse(status_code=status_code, content=body)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        first = errors[0] if errors else {}
        error = InvalidRequestError(
            "Malformed request body",
            details=ValidationErrorDetails(
                source="api",
                operation=request.url.path,
                field=".".join(str(p) for p in first.get("loc", ())) or None,
                constraint=first.get("msg"),
            ),
        )
        status_code, body = await error_handler.handle_application_error(error, path=request.url.path)
        return JSONResponse(status_code=status_code, content=body)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
        body = await error_handler.handle_http_exception(exc)
        return JSONResponse(status_code=exc.status_code, content=body)


def create_app(
    pipeline: ChatPipeline | None = None,
    app_settings: Settings | None = None,
) -> FastAPI:
    """Build the application.

    Args:
        pipeline: Ready pipeline to serve; when omitted the lifespan connects
            to Neo4j and Gemini using ``app_settings``
        app_settings: Settings override, defaults to the environment
    """
    config = app_settings or settings

    logfire.configure(
        service_name="chat-companion",
        token=config.logfire_token,
        send_to_logfire="if-token-present",
    )
    setup_logging()

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncGenerator[None]:
        logger.info("Starting Chat Companion")
        bus = EventBus()

        async with AsyncExitStack() as stack:
            active = pipeline
            if active is None:
                driver = await stack.enter_async_context(open_neo4j_driver(config))
                await ensure_constraints(driver)
                oracle = GeminiOracle(config.gemini_api_key, config.gemini_model, config.oracle)
                active = build_pipeline(Neo4jDocumentStore(driver), oracle, config.pipeline)

            register_pipeline_handlers(bus, active)
            dependencies.pipeline = active
            dependencies.event_bus = bus
            logger.info("Pipeline ready", extra={"window_days": active.config.context_window_days})

            try:
                yield
            finally:
                logger.info("Shutting down Chat Companion", extra={"in_flight": bus.in_flight})
                await bus.drain()
                dependencies.pipeline = None
                dependencies.event_bus = None

        logger.info("Chat Companion shutdown complete")

    app = FastAPI(
        title="Chat Companion API",
        description="Contextual memory, reminders, suggested replies and refinements for chats",
        version="0.1.0",
        lifespan=lifespan,
    )

    logfire.instrument_fastapi(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _install_error_handlers(app)
    app.include_router(api_router)
    return app


if __name__ == "__main__":
    logger.info("Starting Chat Companion development server")
    uvicorn.run(
        "chat_companion.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level="info",
    )
