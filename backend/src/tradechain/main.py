"""
FastAPI application entry point.

This is the main application that ties together all components:
- API routes for participants and letters of credit
- Storage backend selection (in-memory or database)
- Domain error mapping to HTTP responses
- Logging
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from tradechain import __version__
from tradechain.api.routes import health, letters, participants
from tradechain.config import Settings, get_settings
from tradechain.domain.errors import (
    DuplicateLetterIdError,
    DuplicateParticipantError,
    InvalidParticipantError,
    LetterNotFoundError,
    LetterOfCreditError,
    ParticipantNotFoundError,
)
from tradechain.infrastructure.database import Database
from tradechain.infrastructure.registry import (
    InMemoryLetterRegistry,
    InMemoryParticipantRegistry,
    SqlLetterRegistry,
    SqlParticipantRegistry,
)
from tradechain.services.events import (
    CompositeEventSink,
    EventSink,
    InMemoryEventSink,
    LoggingEventSink,
    SqlEventSink,
)
from tradechain.services.letters import LetterOfCreditService

logger = logging.getLogger(__name__)

# Domain errors that are not plain rule conflicts (409)
ERROR_STATUS_CODES: dict[type[LetterOfCreditError], int] = {
    LetterNotFoundError: status.HTTP_404_NOT_FOUND,
    ParticipantNotFoundError: status.HTTP_404_NOT_FOUND,
    DuplicateLetterIdError: status.HTTP_409_CONFLICT,
    DuplicateParticipantError: status.HTTP_409_CONFLICT,
    InvalidParticipantError: 422,
}


def status_code_for(error: LetterOfCreditError) -> int:
    """HTTP status for a domain error; rule violations default to 409."""
    for error_type, code in ERROR_STATUS_CODES.items():
        if isinstance(error, error_type):
            return code
    return status.HTTP_409_CONFLICT


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown tasks:
    - Initialize database tables when a database is configured
    - Dispose of connections on shutdown
    """
    settings: Settings = app.state.settings
    db: Database | None = app.state.db

    logger.info(f"Starting TradeChain v{__version__}")
    logger.info(f"Storage: {'database' if db else 'memory'}")
    logger.info(f"Debug mode: {settings.debug}")

    if db is not None:
        await db.init()

    yield  # Application runs here

    logger.info("Shutting down TradeChain")
    if db is not None:
        await db.close()


def build_service(app: FastAPI, settings: Settings) -> None:
    """Wire registries, event sinks and the letter service onto ``app.state``."""
    db: Database | None = None

    if settings.uses_database:
        db = Database(settings.database_url, echo=settings.debug)
        letter_registry = SqlLetterRegistry(db)
        participant_registry = SqlParticipantRegistry(db)
        event_store = SqlEventSink(db)
    else:
        letter_registry = InMemoryLetterRegistry()
        participant_registry = InMemoryParticipantRegistry()
        event_store = InMemoryEventSink()

    sinks: list[EventSink] = [event_store]
    if settings.log_events:
        sinks.append(LoggingEventSink())

    app.state.settings = settings
    app.state.db = db
    app.state.event_store = event_store
    app.state.letter_service = LetterOfCreditService(
        letters=letter_registry,
        participants=participant_registry,
        events=CompositeEventSink(sinks),
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Explicit settings; loaded from the environment if None.

    Returns:
        Configured FastAPI instance ready to serve requests.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="TradeChain API",
        description=(
            "Letter of Credit Network.\n\n"
            "Banks and trading parties approve, ship, receive and settle "
            "letters of credit through a shared lifecycle."
        ),
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    build_service(app, settings)

    # Register routers
    app.include_router(health.router)
    app.include_router(participants.router, prefix="/api/v1")
    app.include_router(letters.router, prefix="/api/v1")

    @app.exception_handler(LetterOfCreditError)
    async def letter_of_credit_error_handler(request: Request, exc: LetterOfCreditError):
        """Map domain errors to a stable JSON error body."""
        return JSONResponse(
            status_code=status_code_for(exc),
            content=exc.to_dict(),
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Catch-all exception handler for unhandled errors."""
        logger.exception(f"Unhandled error: {exc}")

        # Don't expose internal errors in production
        if settings.debug:
            detail = str(exc)
        else:
            detail = "An internal error occurred"

        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal Server Error",
                "detail": detail,
            },
        )

    return app


# Create the application instance
app = create_app()


# Development server entry point
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tradechain.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
