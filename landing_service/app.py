"""Landing Service - FastAPI server for the under-construction page and its contact form."""

import asyncio
import logging
import time
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from landing_service.shared.config import Settings, load_settings, validate_notification_settings
from landing_service.shared.contact.notifier import Notifier, create_notifier
from landing_service.shared.contact.pipeline import ContactPipeline
from landing_service.shared.contact.rate_limit import RateLimitLedger, run_periodic_sweep
from landing_service.shared.contact.routes import router as contact_router
from landing_service.shared.contact.schemas import utc_now_iso
from landing_service.shared.contact.submission_log import SubmissionLog
from landing_service.shared.pages import router as pages_router

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    notifier: Optional[Notifier] = None,
    clock: Callable[[], float] = time.monotonic,
    now: Callable[[], str] = utc_now_iso,
) -> FastAPI:
    """
    Build the application.

    Raises:
        ConfigurationError if notifications are enabled without the credentials they need
    """
    if settings is None:
        settings = load_settings()
    validate_notification_settings(settings)

    if notifier is None:
        notifier = create_notifier(settings)

    ledger = RateLimitLedger(
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
        clock=clock,
    )
    pipeline = ContactPipeline(
        ledger=ledger,
        log=SubmissionLog(settings.submissions_file),
        notifier=notifier,
        recipient=settings.recipient,
        sender=settings.sender,
        notification_timeout=settings.notify_timeout_seconds,
        now=now,
    )

    app = FastAPI(
        title="Landing Service",
        description="Under-construction landing page with a contact form",
        version="0.1.0",
        # Every unrouted GET serves the landing page, so no API docs routes
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.ledger = ledger
    app.state.pipeline = pipeline
    app.state.sweep_task = None

    @app.on_event("startup")
    async def startup_event():
        app.state.sweep_task = asyncio.create_task(
            run_periodic_sweep(ledger, settings.rate_limit_sweep_seconds)
        )
        logger.info(
            f"Contact form ready: log at {settings.submissions_file}, "
            f"notifications {'via ' + settings.notify_transport if pipeline.notifier else 'disabled'}"
        )
        logger.info(f"Landing page running on http://{settings.host}:{settings.port}")

    @app.on_event("shutdown")
    async def shutdown_event():
        task = app.state.sweep_task
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        await pipeline.drain()

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Render HTTP errors as {"error": message}."""
        if isinstance(exc.detail, str):
            message = exc.detail
        else:
            message = str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": message},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": "Invalid request"})

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    app.include_router(contact_router)
    # Catch-all landing page route must stay last
    app.include_router(pages_router)

    return app
