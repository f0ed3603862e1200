from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from leadhub.api.routes import router as api_router
from leadhub.core.config import get_settings
from leadhub.core.errors import InfrastructureError, LeadHubError
from leadhub.core.events import InternalEvent, event_bus
from leadhub.core.responses import error_response
from leadhub.logging import configure_logging
from leadhub.middleware.correlation_id import CorrelationIdMiddleware
from leadhub.middleware.request_logging import RequestLoggingMiddleware
from leadhub.otel import get_fastapi_server_request_hook, setup_otel


configure_logging()
logger = logging.getLogger("leadhub.lifecycle")
error_logger = logging.getLogger("leadhub.errors")
_subscriptions_registered = False

_submission_event_types = [
    "submission.created",
    "submission.updated",
    "submission.deleted",
    "submission.status_changed",
]


def _on_system_started(event: InternalEvent) -> None:
    logger.info("system_event", extra={"event_name": event.name})


def _on_submission_event(event: InternalEvent) -> None:
    payload = event.payload.get("payload", {}) if isinstance(event.payload, dict) else {}
    logger.info(
        "domain_event",
        extra={
            "event_name": event.name,
            "submission_id": payload.get("submission_id"),
            "user_id": event.payload.get("actor_user_id"),
        },
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    global _subscriptions_registered
    if not _subscriptions_registered:
        event_bus.subscribe("system.started", _on_system_started)
        event_bus.subscribe_many(_submission_event_types, _on_submission_event)
        _subscriptions_registered = True
    event_bus.publish("system.started", {"service": "api"})
    yield


settings = get_settings()

app = FastAPI(title=settings.app_name, version="0.1.0", debug=settings.app_debug, lifespan=lifespan)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(CorrelationIdMiddleware)
app.include_router(api_router)


@app.exception_handler(LeadHubError)
async def handle_leadhub_error(request: Request, exc: LeadHubError):
    return error_response(
        request,
        status_code=exc.status_code,
        code=exc.code,
        message=exc.message,
        details=exc.details,
    )


@app.exception_handler(SQLAlchemyError)
async def handle_store_error(request: Request, exc: SQLAlchemyError):
    error_logger.exception("store.failure", exc_info=exc, extra={"path": request.url.path, "error": str(exc)})
    failure = InfrastructureError()
    return error_response(request, status_code=failure.status_code, code=failure.code, message=failure.message)


@app.exception_handler(StarletteHTTPException)
async def handle_http_error(request: Request, exc: StarletteHTTPException):
    code = "not_found" if exc.status_code == 404 else "http_error"
    return error_response(request, status_code=exc.status_code, code=code, message=str(exc.detail), details=None)


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    return error_response(
        request,
        status_code=422,
        code="request_validation_error",
        message="Request validation failed",
        details=exc.errors(),
    )


setup_otel(settings)

if not getattr(app, "_is_instrumented_by_opentelemetry", False):
    FastAPIInstrumentor().instrument_app(app, server_request_hook=get_fastapi_server_request_hook())
