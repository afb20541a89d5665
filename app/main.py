"""Trade Hub backend service.

Persists trade agreements, ESG metrics, compliance reports, participants,
documents and AI insights to a JSON snapshot, and forwards agreement events
to an automation webhook with a local fallback.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from app.agents.fallback_engine import FallbackEngine
from app.api.routes.agreements import router as agreements_router
from app.api.routes.ai import router as ai_router
from app.api.routes.compliance import router as compliance_router
from app.api.routes.data import router as data_router
from app.api.routes.esg import router as esg_router
from app.api.routes.health import router as health_router
from app.api.routes.monitoring import router as monitoring_router
from app.api.routes.participants import router as participants_router
from app.clients.webhook_client import WebhookClient
from app.core.config import AppEnvironment, Settings, get_settings
from app.core.errors import TradeHubError, get_status_code
from app.core.logging import setup_logging
from app.core.tracing import REQUEST_ID_HEADER, TRACEPARENT_HEADER, begin_request, end_request
from app.persistence.record_store import RecordStore
from app.services.insight_relay import InsightRelay

logger = structlog.get_logger(__name__)

API_PREFIX = "/api"
API_V1_PREFIX = "/api/v1"
API_CSP_POLICY = (
    "default-src 'none'; frame-ancestors 'none'; base-uri 'none'; "
    "form-action 'none'; object-src 'none'"
)
DOCS_CSP_POLICY = (
    "default-src 'self'; img-src 'self' data:; style-src 'self' 'unsafe-inline'; "
    "script-src 'self' 'unsafe-inline'; frame-ancestors 'none'; object-src 'none'; "
    "base-uri 'self'"
)


def _request_log_context(request: Request) -> dict[str, str]:
    return {
        "path": request.url.path,
        "method": request.method,
        "query": request.url.query,
        "request_id": request.headers.get("x-request-id", ""),
        "client_host": request.client.host if request.client else "",
    }


def _is_docs_path(path: str) -> bool:
    return path.startswith("/docs") or path.startswith("/redoc") or path.startswith("/openapi.json")


def _warn_on_missing_relay(settings: Settings) -> None:
    if not settings.relay.enabled:
        logger.warning(
            "No AI integration configured, relay runs in fallback mode",
            hint="Set N8N_WEBHOOK_URL or OPENAI_API_KEY",
        )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan context manager."""
    settings = get_settings()
    setup_logging()

    logger.info(
        "Starting Trade Hub backend",
        app=settings.app.name,
        env=settings.app.env.value,
        version=settings.app.version,
        data_path=str(settings.storage.data_path),
    )
    _warn_on_missing_relay(settings)

    store = RecordStore(settings.storage)
    await store.load()

    webhook_client = WebhookClient(settings.relay)
    relay = InsightRelay(webhook_client, FallbackEngine(settings.fallback), settings.relay)

    app.state.settings = settings
    app.state.store = store
    app.state.relay = relay

    yield

    await webhook_client.close()

    logger.info("Trade Hub backend stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Trade Hub Backend",
        description=(
            "Trade agreement records, ESG compliance scoring and "
            "automation-webhook analysis with local fallback."
        ),
        version=settings.app.version,
        lifespan=lifespan,
        docs_url="/docs" if settings.app.env != AppEnvironment.PROD else None,
        redoc_url="/redoc" if settings.app.env != AppEnvironment.PROD else None,
        openapi_url="/openapi.json" if settings.app.env != AppEnvironment.PROD else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_allowed_origins,
        allow_credentials=settings.security.cors_allow_credentials,
        allow_methods=settings.security.cors_allow_methods,
        allow_headers=settings.security.cors_allow_headers,
    )

    app.include_router(health_router)
    app.include_router(monitoring_router, prefix=API_V1_PREFIX)
    app.include_router(agreements_router, prefix=API_PREFIX)
    app.include_router(esg_router, prefix=API_PREFIX)
    app.include_router(compliance_router, prefix=API_PREFIX)
    app.include_router(participants_router, prefix=API_PREFIX)
    app.include_router(ai_router, prefix=API_PREFIX)
    app.include_router(data_router, prefix=API_PREFIX)

    setup_telemetry(app, settings)

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        """Propagate X-Request-ID and traceparent to outbound webhook calls."""
        request_id = begin_request(
            request.headers.get(REQUEST_ID_HEADER),
            request.headers.get(TRACEPARENT_HEADER),
        )
        request.state.request_id = request_id

        try:
            response = await call_next(request)
        finally:
            end_request()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    @app.middleware("http")
    async def payload_size_guard(request: Request, call_next):
        request_context = _request_log_context(request)
        max_request = settings.security.max_request_size_bytes
        max_response = settings.security.max_response_size_bytes

        content_length = request.headers.get("content-length")
        if content_length:
            try:
                if int(content_length) > max_request:
                    logger.warning(
                        "Request payload exceeds configured size limit",
                        **request_context,
                        content_length=content_length,
                        max_request_size_bytes=max_request,
                    )
                    return JSONResponse(
                        status_code=413, content={"detail": "Request payload too large"}
                    )
            except ValueError:
                logger.warning(
                    "Invalid Content-Length header",
                    **request_context,
                    content_length=content_length,
                )

        response = await call_next(request)

        response_length = response.headers.get("content-length")
        if response_length and response_length.isdigit() and int(response_length) > max_response:
            logger.error(
                "Response payload exceeds configured size limit",
                **request_context,
                content_length=response_length,
                max_response_size_bytes=max_response,
            )
            return JSONResponse(status_code=500, content={"detail": "Response payload too large"})

        return response

    @app.middleware("http")
    async def security_headers_middleware(request: Request, call_next):
        """Set baseline security headers for all responses."""
        response = await call_next(request)

        csp_policy = DOCS_CSP_POLICY if _is_docs_path(request.url.path) else API_CSP_POLICY
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Content-Security-Policy", csp_policy)
        return response

    @app.exception_handler(TradeHubError)
    async def domain_error_handler(request: Request, exc: TradeHubError) -> JSONResponse:
        """Handle domain-specific errors."""
        status_code = get_status_code(exc)
        log = logger.error if status_code >= 500 else logger.warning
        log(
            "Domain exception",
            **_request_log_context(request),
            status_code=status_code,
            error_code=exc.code,
            error=exc.message,
            error_details=exc.details or {},
        )
        return JSONResponse(
            status_code=status_code,
            content={
                "detail": exc.message,
                "code": exc.code,
                **({"errors": exc.details} if exc.details else {}),
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception(
            "Unhandled exception",
            **_request_log_context(request),
            error=str(exc),
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app


def setup_telemetry(app: FastAPI, settings: Settings) -> None:
    """Setup OpenTelemetry instrumentation."""
    if not settings.observability.otlp_endpoint:
        return

    resource = Resource(
        attributes={
            SERVICE_NAME: settings.observability.service_name,
        }
    )

    provider = TracerProvider(resource=resource)
    exporter = OTLPSpanExporter(
        endpoint=settings.observability.otlp_endpoint,
        insecure=settings.observability.otlp_insecure,
    )
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    FastAPIInstrumentor.instrument_app(app)


def run() -> None:
    """Run the application using uvicorn."""
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "app.main:create_app",
        factory=True,
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.app.env == AppEnvironment.LOCAL,
        # The JSON snapshot has a single writer; never fork workers.
        workers=1,
        log_level=settings.app.log_level.lower(),
    )


if __name__ == "__main__":
    run()
