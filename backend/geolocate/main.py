"""
Geolocate API - Main FastAPI Application
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from prometheus_client import make_asgi_app
import structlog

from .config import settings
from .api.v1 import analysis, history, stats, health
from .api.middleware import LoggingMiddleware, MetricsMiddleware
from .database import Database
from .services import (
    AnalysisInvoker,
    HistoryStore,
    ImageIngestService,
    StatsAggregator,
    StorageService,
    create_openai_client
)
from .utils.logging import setup_logging, log_service_event
from .utils.exceptions import GeolocateException

setup_logging(settings.log_level, settings.log_format, settings.log_file)
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Starting Geolocate API", version=settings.app_version)

    try:
        database = Database(settings.database_url, echo=settings.database_echo)
        if settings.database_auto_create:
            await database.create_all()

        storage = StorageService(
            bucket_name=settings.storage_bucket,
            project=settings.google_cloud_project
        )
        client = create_openai_client(
            settings.openai_api_key,
            base_url=settings.openai_base_url,
            max_retries=settings.provider_max_retries
        )

        app.state.database = database
        app.state.image_ingest = ImageIngestService(
            storage,
            max_size_bytes=settings.max_image_size_bytes
        )
        app.state.analysis_invoker = AnalysisInvoker(
            client,
            model=settings.analysis_model,
            temperature=settings.analysis_temperature
        )
        app.state.history_store = HistoryStore(database)
        app.state.stats_aggregator = StatsAggregator(database)

        if client is None:
            logger.warning("OPENAI_API_KEY is not set, /analyze will fail until it is configured")

        log_service_event(
            logger,
            "Services initialized successfully",
            "geolocate-api",
            database=database.engine.dialect.name,
            model=settings.analysis_model,
            bucket=settings.storage_bucket
        )

    except Exception as e:
        logger.error("Failed to initialize services", error=str(e), exc_info=True)
        raise

    yield

    logger.info("Shutting down Geolocate API")

    if client is not None:
        await client.close()
    await database.dispose()


app = FastAPI(
    title=settings.app_name,
    description="Infers the geographic origin of images with a multimodal model",
    version=settings.app_version,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    openapi_url="/openapi.json" if settings.debug else None,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)
app.add_middleware(LoggingMiddleware)
if settings.enable_monitoring:
    app.add_middleware(MetricsMiddleware)
    app.mount("/metrics", make_asgi_app())

# No version prefix: clients call /analyze, /history and /stats directly
app.include_router(analysis.router, tags=["analysis"])
app.include_router(history.router, tags=["history"])
app.include_router(stats.router, tags=["stats"])
app.include_router(health.router, tags=["health"])


def error_response(
    request: Request,
    status_code: int,
    code: str,
    message: Any,
    details: Any = None,
    timestamp: Optional[datetime] = None
) -> JSONResponse:
    """Render the error envelope shared by every failure"""
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": jsonable_encoder(details) if details is not None else None,
                "timestamp": (timestamp or datetime.utcnow()).isoformat(),
                "request_id": getattr(request.state, "request_id", None)
            }
        }
    )


@app.exception_handler(GeolocateException)
async def geolocate_exception_handler(request: Request, exc: GeolocateException):
    """Errors raised by the services"""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "Request failed",
        error_code=exc.error_code,
        message=exc.message,
        details=exc.details,
        path=request.url.path
    )
    return error_response(
        request,
        exc.status_code,
        exc.error_code,
        exc.message,
        details=exc.details,
        timestamp=exc.timestamp
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and query parameters are invalid arguments"""
    errors = jsonable_encoder(exc.errors())
    logger.warning("Request validation error", errors=errors, path=request.url.path)
    return error_response(request, 400, "INVALID_ARGUMENT", "Invalid request data", details=errors)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.warning(
        "HTTP exception",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path
    )
    return error_response(request, exc.status_code, f"HTTP_{exc.status_code}", exc.detail)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Anything unexpected; the message is only exposed in debug mode"""
    logger.error(
        "Unexpected exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        exc_info=True
    )
    message = str(exc) if settings.debug else "Internal server error"
    return error_response(request, 500, "INTERNAL_SERVER_ERROR", message)


@app.get("/")
async def root() -> Dict[str, Any]:
    """Root endpoint with service information"""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "status": "healthy",
        "environment": settings.environment,
        "docs_url": "/docs" if settings.debug else None
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "geolocate.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        workers=1 if settings.reload else settings.workers,
        log_level=settings.log_level.lower(),
        access_log=True
    )
