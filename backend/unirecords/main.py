from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from unirecords.core.config import settings
from unirecords.core.database import close_db, init_db
from unirecords.core.exceptions import RecordsError, error_response
from unirecords.core.logging_config import logger
from unirecords.core.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    RequestSizeLimitMiddleware,
)
from unirecords.core.rate_limiter import limiter, rate_limit_exceeded_handler
from unirecords.core.redis_client import redis_client
from unirecords.api.v1.router import api_router
from unirecords.api.v1.endpoints import health
from unirecords.services.email_service import email_service
import unirecords.models  # noqa: F401 - Import models so metadata knows about them


async def validate_critical_config():
    """Validate critical configuration at startup - fail fast if missing"""
    errors = []
    warnings = []

    # Critical: Without these, the app cannot function
    if not settings.DATABASE_URL:
        errors.append("DATABASE_URL is not set")

    if not settings.JWT_SECRET_KEY or settings.JWT_SECRET_KEY == "CHANGE_ME":
        errors.append("JWT_SECRET_KEY is not set or using default value")

    # Warnings: App can function but some features may not work
    if not settings.REDIS_URL:
        warnings.append("REDIS_URL not set - cache disabled, rate limits kept in memory")

    if not email_service.is_configured:
        warnings.append("Email not configured - notifications will not be delivered")

    if not settings.S3_BUCKET_NAME or not (settings.AWS_ACCESS_KEY_ID or settings.S3_ENDPOINT_URL):
        warnings.append("Object storage not fully configured - uploads may fail")

    if errors:
        for err in errors:
            logger.critical(f"[Startup] CRITICAL: {err}")
        raise RuntimeError(f"Missing critical configuration: {', '.join(errors)}")

    for warn in warnings:
        logger.warning(f"[Startup] WARNING: {warn}")

    logger.info("[Startup] Critical configuration validated")
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown"""
    logger.info("=" * 60)
    logger.info(f"Starting {settings.APP_NAME}...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"API Version: {settings.API_VERSION}")
    logger.info("=" * 60)

    await validate_critical_config()
    await init_db()
    await redis_client.connect()

    yield

    logger.info(f"Shutting down {settings.APP_NAME}...")
    await redis_client.disconnect()
    await close_db()


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="Institutional records API: students, faculty, exams, fees, admissions, "
                    "grievances, leave and thesis tracking",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
        redirect_slashes=False,
    )

    # Rate limiter state and exception handler
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    # Middleware (order matters - last added runs first)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestSizeLimitMiddleware, max_size=settings.MAX_REQUEST_SIZE)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Response-Time"],
    )

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(api_router, prefix=f"/api/{settings.API_VERSION}")

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint"""
        return {
            "message": f"Welcome to {settings.APP_NAME}",
            "version": "1.0.0",
            "docs": "/docs",
            "health": "/health",
        }

    return app


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RecordsError)
    async def records_error_handler(request: Request, exc: RecordsError):
        if exc.status_code >= 500:
            logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}")
        else:
            logger.info(f"[{exc.code}] {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=error_response(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request")
        if location:
            message = f"{location}: {message}"
        return JSONResponse(
            status_code=400,
            content={
                "status": "error",
                "message": message,
                "code": "VALIDATION_ERROR",
                "details": {"errors": jsonable_errors(errors)},
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"status": "error", "message": str(exc.detail), "code": f"HTTP_{exc.status_code}"},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={
                "status": "error",
                "message": str(exc) if settings.DEBUG else "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )


def jsonable_errors(errors):
    """Pydantic error dicts may carry exception objects in `ctx`"""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in errors
    ]


app = create_app()


def run():
    import uvicorn
    uvicorn.run(
        "unirecords.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG
    )


if __name__ == "__main__":
    run()
