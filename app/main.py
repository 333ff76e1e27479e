"""FastAPI application for the transcript manager."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1.router import api_router
from app.core.config import settings
from app.core.database import engine, init_db
from app.core.exceptions import AppException, InternalError, error_envelope
from app.middleware.logging import RequestLoggingMiddleware

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

# Library loggers stay at WARNING even in debug mode
for noisy in ("sqlalchemy", "sqlalchemy.engine", "python_multipart", "python_multipart.multipart"):
    logging.getLogger(noisy).setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

DESCRIPTION = """
Student records, term transcripts and spreadsheet import.

- **Import**: upsert students and grades from an `.xlsx` file, matched on admission number
- **Grading**: totals, letter grades and pass levels are derived on every write
- **Export**: import template and single-transcript workbooks
- **Dashboard**: grade distribution, unit averages and rankings

Errors use the envelope `{"success": false, "error": {"code", "message", "details"}}`.
"""


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup, release the engine on shutdown."""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    init_db()
    logger.info(
        f"Scoring scheme: {settings.SCORING_SCHEME.value}, "
        f"out-of-range policy: {settings.SCORE_RANGE_POLICY.value}, "
        f"{len(settings.COURSE_UNITS)} course units"
    )
    yield
    logger.info("Shutting down")
    engine.dispose()


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.detail)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content=error_envelope(
            "VALIDATION_ERROR",
            "Request validation failed",
            {"errors": jsonable_encoder(exc.errors())},
        ),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
    error = InternalError("An internal server error occurred")
    return JSONResponse(status_code=error.status_code, content=error.detail)


def create_application() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description=DESCRIPTION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(RequestLoggingMiddleware)
    # Local UI runs on its own dev server
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.get("/health", tags=["Health"])
    async def health_check():
        return {
            "status": "healthy",
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION,
        }

    app.include_router(api_router, prefix=settings.API_V1_PREFIX)
    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="127.0.0.1",
        port=8000,
        reload=settings.DEBUG,
    )
