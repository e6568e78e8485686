# student_ncr/main.py - FastAPI application
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
import traceback
import time
import uvicorn

from student_ncr.core.config import settings, configure_logging
from student_ncr.core.errors import DataSourceUnavailable
from student_ncr.core.db import get_engine, health_check as db_health_check, db_manager
from student_ncr.models import Base
from student_ncr.api.routers import classifications

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Starting Student NCR Classification API...")
    logger.info(f"Environment: {settings.ENV}")
    logger.info(f"Database: {settings.database_location}")

    engine = get_engine()

    # The registrar owns these tables; only create them for local development
    if settings.is_development:
        logger.info("Creating database tables...")
        try:
            Base.metadata.create_all(bind=engine)
            logger.info("Database tables created successfully")
        except Exception as e:
            logger.error(f"Error creating tables: {e}")

    yield

    db_manager.close()
    logger.info("Shutting down Student NCR Classification API...")


app = FastAPI(
    title=settings.API_TITLE,
    description="Classifies students as New, Continue or Return for an academic term",
    version=settings.API_VERSION,
    docs_url="/docs" if settings.is_development else None,
    lifespan=lifespan,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log each request with status and processing time"""
    start_time = time.time()
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"Error processing {request.method} {request.url.path}: {str(e)}")
        raise
    process_time = time.time() - start_time
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({process_time:.3f}s)")
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept", "Origin"],
    max_age=3600,
)


@app.exception_handler(DataSourceUnavailable)
async def data_source_unavailable_handler(request: Request, exc: DataSourceUnavailable):
    """Database unreachable before a route could run, e.g. while opening the session"""
    logger.error(f"Data source unavailable on {request.method} {request.url.path}: {str(exc)}")
    return JSONResponse(
        status_code=503,
        content={"detail": "Enrollment data is temporarily unavailable"}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions"""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {str(exc)}")
    logger.error(traceback.format_exc())

    if settings.is_development:
        return JSONResponse(
            status_code=500,
            content={
                "detail": str(exc),
                "traceback": traceback.format_exc()
            }
        )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


@app.get("/health")
def health():
    database = db_health_check()
    return {
        "status": "healthy" if database["status"] == "healthy" else "degraded",
        "environment": settings.ENV,
        "version": settings.API_VERSION,
        "database": database,
    }


app.include_router(classifications.router, prefix="/api/classifications", tags=["Classifications"])


@app.get("/")
async def root():
    return {
        "message": settings.API_TITLE,
        "version": settings.API_VERSION,
        "docs_url": "/docs" if settings.is_development else "Documentation disabled in production",
    }


def run():
    """Serve the API with uvicorn on API_HOST:API_PORT"""
    uvicorn.run(
        app,
        host=settings.API_HOST,
        port=settings.API_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
