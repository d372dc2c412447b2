"""
Main application entry point.

This module initializes and configures the FastAPI application for the
account API (the producing side of the notification pipeline).
"""

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from config.settings import settings
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.presentation.dependencies import get_database_connection
from src.presentation.routes import router

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the database pool and make sure the schema exists; close it on shutdown."""
    logger.info("Starting account API...")

    db = get_database_connection()
    await db.connect()
    await db.init_schema()

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down account API...")
    await db.disconnect()
    logger.info("Application shutdown complete")


app = FastAPI(
    title="Account API",
    description="""
    Account registration, verification and login.

    Registration and login publish events consumed by the notification
    service, which records each attempt and sends the matching email.
    """,
    version=settings.app_version,
    debug=settings.debug,
    lifespan=lifespan,
)


# Decision: Return 400 Bad Request instead of 422 so every client error uses
# the same envelope
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    error_messages = [f"{err['loc'][-1]}: {err['msg']}" for err in errors]

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": {
                "error": "ValidationError",
                "message": "Request validation failed",
                "errors": error_messages,
            }
        },
    )


app.include_router(router)


@app.get("/", tags=["root"])
async def root() -> dict[str, str]:
    return {
        "service": "Account API",
        "version": settings.app_version,
        "status": "running",
        "docs": "/docs",
        "health": "/api/v1/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower(),
    )
