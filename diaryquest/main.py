import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from diaryquest import __version__
from diaryquest.api import entries, health, skips, stats
from diaryquest.core.config import settings, validate_config
from diaryquest.core.errors import (
    AppError,
    app_error_handler,
    http_error_handler,
    request_validation_handler,
    unhandled_exception_handler,
)
from diaryquest.core.logging import configure_logging
from diaryquest.core.middleware.request_id import RequestIdMiddleware
from diaryquest.features.activity.service import get_activity_service

configure_logging(settings.ENV)
validate_config(strict=getattr(settings, "CONFIG_STRICT", False))


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("diaryquest")
    logger.info("Starting diaryquest backend...")
    app.state.startup_time = time.time()
    # Cold load: derive streaks and badges once before serving
    get_activity_service().recompute()
    try:
        yield
    finally:
        logging.getLogger("diaryquest").info("Stopping diaryquest backend...")


app = FastAPI(title="diaryquest - Backend", version=__version__, lifespan=lifespan)

# Middlewares
app.add_middleware(RequestIdMiddleware)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(HTTPException, http_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# CORS (adjust origins in production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(entries.router)
app.include_router(skips.router)
app.include_router(stats.router)
app.include_router(health.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("diaryquest.main:app", host="0.0.0.0", port=8000, reload=settings.ENV == "development")
