"""FastAPI application factory and main entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
import logging_config
from api import router as api_router
from db import close_db, init_db
from schemas.signup import (
    EMPTY_EMAIL_MESSAGE,
    INVALID_EMAIL_MESSAGE,
    ErrorKind,
    SignupFailureResponse,
)
from services.notifier import build_notifier

# Setup logging
logging_config.setup_logging(config.settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    # Startup
    await init_db()
    app.state.notifier = build_notifier()
    yield
    # Shutdown
    await app.state.notifier.aclose()
    await close_db()


# Create FastAPI app
app = FastAPI(
    title="Waitlist Backend",
    description="Waitlist signup and lead-magnet delivery API",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API router
app.include_router(api_router.api_router, prefix=config.settings.API_PREFIX)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Render request validation failures in the signup failure shape."""
    errors = exc.errors()
    message = "Invalid request"
    for error in errors:
        ctx_error = (error.get("ctx") or {}).get("error")
        if ctx_error is not None:
            message = str(ctx_error)
            break
        if "email" in error.get("loc", ()):
            message = EMPTY_EMAIL_MESSAGE if error.get("type") == "missing" else INVALID_EMAIL_MESSAGE
            break

    body = SignupFailureResponse(error_kind=ErrorKind.VALIDATION, message=message)
    content = body.model_dump(mode="json", by_alias=True)
    content["detail"] = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in errors
    ]
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=content)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Waitlist Backend API",
        "version": "0.1.0",
    }
