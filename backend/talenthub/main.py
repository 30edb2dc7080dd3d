import asyncio
import logging
import os
import signal
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from talenthub.config import get_settings
from talenthub.database import Database
from talenthub.errors import AppError, ValidationFailed
from talenthub.routers import health, auth, candidates

logger = logging.getLogger(__name__)

settings = get_settings()

# Location prefixes FastAPI puts in front of a validation error's field path
_REQUEST_LOCATIONS = {"body", "path", "query", "header", "cookie"}


def _terminate_on_unhandled_error(loop: asyncio.AbstractEventLoop, context: dict) -> None:
    """Stop the process when a background task fails with nobody to handle it."""
    exc = context.get("exception")
    if exc is None or isinstance(exc, ConnectionError):
        loop.default_exception_handler(context)
        return

    logger.critical(
        "Unhandled asynchronous error, shutting down: %s",
        context.get("message", "no message"),
        exc_info=exc,
    )
    os.kill(os.getpid(), signal.SIGTERM)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # The store must be reachable with its schema in place before serving requests
    database = Database.from_settings(settings)
    try:
        await database.connect()
    except Exception:
        logger.exception("Failed to initialize database")
        await database.dispose()
        raise
    app.state.database = database

    loop = asyncio.get_running_loop()
    previous_handler = loop.get_exception_handler()
    loop.set_exception_handler(_terminate_on_unhandled_error)
    logger.info("TalentHub API ready (environment: %s)", settings.environment)
    try:
        yield
    finally:
        loop.set_exception_handler(previous_handler)
        await database.dispose()


app = FastAPI(
    title="TalentHub",
    description="Candidate management API",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.client_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, prefix="/api", tags=["health"])
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(candidates.router, prefix="/api/candidates", tags=["candidates"])


# Error handlers
def _field_errors(exc: RequestValidationError) -> list[dict]:
    """Flatten FastAPI validation errors into ``{field, message}`` pairs."""
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in _REQUEST_LOCATIONS:
            loc = loc[1:]
        field = ".".join(loc) or "body"

        if error.get("type") == "missing":
            message = f"{field.replace('_', ' ').capitalize()} is required"
        else:
            message = error.get("msg", "Invalid value").removeprefix("Value error, ")
        errors.append({"field": field, "message": message})
    return errors


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report request validation failures as 400 with per-field errors."""
    error = ValidationFailed(_field_errors(exc))
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render framework HTTP errors (unknown route, wrong method) in the error envelope."""
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        message = "Route not found"
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": "error", "message": message},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions with a generic 500; details go to the log only."""
    logger.exception(
        "Unhandled exception: %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"status": "error", "message": "Internal server error"},
    )
