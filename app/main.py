"""
Loan Amortization API - FastAPI application.
User registration/authentication, profile lookup and loan amortization
calculation with persisted schedules.
"""
from typing import Callable, Awaitable, Dict, Any, List
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
import time
from uuid import uuid4

from app.core.config import settings
from app.core.database import init_db
from app.core.exceptions import AppError
from app.core.logger import logger
from app.auth.router import router as users_router, session_router
from app.loans.router import router as loans_router
from app.loans.schemas import REQUIRED_FIELD_MESSAGES


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle management (startup/shutdown hooks)."""
    logger.info(f"Initializing {settings.APP_NAME} v{settings.VERSION}")
    init_db()
    logger.info("Database initialized")

    yield

    logger.info("Shutting down application")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    description="User accounts and loan amortization schedules.",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_correlation_id(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    """
    Middleware for distributed tracing.
    Injects a unique Correlation ID into the request context and propagates it to the response headers.
    """
    correlation_id = request.headers.get("X-Correlation-ID", str(uuid4()))
    request.state.correlation_id = correlation_id

    start_time = time.time()

    logger.info(
        f"Request: {request.method} {request.url.path}",
        extra={"correlation_id": correlation_id}
    )

    response = await call_next(request)

    process_time = time.time() - start_time
    response.headers["X-Correlation-ID"] = correlation_id
    response.headers["X-Process-Time"] = str(process_time)

    logger.info(
        f"Response: {response.status_code} | {process_time:.3f}s",
        extra={"correlation_id": correlation_id}
    )

    return response


app.include_router(users_router, prefix="/api/users", tags=["Users"])
app.include_router(session_router, prefix="/api/auth", tags=["Auth"])
app.include_router(loans_router, prefix="/api/loans", tags=["Loans"])


@app.get("/", tags=["Health"])
def root() -> Dict[str, str]:
    return {"message": "Route restricted to /api"}


@app.get("/health", tags=["Health"])
def health_check() -> Dict[str, str]:
    """
    Liveness probe endpoint for orchestration systems.
    """
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.VERSION
    }


def _correlation_id(request: Request) -> str:
    return getattr(request.state, "correlation_id", "N/A")


def format_validation_errors(errors: List[Dict[str, Any]]) -> List[str]:
    """Flattens pydantic errors into the human-readable message list returned to clients."""
    messages: List[str] = []
    for error in errors:
        # loc is ("body", field, ...) for request bodies
        field = next((str(part) for part in error.get("loc", ())[1:] if isinstance(part, str)), None)

        if error.get("type") == "missing" and field in REQUIRED_FIELD_MESSAGES:
            message = REQUIRED_FIELD_MESSAGES[field]
        elif error.get("type") == "missing" and field:
            message = f"{field.replace('_', ' ').capitalize()} required"
        else:
            message = error.get("msg", "Invalid value").removeprefix("Value error, ")
            if field and error.get("type") != "value_error":
                message = f"{field}: {message}"

        if message not in messages:
            messages.append(message)
    return messages


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    messages = format_validation_errors(list(exc.errors()))
    logger.info(
        f"Validation failed: {messages}",
        extra={"correlation_id": _correlation_id(request)}
    )
    return JSONResponse(status_code=400, content=messages)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    correlation_id = _correlation_id(request)
    logger.info(
        f"{type(exc).__name__}: {exc.status_code} | {exc}",
        extra={"correlation_id": correlation_id}
    )
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc), "correlation_id": correlation_id},
        headers=headers
    )


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    """Constraint violations surface with the underlying driver message."""
    correlation_id = _correlation_id(request)
    logger.warning(
        f"Integrity error: {exc.orig}",
        extra={"correlation_id": correlation_id}
    )
    return JSONResponse(
        status_code=409,
        content={"error": str(exc.orig), "correlation_id": correlation_id}
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    correlation_id = _correlation_id(request)

    logger.info(
        f"HTTPException: {exc.status_code}",
        extra={"correlation_id": correlation_id}
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "correlation_id": correlation_id}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception barrier.
    Captures unhandled exceptions, logs stack traces with Correlation IDs,
    and returns a sanitized 500 Internal Server Error response.
    """
    correlation_id = _correlation_id(request)

    logger.error(
        f"Unhandled exception: {str(exc)}",
        exc_info=True,
        extra={"correlation_id": correlation_id}
    )

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal Server Error",
            "correlation_id": correlation_id
        }
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",  # nosec
        port=8000,
        reload=settings.DEBUG
    )
