# upleer/main.py

import logging
import subprocess
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from upleer import models  # noqa: F401  registers every model on Base.metadata
from upleer.core.config import get_settings
from upleer.core.exceptions import (
    DatabaseError,
    EndpointTestError,
    InvalidStatusTransition,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from upleer.core.logging_config import configure_logging
from upleer.routes import account, admin, analytics, health, integrations, orders, products, sales, webhooks

configure_logging()
logger = logging.getLogger(__name__)


def run_schema_migrations() -> None:
    logger.info("Running database migrations...")
    result = subprocess.run(['alembic', 'upgrade', 'head'], capture_output=True, text=True)
    if result.returncode == 0:
        logger.info("Migrations completed successfully")
        if result.stdout:
            logger.debug(result.stdout)
    else:
        logger.error("Migration failed: %s", result.stderr)


async def run_startup_data_migrations() -> None:
    from upleer.database import async_session
    from upleer.services.data_migrations import run_data_migrations

    async with async_session() as db:
        results = await run_data_migrations(db)
    for outcome in results:
        logger.info("Startup data migration %s changed %s row(s)", outcome.name, outcome.changed)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()

    logger.info("Starting Upleer (environment=%s, debug=%s)", settings.ENVIRONMENT, settings.DEBUG)

    if settings.RUN_MIGRATIONS:
        try:
            run_schema_migrations()
        except OSError as e:
            logger.error("Migration error: %s", e)

    if settings.RUN_DATA_MIGRATIONS:
        await run_startup_data_migrations()

    yield


app = FastAPI(
    title="Upleer",
    debug=get_settings().DEBUG,
    lifespan=lifespan
)


# Add middleware to handle HTTPS behind proxy
@app.middleware("http")
async def proxy_headers_middleware(request: Request, call_next):
    forwarded_proto = request.headers.get("x-forwarded-proto")
    if forwarded_proto == "https":
        request.scope["scheme"] = "https"
    response = await call_next(request)
    return response


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(InvalidStatusTransition)
async def status_transition_handler(request: Request, exc: InvalidStatusTransition):
    return JSONResponse(
        status_code=409,
        content={"detail": str(exc), "currentStatus": exc.current, "requestedStatus": exc.requested},
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(PermissionDeniedError)
async def permission_denied_handler(request: Request, exc: PermissionDeniedError):
    return JSONResponse(status_code=403, content={"detail": "Forbidden"})


@app.exception_handler(EndpointTestError)
async def endpoint_test_error_handler(request: Request, exc: EndpointTestError):
    return JSONResponse(status_code=502, content={"success": False, "detail": str(exc)})


@app.exception_handler(DatabaseError)
@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: Exception):
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Webhooks and health checks are called without a session
app.include_router(webhooks.router)
app.include_router(orders.router)
app.include_router(health.router)

app.include_router(account.router)
app.include_router(products.router)
app.include_router(sales.router)
app.include_router(analytics.router)
app.include_router(admin.router)
app.include_router(integrations.router)
