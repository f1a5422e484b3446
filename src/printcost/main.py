import json
import logging
import os
import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from src.printcost.api.api_v1.api import api_router
from src.printcost.core.config import settings
from src.printcost.core.error_handlers import (
    domain_exception_handler,
    general_exception_handler,
    sqlalchemy_exception_handler,
    validation_exception_handler,
)
from src.printcost.core.exceptions import PrintCostError
from src.printcost.core.permissions import build_permission_service
from src.printcost.db.session import AsyncSessionLocal
from src.printcost.models.base import utcnow

logger = logging.getLogger(__name__)

SENSITIVE_FIELDS = {"password", "access_token"}


def mask_authorization(headers: dict) -> dict:
    """Show only the start of a bearer token."""
    auth_header = headers.get("authorization")
    if auth_header and auth_header.startswith("Bearer "):
        headers["authorization"] = auth_header[:16] + "..." if len(auth_header) > 16 else auth_header
    return headers


def mask_body(body: bytes) -> str:
    try:
        payload = json.loads(body.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError):
        # Form bodies (the token endpoint) may carry a password
        return f"<{len(body)} bytes>"
    if isinstance(payload, dict):
        payload = {k: ("***" if k in SENSITIVE_FIELDS else v) for k, v in payload.items()}
    text_body = json.dumps(payload)
    if len(text_body) > 1000:
        text_body = text_body[:1000] + "... (truncated)"
    return text_body


async def ping_database() -> None:
    async with AsyncSessionLocal() as session:
        await session.execute(text("SELECT 1"))


def resolve_cors_origins() -> list[str]:
    if os.getenv("ENV", "development") == "development":
        logger.info("Development mode: any origin may call the API")
        return ["*"]
    return list(settings.BACKEND_CORS_ORIGINS)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Check the database on startup. Outside production a failed check is only logged."""
    logger.info(f"Starting {settings.PROJECT_NAME} (ENV={os.getenv('ENV', 'not set')})")
    try:
        await ping_database()
        logger.info("Database reachable")
    except SQLAlchemyError as e:
        logger.error(f"Database unreachable at startup: {e}")
        if os.getenv("ENV") == "production":
            raise

    yield

    logger.info(f"Stopping {settings.PROJECT_NAME}")


def create_app() -> FastAPI:
    """Build the API app with its permission cache, middleware and routers."""
    app = FastAPI(
        lifespan=lifespan,
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
    )

    # Process-wide permission cache, shared by every request of this app
    app.state.permission_service = build_permission_service()

    @app.get("/healthz")
    async def health_check():
        try:
            await ping_database()
        except SQLAlchemyError as e:
            logger.error(f"Health check could not reach the database: {e}")
            raise HTTPException(status_code=503, detail="Service unhealthy")

        return {
            "status": "healthy",
            "timestamp": utcnow().isoformat(),
            "service": settings.PROJECT_NAME,
        }

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()

        logger.info(f"{request.method} {request.url.path} query={dict(request.query_params)}")
        logger.debug(f"Headers: {mask_authorization(dict(request.headers))}")

        if request.method in ("POST", "PUT") and logger.isEnabledFor(logging.DEBUG):
            body = await request.body()
            if body:
                logger.debug(f"Request body: {mask_body(body)}")

        response = await call_next(request)

        elapsed = time.perf_counter() - started
        logger.info(f"{request.method} {request.url.path} -> {response.status_code} in {elapsed:.4f}s")
        return response

    # Domain errors first, then the catch-alls
    app.add_exception_handler(PrintCostError, domain_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    cors_origins = resolve_cors_origins()
    logger.info("CORS origins: %s", cors_origins)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=600,
    )

    app.include_router(api_router, prefix=settings.API_V1_STR)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="localhost", port=settings.SERVER_PORT)
