"""Main module of the FastAPI application.

This module sets up the FastAPI application, owns the lifecycle of its long-lived
collaborators, and registers the middleware and exception handlers.
"""

import os
import subprocess
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from memberhub.api.auth import build_identity_provider
from memberhub.api.middleware import (
    add_request_id,
    email_encryption_exception_handler,
    exception_logging_middleware,
    forbidden_exception_handler,
    invalid_argument_exception_handler,
    log_requests,
    memberhub_exception_handler,
    not_found_exception_handler,
    unauthorized_exception_handler,
    validation_exception_handler,
)
from memberhub.api.router import TrailingSlashRouter
from memberhub.api.v1.api import api_router
from memberhub.core.config import settings
from memberhub.core.email_encryption import EmailEncryption
from memberhub.core.exceptions import (
    EmailEncryptionError,
    ForbiddenAccessException,
    InvalidArgumentException,
    MemberHubException,
    ResourceNotFoundException,
    UnauthorizedAccessException,
)
from memberhub.core.invitation_service import InvitationService
from memberhub.core.logging import logger
from memberhub.core.organization_service import OrganizationService
from memberhub.core.user_service import UserService
from memberhub.db.init_db import init_db
from memberhub.db.session import build_engine, build_session_factory, get_db_context


def _run_alembic_migrations() -> None:
    logger.info("Running alembic migrations...")
    env = os.environ.copy()
    backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    env["PYTHONPATH"] = backend_dir
    subprocess.run(["alembic", "upgrade", "head"], check=True, cwd=backend_dir, env=env)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the engine, codec, identity provider and services; dispose them on shutdown."""
    if settings.RUN_ALEMBIC_MIGRATIONS:
        _run_alembic_migrations()

    engine = build_engine(str(settings.SQLALCHEMY_ASYNC_DATABASE_URI))
    session_factory = build_session_factory(engine)
    email_encryption = EmailEncryption(settings.EMAIL_ENCRYPTION_KEY)

    app.state.session_factory = session_factory
    app.state.email_encryption = email_encryption
    app.state.identity_provider = build_identity_provider(settings)
    app.state.invitation_service = InvitationService(
        email_encryption, expiry_days=settings.INVITATION_EXPIRY_DAYS
    )
    app.state.organization_service = OrganizationService()
    app.state.user_service = UserService(email_encryption)

    try:
        async with get_db_context(session_factory) as db:
            await init_db(db, email_encryption=email_encryption)
        yield
    finally:
        await engine.dispose()
        email_encryption.close()


# Create FastAPI app with our custom router and disable FastAPI's built-in redirects
app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url="/openapi.json",
    lifespan=lifespan,
    router=TrailingSlashRouter(),
    redirect_slashes=False,
)

app.include_router(api_router)

app.middleware("http")(add_request_id)
app.middleware("http")(log_requests)
app.middleware("http")(exception_logging_middleware)

app.exception_handler(RequestValidationError)(validation_exception_handler)
app.exception_handler(ValidationError)(validation_exception_handler)
app.exception_handler(UnauthorizedAccessException)(unauthorized_exception_handler)
app.exception_handler(ForbiddenAccessException)(forbidden_exception_handler)
app.exception_handler(InvalidArgumentException)(invalid_argument_exception_handler)
app.exception_handler(ResourceNotFoundException)(not_found_exception_handler)
app.exception_handler(EmailEncryptionError)(email_encryption_exception_handler)
app.exception_handler(MemberHubException)(memberhub_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.ENVIRONMENT == "local" else settings.cors_origins,
    allow_credentials=settings.ENVIRONMENT != "local",
    allow_methods=["*"],
    allow_headers=["*"],
)
