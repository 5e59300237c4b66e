"""
Invoice dashboard — application entry point.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import RedirectResponse

from api.middleware import register_middleware
from api.rendering import render
from api.routes import router as dashboard_router
from auth.password import PasswordHasher
from auth.repository import SqlUserRepository
from auth.routes import router as auth_router
from auth.session import SessionIssuer
from auth.workflows import AuthenticationWorkflow, RegistrationWorkflow
from config.settings import DEFAULT_SESSION_SECRET, Settings, config
from database.exceptions import StorageUnavailableError
from database.session import build_engine, build_session_factory, create_tables

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("sqlalchemy.engine", "asyncio", "multipart", "httpx"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or config

    app = FastAPI(
        title="Invoice Dashboard",
        version="1.0.0",
        description="Invoices and customers behind email/password login.",
    )

    # Collaborators: one set per app, shared by every request.
    engine = build_engine(settings)
    session_factory = build_session_factory(engine)
    users = SqlUserRepository(session_factory)
    hasher = PasswordHasher(rounds=settings.salt_rounds)
    issuer = SessionIssuer(settings.session_secret, settings.session_max_age_seconds)

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.session_issuer = issuer
    app.state.registration_workflow = RegistrationWorkflow(
        users, hasher, login_path=settings.login_path,
    )
    app.state.authentication_workflow = AuthenticationWorkflow(
        users, hasher, issuer, home_path=settings.home_path,
    )

    register_middleware(app)

    # Routes
    app.include_router(auth_router)
    app.include_router(dashboard_router)

    @app.get("/", include_in_schema=False)
    async def index():
        return RedirectResponse(url=settings.home_path, status_code=status.HTTP_303_SEE_OTHER)

    @app.exception_handler(StorageUnavailableError)
    async def storage_unavailable(request: Request, exc: StorageUnavailableError):
        logger.error(
            "Storage unavailable on %s %s",
            request.method, request.url.path,
            exc_info=exc,
        )
        return render(
            request,
            "error.html",
            {"message": "The service is temporarily unavailable. Please try again later."},
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    @app.on_event("startup")
    async def on_startup():
        if settings.session_secret == DEFAULT_SESSION_SECRET:
            logger.warning(
                "SESSION_SECRET not set — session cookies are signed with the default key."
            )
        if settings.create_tables:
            logger.info("Creating missing tables…")
            await create_tables(engine)
        logger.info("Application ready to accept requests.")

    @app.on_event("shutdown")
    async def on_shutdown():
        await engine.dispose()

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
