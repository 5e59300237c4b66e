"""
FastAPI dependencies for authentication.

Provides ``db_session``, the workflow accessors and the cookie-based
``get_current_user_id`` / ``require_user`` dependencies used across all
dashboard routes. Everything is read from ``app.state``, which
``main.create_app`` populates.
"""

from __future__ import annotations

from typing import AsyncGenerator, Optional
from urllib.parse import quote

from fastapi import HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from auth.workflows import AuthenticationWorkflow, RegistrationWorkflow
from config.settings import Settings
from database.session import session_scope


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield a DB session for route handlers (commit on success)."""
    async with session_scope(request.app.state.session_factory) as session:
        yield session


def get_registration_workflow(request: Request) -> RegistrationWorkflow:
    return request.app.state.registration_workflow


def get_authentication_workflow(request: Request) -> AuthenticationWorkflow:
    return request.app.state.authentication_workflow


def get_current_user_id(request: Request) -> Optional[str]:
    """The signed-in user's id from the session cookie, or ``None``."""
    settings: Settings = request.app.state.settings
    token = request.cookies.get(settings.session_cookie_name, "")
    return request.app.state.session_issuer.verify(token)


def require_user(request: Request) -> str:
    """Return the signed-in user's id or redirect to the login page."""
    user_id = get_current_user_id(request)
    if user_id:
        return user_id
    settings: Settings = request.app.state.settings
    next_url = request.url.path
    if request.url.query:
        next_url += "?" + request.url.query
    raise HTTPException(
        status_code=status.HTTP_303_SEE_OTHER,
        headers={"Location": f"{settings.login_path}?callbackUrl={quote(next_url, safe='/')}"},
    )


def cookie_settings(settings: Settings) -> dict:
    return {
        "httponly": True,
        "samesite": "lax",
        "secure": settings.session_cookie_secure,
    }
