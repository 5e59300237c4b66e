"""
Auth pages — signup, login, logout.

Server-rendered forms; every POST runs one workflow and either
re-renders the form with its outcome or redirects.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse

from api.rendering import render
from auth.dependencies import (
    cookie_settings,
    get_authentication_workflow,
    get_current_user_id,
    get_registration_workflow,
    get_settings,
)
from auth.workflows import AuthenticationWorkflow, RegistrationWorkflow
from config.settings import Settings
from utils.schemas import (
    Authenticated,
    FieldErrors,
    FormMessage,
    Redirect,
    SystemFailure,
)
from utils.validators import safe_redirect

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


# ── Signup ─────────────────────────────────────────────────────────────


@router.get("/signup")
async def signup_page(request: Request):
    return render(request, "signup.html", {"errors": {}, "message": None, "values": {}})


@router.post("/signup")
async def signup(
    request: Request,
    workflow: RegistrationWorkflow = Depends(get_registration_workflow),
):
    """Register a new user."""
    form = await request.form()
    raw = {key: value for key, value in form.items() if isinstance(value, str)}
    result = await workflow.execute(raw)

    if isinstance(result, Redirect):
        return RedirectResponse(url=result.redirect, status_code=status.HTTP_303_SEE_OTHER)

    # Passwords are never echoed back into the page.
    values = {"name": raw.get("name", ""), "email": raw.get("email", "")}
    if isinstance(result, FieldErrors):
        ctx = {"errors": result.errors, "message": result.message}
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(result, FormMessage):
        ctx = {"errors": {}, "message": result.message}
        code = status.HTTP_409_CONFLICT
    else:
        ctx = {"errors": {}, "message": result.message}
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    return render(request, "signup.html", {**ctx, "values": values}, status_code=code)


# ── Login / logout ─────────────────────────────────────────────────────


@router.get("/login")
async def login_page(
    request: Request,
    callbackUrl: str = "",
    settings: Settings = Depends(get_settings),
):
    redirect_to = safe_redirect(callbackUrl, settings.home_path)
    if get_current_user_id(request):
        return RedirectResponse(url=redirect_to, status_code=status.HTTP_303_SEE_OTHER)
    return render(request, "login.html", {"redirect_to": redirect_to, "message": None, "email": ""})


@router.post("/login")
async def login(
    request: Request,
    workflow: AuthenticationWorkflow = Depends(get_authentication_workflow),
    settings: Settings = Depends(get_settings),
):
    """Login with email + password."""
    form = await request.form()
    raw = {key: value for key, value in form.items() if isinstance(value, str)}
    redirect_to = raw.pop("redirectTo", None)
    result = await workflow.execute(raw, redirect_to=redirect_to)

    if isinstance(result, Authenticated):
        response = RedirectResponse(url=result.redirect, status_code=status.HTTP_303_SEE_OTHER)
        response.set_cookie(
            settings.session_cookie_name,
            result.session_token,
            max_age=settings.session_max_age_seconds,
            **cookie_settings(settings),
        )
        return response

    code = (
        status.HTTP_503_SERVICE_UNAVAILABLE
        if isinstance(result, SystemFailure)
        else status.HTTP_401_UNAUTHORIZED
    )
    ctx = {
        "redirect_to": safe_redirect(redirect_to, settings.home_path),
        "message": result.message,
        "email": raw.get("email", ""),
    }
    return render(request, "login.html", ctx, status_code=code)


@router.post("/logout")
async def logout(request: Request, settings: Settings = Depends(get_settings)):
    logger.info("Logout: %s", getattr(request.state, "user_id", None))
    response = RedirectResponse(url=settings.login_path, status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(settings.session_cookie_name)
    return response
