"""
Server-side page rendering (Jinja2).
"""

from __future__ import annotations

import pathlib
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.templating import Jinja2Templates

TEMPLATES_DIR = pathlib.Path(__file__).resolve().parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def _cents(value: Optional[int]) -> str:
    return f"${(value or 0) / 100:,.2f}"


templates.env.filters["cents"] = _cents


def render(
    request: Request,
    template_name: str,
    ctx: Optional[Dict[str, Any]] = None,
    status_code: int = 200,
):
    """TemplateResponse wrapper injecting the signed-in user and nav paths."""
    settings = request.app.state.settings
    base_ctx = {
        "current_user_id": getattr(request.state, "user_id", None),
        "login_path": settings.login_path,
        "signup_path": settings.signup_path,
        "home_path": settings.home_path,
    }
    return templates.TemplateResponse(
        request,
        template_name,
        {**base_ctx, **(ctx or {})},
        status_code=status_code,
    )
