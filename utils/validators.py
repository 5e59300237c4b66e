"""
Form validation helpers shared by the auth and dashboard forms.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional

from pydantic import ValidationError

REQUIRED_MESSAGE = "This field is required."


def flatten_errors(
    exc: ValidationError,
    messages: Optional[Mapping[str, str]] = None,
) -> Dict[str, List[str]]:
    """
    Collapse a pydantic ``ValidationError`` into ``{field: [message, …]}``.

    Keys are the submitted field names (aliases). A validator may attach
    several messages to one error through ``ctx["reasons"]``; ``messages``
    overrides whatever pydantic said for a field with a single fixed text.
    Duplicates are dropped, order is preserved.
    """
    fields: Dict[str, List[str]] = {}
    for error in exc.errors():
        loc = error.get("loc") or ("__root__",)
        field = str(loc[0])
        ctx = error.get("ctx") or {}

        if ctx.get("reasons"):
            found = [str(r) for r in ctx["reasons"]]
        elif messages and field in messages:
            found = [messages[field]]
        elif error.get("type") == "missing":
            found = [REQUIRED_MESSAGE]
        else:
            found = [error.get("msg", "Invalid value.")]

        bucket = fields.setdefault(field, [])
        for msg in found:
            if msg not in bucket:
                bucket.append(msg)
    return fields


def safe_redirect(target: Optional[str], default: str) -> str:
    """Return ``target`` only if it is a local absolute path, else ``default``."""
    value = (target or "").strip()
    if not value.startswith("/") or value.startswith("//") or "\\" in value:
        return default
    return value
