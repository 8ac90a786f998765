"""
SnipShare — Template Rendering Helpers
=======================================

What:  The Jinja2 environment, custom filters, flash messages, and `render()`.
Why:   Every page needs the same surrounding context (flash message, login
       state, username, base URL). Building it in one place keeps route
       handlers to "fetch data, pick a template".
How:   fastapi.templating.Jinja2Templates over snipshare/templates, with the
       filters registered on its environment.

Flash messages:
    A handler stores {"type": ..., "text": ...} under session["flash"] and
    redirects. The next render() pops it, so a flash survives exactly one
    round trip.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi.templating import Jinja2Templates
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from snipshare.config import settings

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

PREVIEW_LENGTH = 150

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


# ══════════════════════════════════════════════════════════════════════════
# Filters
# ══════════════════════════════════════════════════════════════════════════

def truncate_code(value: Optional[str], length: int = PREVIEW_LENGTH) -> str:
    """Index card preview: the first `length` characters, then `[...]` if cut."""
    if not value:
        return ""
    if len(value) < length:
        return value
    return value[:length] + "[...]"


_UNITS = (
    ("year", 60 * 60 * 24 * 365),
    ("month", 60 * 60 * 24 * 30),
    ("day", 60 * 60 * 24),
    ("hour", 60 * 60),
    ("minute", 60),
)


def time_ago(value: Optional[datetime], now: Optional[datetime] = None) -> str:
    """
    Relative time like "5 minutes ago".

    Naive datetimes are taken as UTC (SQLite returns them without tzinfo).
    """
    if value is None:
        return ""
    now = now or datetime.now(timezone.utc)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)

    seconds = int((now - value).total_seconds())
    if seconds < 45:
        return "a few seconds ago"
    for name, size in _UNITS:
        count = seconds // size
        if count >= 1:
            if count == 1:
                article = "an" if name == "hour" else "a"
                return f"{article} {name} ago"
            return f"{count} {name}s ago"
    return "a minute ago"


templates.env.filters["truncate_code"] = truncate_code
templates.env.filters["time_ago"] = time_ago


# ══════════════════════════════════════════════════════════════════════════
# Session helpers
# ══════════════════════════════════════════════════════════════════════════

def _session(request: Request) -> Dict[str, Any]:
    # Pages rendered by outer middleware (rate limit) run before
    # SessionMiddleware has populated the scope
    if "session" not in request.scope:
        return {}
    return request.session


def flash(request: Request, kind: str, text: str) -> None:
    """Queue a one-shot message for the next rendered page."""
    request.session["flash"] = {"type": kind, "text": text}


def pop_flash(request: Request) -> Optional[Dict[str, str]]:
    return _session(request).pop("flash", None)


def is_authenticated(request: Request) -> bool:
    return bool(_session(request).get("is_auth"))


def render(
    request: Request,
    name: str,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 200,
    headers: Optional[Dict[str, str]] = None,
) -> Response:
    """
    Render `name` with the shared page context.

    Shared keys:
        flash       — popped from the session (one round trip only)
        is_auth     — drives the logged-in header variant
        username    — shown in the logged-in header
        base_url    — prefix for links when mounted below /
    """
    page: Dict[str, Any] = {
        "flash": pop_flash(request),
        "is_auth": is_authenticated(request),
        "username": _session(request).get("username"),
        "base_url": settings.base_url,
    }
    page.update(context or {})
    return templates.TemplateResponse(
        request,
        name,
        page,
        status_code=status_code,
        headers=headers,
    )


def url_for_path(path: str) -> str:
    """Prefix an app path with the configured base URL."""
    return settings.base_url.rstrip("/") + path


def redirect_to(path: str) -> RedirectResponse:
    """303 See Other, so the browser follows a form POST with a GET."""
    return RedirectResponse(url_for_path(path), status_code=303)


templates.env.globals["url"] = url_for_path
