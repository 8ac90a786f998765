"""
SnipShare — Snippet Route Handlers
===================================

What:  The public snippet board, the profile page, and the owner-only
       edit/remove flows.
How:   Handlers fetch through SnippetService and render a template, or run a
       write and redirect with a flash message.

Routes:
    GET  /                          public index (all snippets, newest first)
    GET  /profile                   caller's own snippets           [login]
    GET  /new                       new snippet form                [login]
    POST /create                    create snippet                  [login]
    GET  /{snippet_id}/edit         edit form                       [owner]
    POST /{snippet_id}/update       update snippet                  [owner]
    GET  /{snippet_id}/remove       delete confirmation             [owner]
    POST /{snippet_id}/delete       delete snippet                  [owner]
    GET  /{snippet_id}/snippetfullview   full view (public)

    [login]: anonymous visitors get the 404 page
    [owner]: 404 without a session, 403 for someone else's snippet
"""

import logging

from fastapi import APIRouter, Depends, Form, Request
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.responses import Response

from snipshare.database import get_db_session
from snipshare.exceptions import DatabaseError, ValidationError
from snipshare.models.user import User
from snipshare.routes import form_errors, form_status
from snipshare.routes.dependencies import (
    OwnedSnippet,
    authorize_edit_and_delete,
    require_user,
)
from snipshare.services.snippet_service import snippet_service
from snipshare.templating import flash, redirect_to, render

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Snippets"])


# ── Public pages ──────────────────────────────────────────────────────────

@router.get("/")
async def index(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    """Every snippet, newest first. Code is shown as a truncated preview."""
    snippets = await snippet_service.list_snippets(db)
    return render(request, "snippets/index.html", {"snippets": snippets})


@router.get("/{snippet_id}/snippetfullview")
async def view(
    snippet_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    """One snippet with its complete code. Unknown ids render the 404 page."""
    snippet = await snippet_service.get_snippet(db, snippet_id)
    return render(request, "snippets/snippetfullview.html", {"snippet": snippet})


# ── Logged-in pages ───────────────────────────────────────────────────────

@router.get("/profile")
async def profile(
    request: Request,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    """Only the snippets in the caller's owned-id list."""
    snippets = await snippet_service.list_user_snippets(db, user)
    return render(request, "accounts/profile.html", {"snippets": snippets})


@router.get("/new")
async def new(
    request: Request,
    user: User = Depends(require_user),
) -> Response:
    """Empty snippet form."""
    return render(
        request,
        "snippets/new.html",
        {"values": {"title": "", "code_content": ""}},
    )


@router.post("/create")
async def create(
    request: Request,
    title: str = Form(""),
    code_content: str = Form(""),
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    """Save a snippet for the caller; on error re-show the form with their input."""
    try:
        await snippet_service.create_snippet(db, user, title, code_content)
    except (ValidationError, DatabaseError) as e:
        return render(
            request,
            "snippets/new.html",
            {
                "validation_errors": form_errors(e),
                "values": {"title": title, "code_content": code_content},
            },
            status_code=form_status(e),
        )

    flash(request, "success", "Saved successfully.")
    return redirect_to("/")


# ── Owner-only pages ──────────────────────────────────────────────────────

@router.get("/{snippet_id}/edit")
async def edit(
    request: Request,
    owned: OwnedSnippet = Depends(authorize_edit_and_delete),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    """Edit form pre-filled with the stored snippet."""
    snippet = await snippet_service.get_snippet(db, owned.snippet_id)
    return render(
        request,
        "snippets/edit.html",
        {
            "snippet": snippet,
            "values": {"title": snippet.title, "code_content": snippet.code_content},
        },
    )


@router.post("/{snippet_id}/update")
async def update(
    request: Request,
    title: str = Form(""),
    code_content: str = Form(""),
    owned: OwnedSnippet = Depends(authorize_edit_and_delete),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    """
    Apply the edit to the snippet named in the URL.

    The id comes from the authorized path parameter only, never from the
    form body, so the ownership check and the write always target the same row.
    """
    try:
        modified = await snippet_service.update_snippet(
            db, owned.snippet_id, title, code_content
        )
    except (ValidationError, DatabaseError) as e:
        snippet = await snippet_service.get_snippet(db, owned.snippet_id)
        return render(
            request,
            "snippets/edit.html",
            {
                "snippet": snippet,
                "validation_errors": form_errors(e),
                "values": {"title": title, "code_content": code_content},
            },
            status_code=form_status(e),
        )

    if modified:
        flash(request, "success", "The snippet was updated successfully.")
    else:
        flash(request, "danger", "Update failed. Try again.")
    return redirect_to("/")


@router.get("/{snippet_id}/remove")
async def remove(
    request: Request,
    owned: OwnedSnippet = Depends(authorize_edit_and_delete),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    """Delete confirmation page."""
    snippet = await snippet_service.get_snippet(db, owned.snippet_id)
    return render(request, "snippets/remove.html", {"snippet": snippet})


@router.post("/{snippet_id}/delete")
async def delete(
    request: Request,
    owned: OwnedSnippet = Depends(authorize_edit_and_delete),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    """Delete the snippet and drop its id from the caller's list."""
    try:
        await snippet_service.delete_snippet(db, owned.user, owned.snippet_id)
    except DatabaseError as e:
        snippet = await snippet_service.get_snippet(db, owned.snippet_id)
        return render(
            request,
            "snippets/remove.html",
            {"snippet": snippet, "validation_errors": [e.message]},
            status_code=500,
        )

    flash(request, "success", "The snippet was deleted successfully.")
    return redirect_to("/")
