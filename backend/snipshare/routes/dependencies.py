"""
SnipShare — Route Dependencies (Session Lookup & Ownership Checks)
===================================================================

What:  FastAPI dependencies that resolve the logged-in user and enforce
       snippet ownership before a handler runs.
Why:   The edit/update/remove/delete routes share one rule; declaring it as
       a dependency means a handler cannot forget to apply it.

Request flow for owner routes:
    request → session lookup → authorize_owner → handler → render/redirect
                                   │
                                   ├── NotFoundError  → 404 page
                                   └── ForbiddenError → 403 page
"""

import logging
from dataclasses import dataclass

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from snipshare.database import get_db_session
from snipshare.exceptions import NotFoundError
from snipshare.models.user import User
from snipshare.services.account_service import account_service
from snipshare.services.snippet_service import parse_snippet_id
from snipshare.templating import is_authenticated

logger = logging.getLogger(__name__)


@dataclass
class OwnedSnippet:
    """An ownership check that passed: the caller and the snippet id they own."""

    user: User
    snippet_id: str


def authenticated_session_id(request: Request):
    """The session id of an authenticated browser session, or None."""
    if not is_authenticated(request):
        return None
    return request.session.get("session_id")


async def require_user(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> User:
    """
    The logged-in user, or 404.

    A session that is marked authenticated but whose id no longer matches a
    user (logged in elsewhere, or logged out) is cleared on the way out.
    """
    session_id = authenticated_session_id(request)
    if session_id is None:
        raise NotFoundError(resource="page")

    user = await account_service.get_user_by_session(db, session_id)
    if user is None:
        logger.info("Clearing stale session %s...", session_id[:8])
        request.session.clear()
        raise NotFoundError(resource="page", context={"reason": "stale_session"})

    request.session["username"] = user.username
    return user


async def authorize_edit_and_delete(
    snippet_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> OwnedSnippet:
    """
    Ownership gate for /{snippet_id}/edit, /update, /remove and /delete.

    Raises:
        NotFoundError: no authenticated session (→ 404)
        ForbiddenError: the snippet id is not in the caller's list (→ 403)
    """
    session_id = authenticated_session_id(request)
    try:
        user = await account_service.authorize_owner(db, session_id, snippet_id)
    except NotFoundError:
        if session_id is not None:
            request.session.clear()
        raise

    # Owned ids are always valid UUIDs; normalise the URL spelling
    return OwnedSnippet(user=user, snippet_id=str(parse_snippet_id(snippet_id)))
