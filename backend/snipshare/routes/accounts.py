"""
SnipShare — Account Route Handlers
===================================

What:  Login, registration and logout pages.
How:   Thin handlers: read the form, call AccountService, then either
       redirect with a flash message or re-render the form with errors.

Routes:
    GET  /login        login form (logged-in users go to /profile)
    POST /login        check credentials, regenerate session, bind session id
    GET  /register     registration form (logged-in users go to /profile)
    POST /createUser   create the account
    POST /logout       detach session id from the user, destroy the session

Session regeneration:
    A successful login clears every key of the pre-login session before
    writing the new session id, so nothing set while anonymous (and no
    fixated id) survives into the authenticated session.
"""

import logging

from fastapi import APIRouter, Depends, Form, Request
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.responses import Response

from snipshare.database import get_db_session
from snipshare.exceptions import (
    DatabaseError,
    DuplicateUsernameError,
    InvalidCredentialsError,
    ValidationError,
)
from snipshare.routes import form_errors, form_status
from snipshare.routes.dependencies import authenticated_session_id
from snipshare.services.account_service import account_service
from snipshare.templating import flash, is_authenticated, redirect_to, render

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Accounts"])


@router.get("/login")
async def login(request: Request) -> Response:
    """Render the login form."""
    if is_authenticated(request):
        return redirect_to("/profile")
    return render(request, "accounts/login.html")


@router.post("/login")
async def login_post(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    """
    Authenticate and start an authenticated session.

    On failure the session is left exactly as it was: no `is_auth`, no
    session id. The form is re-rendered with the username filled in.
    """
    try:
        user = await account_service.authenticate(db, username, password)
        request.session.clear()
        session_id = await account_service.login(db, user)
    except (InvalidCredentialsError, ValidationError, DatabaseError) as e:
        return render(
            request,
            "accounts/login.html",
            {"validation_errors": form_errors(e), "values": {"username": username}},
            status_code=form_status(e),
        )

    request.session["session_id"] = session_id
    request.session["is_auth"] = True
    request.session["username"] = user.username
    return redirect_to("/profile")


@router.get("/register")
async def register(request: Request) -> Response:
    """Render the registration form."""
    if is_authenticated(request):
        return redirect_to("/profile")
    return render(request, "accounts/register.html")


@router.post("/createUser")
async def register_user(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    confirm_password: str = Form(""),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    """
    Register a user.

    Mismatched passwords never reach the service: flash + redirect back to
    the form, and no user row is written.
    """
    if password != confirm_password:
        flash(request, "danger", "Passwords do not match.")
        return redirect_to("/register")

    try:
        await account_service.register(db, username, password)
    except (ValidationError, DuplicateUsernameError, DatabaseError) as e:
        return render(
            request,
            "accounts/register.html",
            {"validation_errors": form_errors(e), "values": {"username": username}},
            status_code=form_status(e),
        )

    flash(request, "success", "Registration successful, please login.")
    return redirect_to("/login")


@router.post("/logout")
async def logout(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    """Destroy the session and go back to the public index."""
    await account_service.logout(db, authenticated_session_id(request))
    request.session.clear()
    return redirect_to("/")
