"""
SnipShare — Account Service (Authentication & Authorization)
=============================================================

What:  Registration, credential checks, session binding, and snippet ownership checks.
Why:   Keeps every rule about "who may do what" out of the route handlers.
How:   Stateless methods that receive the request's AsyncSession.
Who:   Called by routes/accounts.py and by the ownership dependency in
       routes/dependencies.py.

Session Binding Flow:
    ┌──────────┐   authenticate()   ┌──────────┐   login()    ┌──────────────────┐
    │ username │──────────────────▶│   User   │─────────────▶│ user.session_id  │
    │ password │  bcrypt compare    └──────────┘  new token   │ = cookie's id    │
    └──────────┘                                              └──────────────────┘

    Every later request resolves the user with
        SELECT ... FROM users WHERE session_id = :cookie_session_id
    A second login overwrites session_id, so the older browser session no
    longer resolves to a user.

Authorization Rules (authorize_owner):
    no authenticated session          → NotFoundError  (404)
    session id matches no user        → NotFoundError  (404)
    snippet id not in owned-id list   → ForbiddenError (403)
    otherwise                         → permitted, returns the User
"""

import logging
import secrets
import uuid
from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from snipshare.exceptions import (
    DatabaseError,
    DuplicateUsernameError,
    ForbiddenError,
    InvalidCredentialsError,
    NotFoundError,
)
from snipshare.models.user import User
from snipshare.schemas import validate_form
from snipshare.schemas.account import LoginForm, RegisterForm
from snipshare.services.password_service import password_service

logger = logging.getLogger(__name__)


def new_session_id() -> str:
    """Random, URL-safe id identifying one logged-in browser session."""
    return secrets.token_urlsafe(32)


class AccountService:
    """
    Business logic for accounts.

    Error Handling Strategy:
        Input problems raise ValidationError / InvalidCredentialsError /
        DuplicateUsernameError, which the routes render back into the form.
        SQLAlchemy failures roll the session back and surface as DatabaseError.
    """

    async def register(self, db: AsyncSession, username: str, password: str) -> User:
        """
        Create a user with a hashed password.

        Raises:
            ValidationError: username/password break the length rules
            DuplicateUsernameError: username already taken
            DatabaseError: the insert failed for another reason
        """
        form = validate_form(RegisterForm, {"username": username, "password": password})

        try:
            existing = await self.get_user_by_username(db, form.username)
            if existing is not None:
                raise DuplicateUsernameError(context={"username": form.username})

            user = User(
                username=form.username,
                password=await password_service.hash_password(form.password),
                # Loaded-and-empty, so appending never triggers a lazy load
                snippet_links=[],
            )
            db.add(user)
            await db.flush()
        except DuplicateUsernameError:
            raise
        except IntegrityError:
            # Lost a race with a concurrent registration of the same name
            await db.rollback()
            raise DuplicateUsernameError(context={"username": form.username})
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error registering %s: %s", form.username, e)
            raise DatabaseError(context={"error_type": type(e).__name__})

        logger.info("Registered user %s (%s)", user.username, user.id)
        return user

    async def authenticate(self, db: AsyncSession, username: str, password: str) -> User:
        """
        Look up the user and compare the password with the stored hash.

        Raises:
            InvalidCredentialsError: unknown username or wrong password
        """
        form = validate_form(LoginForm, {"username": username, "password": password})

        try:
            user = await self.get_user_by_username(db, form.username)
        except SQLAlchemyError as e:
            logger.error("Database error during login lookup: %s", e)
            raise DatabaseError(context={"error_type": type(e).__name__})

        if user is None or not await password_service.verify_password(form.password, user.password):
            logger.info("Failed login attempt for username %r", form.username)
            raise InvalidCredentialsError()

        return user

    async def login(self, db: AsyncSession, user: User) -> str:
        """
        Bind a fresh session id to the user and return it.

        The caller stores the returned id in the (already regenerated)
        browser session and marks it authenticated.
        """
        session_id = new_session_id()
        try:
            user.session_id = session_id
            await db.flush()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error storing session for %s: %s", user.username, e)
            raise DatabaseError(context={"error_type": type(e).__name__})

        logger.info("User %s logged in", user.username)
        return session_id

    async def logout(self, db: AsyncSession, session_id: Optional[str]) -> None:
        """Detach the session id from its user, if any user still holds it."""
        if not session_id:
            return
        user = await self.get_user_by_session(db, session_id)
        if user is None:
            return
        user.session_id = None
        await db.flush()
        logger.info("User %s logged out", user.username)

    async def get_user_by_username(self, db: AsyncSession, username: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def get_user_by_session(self, db: AsyncSession, session_id: Optional[str]) -> Optional[User]:
        if not session_id:
            return None
        result = await db.execute(select(User).where(User.session_id == session_id))
        return result.scalar_one_or_none()

    async def authorize_owner(
        self,
        db: AsyncSession,
        session_id: Optional[str],
        snippet_id: Union[str, uuid.UUID],
    ) -> User:
        """
        Permit the request only if the session's user lists `snippet_id`.

        The id is compared in its string form, so a malformed id from the URL
        is simply "not owned" (403) rather than a parse error.

        Raises:
            NotFoundError: no authenticated session, or a stale one
            ForbiddenError: the user does not own the snippet
        """
        if not session_id:
            raise NotFoundError(resource="page")

        user = await self.get_user_by_session(db, session_id)
        if user is None:
            raise NotFoundError(resource="page", context={"reason": "stale_session"})

        wanted = str(snippet_id)
        if wanted not in {str(owned) for owned in user.snippet_ids}:
            logger.warning(
                "User %s denied access to snippet %s", user.username, wanted
            )
            raise ForbiddenError(context={"snippet_id": wanted, "user_id": str(user.id)})

        return user


account_service = AccountService()
