"""
SnipShare — Snippet Service (CRUD Orchestrator)
================================================

What:  Create, read, update and delete snippets while keeping each owner's
       owned-id list in step with the snippets table.
Why:   A snippet and its entry in the owner's list must appear and disappear
       together; doing both inside one service call keeps them in the same
       transaction (committed by get_db_session).
Who:   Called by routes/snippets.py.

Write Flows:
    create:  INSERT snippet → flush (assigns id) → append id to owner's list
    update:  UPDATE snippets SET title, code_content WHERE id = :authorized id
    delete:  prune id from owner's list → DELETE snippet

    Authorization is NOT checked here. Update and delete are only reachable
    through the authorize_owner dependency, which has already verified the
    caller owns the id.
"""

import logging
import uuid
from typing import List, Union

from sqlalchemy import delete, desc, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from snipshare.exceptions import DatabaseError, NotFoundError
from snipshare.models.snippet import Snippet
from snipshare.models.user import User, UserSnippet
from snipshare.schemas import validate_form
from snipshare.schemas.snippet import SnippetForm, SnippetView

logger = logging.getLogger(__name__)


def parse_snippet_id(snippet_id: Union[str, uuid.UUID]) -> uuid.UUID:
    """URL ids are strings; anything that is not a UUID cannot exist."""
    if isinstance(snippet_id, uuid.UUID):
        return snippet_id
    try:
        return uuid.UUID(str(snippet_id))
    except ValueError:
        raise NotFoundError(resource="snippet", resource_id=str(snippet_id))


class SnippetService:
    """
    Business logic layer for snippet operations.

    Error Handling Strategy:
        Form problems raise ValidationError before any SQL runs.
        SQLAlchemy failures on writes roll the session back and raise
        DatabaseError with a generic message; reads raise DatabaseError too,
        so no driver text ever reaches a page.
    """

    async def list_snippets(self, db: AsyncSession) -> List[SnippetView]:
        """All snippets, newest first (public index)."""
        try:
            result = await db.execute(select(Snippet).order_by(desc(Snippet.created_at)))
            return [SnippetView.model_validate(s) for s in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Database error listing snippets: %s", e, exc_info=True)
            raise DatabaseError(
                message="Could not retrieve snippets. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def list_user_snippets(self, db: AsyncSession, user: User) -> List[SnippetView]:
        """Only the snippets whose ids are in the user's owned-id list (profile page)."""
        owned = user.snippet_ids
        if not owned:
            return []
        try:
            result = await db.execute(
                select(Snippet)
                .where(Snippet.id.in_(owned))
                .order_by(desc(Snippet.created_at))
            )
            return [SnippetView.model_validate(s) for s in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Database error listing snippets of %s: %s", user.username, e)
            raise DatabaseError(
                message="Could not retrieve your snippets. Please try again.",
                context={"user_id": str(user.id)},
            )

    async def get_snippet(self, db: AsyncSession, snippet_id: Union[str, uuid.UUID]) -> SnippetView:
        """
        Retrieve a single snippet by id.

        Raises:
            NotFoundError: malformed id or no such snippet (→ 404)
        """
        sid = parse_snippet_id(snippet_id)
        try:
            result = await db.execute(select(Snippet).where(Snippet.id == sid))
            snippet = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching snippet %s: %s", sid, e)
            raise DatabaseError(
                message="Could not retrieve the snippet. Please try again.",
                context={"snippet_id": str(sid)},
            )

        if snippet is None:
            raise NotFoundError(resource="snippet", resource_id=str(sid))
        return SnippetView.model_validate(snippet)

    async def create_snippet(
        self,
        db: AsyncSession,
        owner: User,
        title: str,
        code_content: str,
    ) -> SnippetView:
        """
        Persist a new snippet and append its id to the owner's list.

        Raises:
            ValidationError: blank title or code
            DatabaseError: insert failed (nothing is kept)
        """
        form = validate_form(SnippetForm, {"title": title, "code_content": code_content})

        try:
            snippet = Snippet(title=form.title, code_content=form.code_content)
            db.add(snippet)
            await db.flush()

            owner.snippet_links.append(UserSnippet(snippet_id=snippet.id))
            await db.flush()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error creating snippet for %s: %s", owner.username, e)
            raise DatabaseError(
                message="Could not save the snippet. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("User %s created snippet %s", owner.username, snippet.id)
        return SnippetView.model_validate(snippet)

    async def update_snippet(
        self,
        db: AsyncSession,
        snippet_id: Union[str, uuid.UUID],
        title: str,
        code_content: str,
    ) -> bool:
        """
        Replace title and code of the snippet.

        Returns:
            True when a row was modified, False when the id matched nothing.

        Raises:
            ValidationError: blank title or code
            DatabaseError: update failed
        """
        sid = parse_snippet_id(snippet_id)
        form = validate_form(SnippetForm, {"title": title, "code_content": code_content})

        try:
            result = await db.execute(
                update(Snippet)
                .where(Snippet.id == sid)
                .values(title=form.title, code_content=form.code_content)
                .execution_options(synchronize_session="evaluate")
            )
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error updating snippet %s: %s", sid, e)
            raise DatabaseError(
                message="Could not update the snippet. Please try again.",
                context={"snippet_id": str(sid)},
            )

        modified = result.rowcount == 1
        logger.info("Snippet %s update %s", sid, "applied" if modified else "matched nothing")
        return modified

    async def delete_snippet(
        self,
        db: AsyncSession,
        owner: User,
        snippet_id: Union[str, uuid.UUID],
    ) -> None:
        """
        Remove the snippet and prune its id from the owner's list.

        The list entry goes first: on databases that do not enforce the
        ON DELETE CASCADE (SQLite without PRAGMA foreign_keys) the row would
        otherwise be orphaned.

        Raises:
            NotFoundError: no such snippet
            DatabaseError: delete failed (neither side is changed)
        """
        sid = parse_snippet_id(snippet_id)

        try:
            for link in list(owner.snippet_links):
                if link.snippet_id == sid:
                    owner.snippet_links.remove(link)
            await db.flush()

            result = await db.execute(
                delete(Snippet)
                .where(Snippet.id == sid)
                .execution_options(synchronize_session="evaluate")
            )
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error deleting snippet %s: %s", sid, e)
            raise DatabaseError(
                message="Could not delete the snippet. Please try again.",
                context={"snippet_id": str(sid)},
            )

        if result.rowcount == 0:
            await db.rollback()
            raise NotFoundError(resource="snippet", resource_id=str(sid))

        logger.info("User %s deleted snippet %s", owner.username, sid)


snippet_service = SnippetService()
