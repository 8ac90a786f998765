"""
SnipShare — Routes Package
===========================

What:  HTTP route handlers that render pages and accept form posts.

Route Inventory:
    - accounts.py:  /login, /register, /createUser, /logout
    - snippets.py:  /, /profile, /new, /create, /{id}/edit, /{id}/update,
                    /{id}/remove, /{id}/delete, /{id}/snippetfullview
    - health.py:    /health

Design Principle:
    Routes stay THIN: read the form, call a service, render or redirect.
    Form errors raised by services are caught here and shown on the same
    form; everything else propagates to the global handlers in main.py.
"""

from typing import List

from snipshare.exceptions import DatabaseError, SnipShareError, ValidationError


def form_errors(exc: SnipShareError) -> List[str]:
    """Messages to list above a re-rendered form."""
    if isinstance(exc, ValidationError):
        return exc.errors
    return [exc.message]


def form_status(exc: SnipShareError) -> int:
    """400 for something the user can fix, 500 when the database failed."""
    return 500 if isinstance(exc, DatabaseError) else 400
