"""
SnipShare — Application Package Initializer
============================================

What: Marks the `snipshare` directory as a Python package.
Why:  Enables module imports like `from snipshare.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    SnipShare is a server-rendered code snippet board with a layered layout:

    ┌─────────────────────────────────────┐
    │   Routes (HTML pages, form posts)   │  ← HTTP + session concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Auth, ownership, snippet CRUD
    ├─────────────────────────────────────┤
    │   Models & Schemas (Data + Forms)   │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Templates (Jinja2) sit beside the routes; they only ever receive plain
    view dictionaries built by the route handlers.
"""

__version__ = "1.0.0"
