"""
SnipShare — ORM Models
=======================

Importing this package registers every table with `Base.metadata`, which is
what Alembic autogenerate and the test fixtures rely on.
"""

from snipshare.models.snippet import Snippet
from snipshare.models.user import User, UserSnippet

__all__ = ["Snippet", "User", "UserSnippet"]
