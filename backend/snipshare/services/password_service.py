"""
SnipShare — Password Hashing Service
=====================================

What:  bcrypt hashing and verification for account passwords.
Why:   Plaintext passwords are never stored; only the salted bcrypt hash is.
How:   bcrypt.hashpw / bcrypt.checkpw, run in a worker thread so the event loop
       keeps serving other requests during the (deliberately slow) hash.

bcrypt input limit:
    bcrypt only reads the first 72 bytes of its input, and current bcrypt
    releases raise ValueError for longer inputs instead of truncating
    silently. Passwords may be up to 100 characters (and multi-byte), so the
    UTF-8 encoding is truncated to 72 bytes on both the hash and the verify
    path. Both sides truncate identically, so verification stays consistent.
"""

import asyncio
import logging
from typing import Optional

import bcrypt

from snipshare.config import settings

logger = logging.getLogger(__name__)

BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


class PasswordService:
    """Stateless wrapper around bcrypt with a configurable work factor."""

    def __init__(self, rounds: Optional[int] = None):
        self.rounds = rounds or settings.bcrypt_rounds

    def hash_password_sync(self, password: str) -> str:
        if not password:
            raise ValueError("Password cannot be empty")
        hashed = bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=self.rounds))
        return hashed.decode("utf-8")

    def verify_password_sync(self, password: str, hashed_password: str) -> bool:
        """
        Compare a plaintext password with a stored hash.

        A malformed stored hash counts as a mismatch (logged), never as an
        error page: the user simply cannot log in with that record.
        """
        if not password or not hashed_password:
            return False
        try:
            return bcrypt.checkpw(_encode(password), hashed_password.encode("utf-8"))
        except ValueError as e:
            logger.warning("Stored password hash could not be checked: %s", e)
            return False

    async def hash_password(self, password: str) -> str:
        return await asyncio.to_thread(self.hash_password_sync, password)

    async def verify_password(self, password: str, hashed_password: str) -> bool:
        return await asyncio.to_thread(self.verify_password_sync, password, hashed_password)


password_service = PasswordService()
