"""
SnipShare — Account Form Schemas
=================================

Rules:
    username: trimmed, at least 5 characters, at most 100
    password: at least 10 and at most 100 characters (checked on the
              plaintext, before hashing)

Confirmation matching is NOT a schema rule. A mismatch is handled by the
register route with a flash + redirect, and never reaches the service.
"""

from pydantic import BaseModel, field_validator

USERNAME_MIN_LENGTH = 5
USERNAME_MAX_LENGTH = 100
PASSWORD_MIN_LENGTH = 10
PASSWORD_MAX_LENGTH = 100


class RegisterForm(BaseModel):
    """Validated registration input."""

    username: str = ""
    password: str = ""

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username required.")
        if len(v) < USERNAME_MIN_LENGTH:
            raise ValueError(f"Username must be at least {USERNAME_MIN_LENGTH} characters.")
        if len(v) > USERNAME_MAX_LENGTH:
            raise ValueError(f"Username must be at most {USERNAME_MAX_LENGTH} characters.")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not v:
            raise ValueError("Password required.")
        if len(v) < PASSWORD_MIN_LENGTH:
            raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters.")
        if len(v) > PASSWORD_MAX_LENGTH:
            raise ValueError(f"Password must be at most {PASSWORD_MAX_LENGTH} characters.")
        return v


class LoginForm(BaseModel):
    """Login input. Only presence is checked; anything else is a failed login."""

    username: str = ""
    password: str = ""

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        return v.strip()
