"""
SnipShare — Snippet Form and View Schemas
==========================================

What:  The snippet form contract and the shapes handed to templates.
Why:   Templates never see ORM objects. Route handlers pass plain view models,
       so a template cannot trigger a lazy load or leak an unexpected field.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

TITLE_MAX_LENGTH = 200


class SnippetForm(BaseModel):
    """Validated create/update input."""

    title: str = ""
    code_content: str = ""

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title is required.")
        if len(v) > TITLE_MAX_LENGTH:
            raise ValueError(f"Title must be at most {TITLE_MAX_LENGTH} characters.")
        return v

    @field_validator("code_content")
    @classmethod
    def validate_code_content(cls, v: str) -> str:
        # Leading indentation is meaningful in code; only reject blank input
        if not v.strip():
            raise ValueError("Code content is required.")
        return v.rstrip()


class SnippetView(BaseModel):
    """One snippet as rendered on the index, profile, and detail pages."""

    id: uuid.UUID
    title: str
    code_content: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class HealthResponse(BaseModel):
    """Health check response returned by GET /health."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
