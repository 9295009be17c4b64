"""Pydantic models shared across the API, the storage backends and the client.

Beginner terms used in this file:
- Model: a typed schema class used for validation/serialization.
- Allow-list: the request models only declare the fields a client may write;
  any other key in the request body is ignored.
- exclude_unset: dumps only the fields that were actually present in the input,
  which is how "update only what was supplied" is expressed.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator


def _require_text(value: str) -> str:
    if not value.strip():
        raise ValueError("title must not be blank")
    return value


# min_length rejects "", the validator rejects whitespace-only titles.
Title = Annotated[str, Field(min_length=1), AfterValidator(_require_text)]


class Task(BaseModel):
    """Canonical task record shape returned by API/storage."""

    id: int
    title: str
    description: str | None = None
    created_at: datetime
    updated_at: datetime


class TaskCreate(BaseModel):
    """Request body for POST /tasks."""

    model_config = ConfigDict(extra="ignore")

    title: Title
    description: str | None = None


class TaskUpdate(BaseModel):
    """Request body for PUT /tasks/{id}.

    Both fields are optional. Only the keys present in the request are applied,
    so ``{"description": "2%"}`` leaves the title untouched.
    """

    model_config = ConfigDict(extra="ignore")

    title: Title | None = None
    description: str | None = None

    @field_validator("title")
    @classmethod
    def title_not_null(cls, value: str | None) -> str:
        # title is not nullable on the record; an explicit null is invalid input.
        if value is None:
            raise ValueError("title cannot be null")
        return value

    def changes(self) -> dict[str, Any]:
        """Return the supplied writable fields only."""
        return self.model_dump(exclude_unset=True)
