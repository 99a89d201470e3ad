"""
Data models for the document store.

`SavedObjectRecord` is the SQLModel table backing every saved object type.
The pydantic models are what the store hands back to callers.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional
import json
import uuid

from pydantic import BaseModel, Field as PydanticField
from sqlmodel import Field, SQLModel


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Table
# =============================================================================


class SavedObjectRecord(SQLModel, table=True):
    """One stored document of any saved object type.

    Attributes are kept as a JSON string so filters can address nested
    paths (e.g. ``$.metadata.benchmark.id``) with ``json_extract``.
    """

    __tablename__ = "saved_objects"

    # Insertion order, used for stable paging
    pk: Optional[int] = Field(default=None, primary_key=True)
    id: str = Field(default_factory=generate_uuid, index=True, unique=True)
    type: str = Field(..., index=True, description="Saved object type (e.g. csp-rule)")
    attributes_json: str = Field(..., description="Document attributes as JSON")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


# =============================================================================
# Wire models
# =============================================================================


class SavedObject(BaseModel):
    """A stored document as returned by the store."""

    id: str
    type: str
    attributes: dict[str, Any] = PydanticField(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_record(cls, record: SavedObjectRecord) -> SavedObject:
        return cls(
            id=record.id,
            type=record.type,
            attributes=json.loads(record.attributes_json),
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class BulkCreateObject(BaseModel):
    """A document to be created; the store assigns its id."""

    type: str
    attributes: dict[str, Any]


class BulkCreateItemError(BaseModel):
    """Failure to create one item of a bulk create request."""

    index: int = PydanticField(..., description="Position in the request")
    type: str
    error: str


class BulkCreateResult(BaseModel):
    """Outcome of a bulk create: created documents plus per-item errors."""

    saved_objects: list[SavedObject] = PydanticField(default_factory=list)
    errors: list[BulkCreateItemError] = PydanticField(default_factory=list)

    @property
    def failed(self) -> bool:
        return bool(self.errors)


class FindResult(BaseModel):
    """One page of a find query."""

    saved_objects: list[SavedObject]
    total: int
    page: int
    per_page: int
