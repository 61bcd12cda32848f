"""Pydantic models for the backlog API and the SAST scanner."""

from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .errors import InvalidArgumentError


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Status(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"


PRIORITY_CHOICES = ", ".join(p.value for p in Priority)
STATUS_CHOICES = ", ".join(s.value for s in Status)

UPDATABLE_FIELDS = ("title", "priority", "status")


def normalize_title(value: Any, message: str) -> str:
    """Return the trimmed title or raise InvalidArgumentError with ``message``."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(message)
    return value.strip()


def normalize_priority(value: Any, message: str) -> Priority:
    """Match ``value`` case-insensitively against the priority values."""
    if isinstance(value, str):
        try:
            return Priority(value.lower())
        except ValueError:
            pass
    raise InvalidArgumentError(message)


def normalize_status(value: Any, message: str) -> Status:
    """Match ``value`` case-insensitively against the status values."""
    if isinstance(value, str):
        try:
            return Status(value.lower())
        except ValueError:
            pass
    raise InvalidArgumentError(message)


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BacklogItem(CamelModel):
    """A unit of planned work."""

    id: int = Field(description="Unique item id, never reused")
    title: str = Field(description="Trimmed, non-empty title")
    priority: Priority = Field(description="Priority: high, medium, low")
    status: Status = Field(default=Status.TODO, description="Status: todo, in-progress, done")
    created_at: datetime = Field(description="When the item was created")
    updated_at: Optional[datetime] = Field(default=None, description="When the item was last updated")


class ItemPatch(BaseModel):
    """Partial update for a backlog item; unset fields are left untouched."""

    title: Optional[str] = None
    priority: Optional[Priority] = None
    status: Optional[Status] = None

    @field_validator("title")
    @classmethod
    def _check_title(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return normalize_title(value, "Title must be a non-empty string")

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ItemPatch":
        """
        Validate a raw update mapping field by field.

        Raises InvalidArgumentError for unknown keys or invalid values. A key
        supplied with a null value counts as invalid.
        """
        invalid = [key for key in payload if key not in UPDATABLE_FIELDS]
        if invalid:
            raise InvalidArgumentError(f"Invalid update fields: {', '.join(invalid)}")

        fields: dict[str, Any] = {}
        if "title" in payload:
            fields["title"] = normalize_title(payload["title"], "Title must be a non-empty string")
        if "priority" in payload:
            fields["priority"] = normalize_priority(
                payload["priority"], f"Priority must be one of: {PRIORITY_CHOICES}"
            )
        if "status" in payload:
            fields["status"] = normalize_status(
                payload["status"], f"Status must be one of: {STATUS_CHOICES}"
            )
        return cls(**fields)

    def changes(self) -> dict[str, Any]:
        """Fields supplied by this patch."""
        return self.model_dump(exclude_none=True)


class BacklogStats(CamelModel):
    """Aggregate counts over the current items."""

    total: int = Field(default=0, description="Number of items")
    by_status: dict[str, int] = Field(
        default_factory=lambda: {s.value: 0 for s in Status},
        description="Item count per status",
    )
    by_priority: dict[str, int] = Field(
        default_factory=lambda: {p.value: 0 for p in Priority},
        description="Item count per priority",
    )


class CreateItemRequest(BaseModel):
    """Request body for creating a backlog item.

    Fields are loosely typed so the store reports its own validation messages.
    """

    title: Any = Field(default=None, description="Item title")
    priority: Any = Field(default=None, description="Priority: high, medium, low")


class ItemListResponse(BaseModel):
    items: list[BacklogItem] = Field(default_factory=list)


class DeleteResponse(BaseModel):
    message: str = Field(description="Confirmation message")
    item: BacklogItem = Field(description="The removed item")


class Severity(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    INFO = "INFO"


class Finding(BaseModel):
    """One rule match on one line of a scanned file."""

    file: str = Field(description="Path of the scanned file")
    line: int = Field(description="1-based line number")
    severity: Severity = Field(description="Severity level: HIGH, MEDIUM, LOW, INFO")
    message: str = Field(description="What the rule detected")
    recommendation: str = Field(description="Recommended action")
    code: str = Field(description="Offending line, trimmed")
