"""
Task Models

Defines schemas for tasks stored in MongoDB and exchanged over the API.
JSON payloads use camelCase keys (``dueDate``, ``createdAt``); Python code
uses the snake_case field names.
"""

from typing import Optional, Literal
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


Priority = Literal["low", "medium", "high"]

PRIORITIES: tuple[str, ...] = ("high", "medium", "low")


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC and normalize aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class TaskSchema(BaseModel):
    """Base for task schemas: camelCase aliases on the wire, snake_case in code."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TaskCreate(TaskSchema):
    """Schema for creating a new task."""

    title: str = Field(..., description="Short title of the task")
    description: Optional[str] = Field(default=None, description="Longer free-form notes")
    due_date: Optional[datetime] = Field(default=None, description="Absolute due instant")
    priority: Priority = Field(default="medium", description="low, medium or high")
    tags: list[str] = Field(default_factory=list, description="Ordered list of tags")

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v):
        return as_utc(v)


class TaskUpdate(TaskSchema):
    """
    Schema for updating a task.

    Every field is optional. Only the fields actually present in the request
    are applied; see ``model_dump(exclude_unset=True)``.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    completed: Optional[bool] = None
    due_date: Optional[datetime] = None
    priority: Optional[Priority] = None
    tags: Optional[list[str]] = None

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v):
        return as_utc(v)


class Task(TaskSchema):
    """Schema for a task as returned by the API."""

    id: str = Field(..., description="Unique task ID")
    title: str
    description: Optional[str] = None
    completed: bool = False
    due_date: Optional[datetime] = None
    priority: Priority = "medium"
    tags: list[str] = Field(default_factory=list)
    user_id: str = Field(..., description="ID of the owning user")
    created_at: datetime
    updated_at: datetime

    @field_validator("due_date", "created_at", "updated_at")
    @classmethod
    def normalize_timestamps(cls, v):
        return as_utc(v)

    @classmethod
    def from_document(cls, doc: dict) -> "Task":
        """Build a Task from a raw ``tasks`` collection document."""
        return cls(
            id=str(doc["_id"]),
            title=doc["title"],
            description=doc.get("description"),
            completed=doc.get("completed", False),
            due_date=doc.get("due_date"),
            priority=doc.get("priority", "medium"),
            tags=doc.get("tags") or [],
            user_id=doc["user_id"],
            created_at=doc["created_at"],
            updated_at=doc.get("updated_at", doc["created_at"]),
        )


class MessageResponse(BaseModel):
    """Schema for simple confirmation responses."""

    message: str
