"""
Task Service

CRUD operations over the ``tasks`` collection, scoped to the authenticated
user. Every single-task operation checks that the task exists before it
checks ownership.
"""

from datetime import datetime, timezone

from bson import ObjectId

from config.database import database
from config.logging_utils import log_debug, log_success
from models.task import Task, TaskCreate, TaskUpdate, MessageResponse
from services.errors import AuthzError, NotFoundError, ValidationError, store_errors


# Fields that may be explicitly cleared with null on update
NULLABLE_FIELDS = {"description", "due_date"}


def utcnow() -> datetime:
    """Current UTC time at the millisecond precision BSON stores."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def get_tasks_collection():
    """Get the tasks collection."""
    return database.get_collection("tasks")


async def create_task_indexes():
    """Create indexes for the tasks collection."""
    collection = get_tasks_collection()
    await collection.create_index([("user_id", 1), ("created_at", 1)])


def _require_title(title) -> str:
    if title is None or not title.strip():
        raise ValidationError("Title is required")
    return title.strip()


async def _find_owned(user_id: str, task_id: str) -> dict:
    """Load a task document, checking existence first and ownership second."""
    task = None
    if ObjectId.is_valid(task_id):
        task = await get_tasks_collection().find_one({"_id": ObjectId(task_id)})

    if task is None:
        raise NotFoundError("Task not found")

    if task["user_id"] != user_id:
        log_debug(f"user_id={user_id} denied access to task_id={task_id}", prefix="TASKS")
        raise AuthzError("Not authorized")

    return task


@store_errors
async def list_tasks(user_id: str) -> list[Task]:
    """List every task owned by the user, in insertion order."""
    cursor = get_tasks_collection().find({"user_id": user_id})
    return [Task.from_document(doc) async for doc in cursor]


@store_errors
async def create_task(user_id: str, data: TaskCreate) -> Task:
    """Create a task owned by ``user_id``."""
    now = utcnow()
    task_doc = {
        "user_id": user_id,
        "title": _require_title(data.title),
        "description": data.description,
        "completed": False,
        "due_date": data.due_date,
        "priority": data.priority,
        "tags": list(data.tags),
        "created_at": now,
        "updated_at": now,
    }

    result = await get_tasks_collection().insert_one(task_doc)
    task_doc["_id"] = result.inserted_id
    log_success(f"Created task_id={result.inserted_id} for user_id={user_id}", prefix="TASKS")
    return Task.from_document(task_doc)


@store_errors
async def get_task(user_id: str, task_id: str) -> Task:
    """Get a single task by ID."""
    return Task.from_document(await _find_owned(user_id, task_id))


@store_errors
async def update_task(user_id: str, task_id: str, data: TaskUpdate) -> Task:
    """
    Apply a partial update to a task.

    Only fields present in the request are written, so falsy values such as
    ``completed=False`` or an empty description are honored.
    """
    task = await _find_owned(user_id, task_id)

    changes = data.model_dump(exclude_unset=True)
    for field, value in changes.items():
        if value is None and field not in NULLABLE_FIELDS:
            raise ValidationError(f"{field} cannot be null")
    if "title" in changes:
        changes["title"] = _require_title(changes["title"])

    changes["updated_at"] = utcnow()
    await get_tasks_collection().update_one({"_id": task["_id"]}, {"$set": changes})

    task.update(changes)
    log_debug(f"Updated task_id={task_id} fields={sorted(changes)}", prefix="TASKS")
    return Task.from_document(task)


@store_errors
async def delete_task(user_id: str, task_id: str) -> MessageResponse:
    """Permanently delete a task."""
    task = await _find_owned(user_id, task_id)
    await get_tasks_collection().delete_one({"_id": task["_id"]})
    log_success(f"Deleted task_id={task_id}", prefix="TASKS")
    return MessageResponse(message="Task removed")
