"""
Task API Router

CRUD endpoints for the authenticated user's tasks. The owner always comes
from the bearer token, never from the request body.
"""

from fastapi import APIRouter, Depends, status

from api.dependencies import get_current_user
from models.user import UserResponse
from models.task import Task, TaskCreate, TaskUpdate, MessageResponse
from services import task_service


router = APIRouter(
    prefix="/api/tasks",
    tags=["Tasks"],
    dependencies=[Depends(get_current_user)],
)


@router.get("", response_model=list[Task])
async def list_tasks(current_user: UserResponse = Depends(get_current_user)):
    """List all tasks for the current user."""
    return await task_service.list_tasks(current_user.id)


@router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
async def create_task(
    data: TaskCreate,
    current_user: UserResponse = Depends(get_current_user)
):
    """Create a new task."""
    return await task_service.create_task(current_user.id, data)


@router.get("/{task_id}", response_model=Task)
async def get_task(
    task_id: str,
    current_user: UserResponse = Depends(get_current_user)
):
    """Get a task by ID."""
    return await task_service.get_task(current_user.id, task_id)


@router.put("/{task_id}", response_model=Task)
async def update_task(
    task_id: str,
    data: TaskUpdate,
    current_user: UserResponse = Depends(get_current_user)
):
    """Update any subset of a task's fields."""
    return await task_service.update_task(current_user.id, task_id, data)


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: str,
    current_user: UserResponse = Depends(get_current_user)
):
    """Delete a task."""
    return await task_service.delete_task(current_user.id, task_id)
