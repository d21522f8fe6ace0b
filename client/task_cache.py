"""
Client Task Cache

In-memory list of the signed-in user's tasks. The cache is only ever changed
from a server response; a failed call leaves it untouched and raises a
destructive notification instead.
"""

import logging
from typing import Optional

from client.api_client import APIError, NotifyDoAPI
from client.notifications import Notification, Notifier, log_notification
from models.task import Task, TaskCreate, TaskUpdate

logger = logging.getLogger(__name__)


class TaskCache:
    """The authenticated user's tasks, kept convergent with the server."""

    def __init__(self, api: NotifyDoAPI, notify: Optional[Notifier] = None):
        self.api = api
        self.notify = notify or log_notification
        self.tasks: list[Task] = []
        self.loaded = False

    def __len__(self) -> int:
        return len(self.tasks)

    def __iter__(self):
        return iter(self.tasks)

    def get(self, task_id: str) -> Optional[Task]:
        """Cached task with this id, if any."""
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def clear(self) -> None:
        """Forget all tasks, e.g. on logout."""
        self.tasks = []
        self.loaded = False

    def _fail(self, title: str, error: APIError) -> None:
        logger.debug(f"[CLIENT] {title}: {error.message}")
        self.notify(Notification(title, error.message or "Please try again later", "destructive"))

    def _replace(self, task: Task) -> None:
        # Last response wins; a task deleted meanwhile stays deleted.
        for index, existing in enumerate(self.tasks):
            if existing.id == task.id:
                self.tasks[index] = task
                return

    async def load(self) -> bool:
        """Replace the cache with the server's task list."""
        try:
            tasks = await self.api.fetch_tasks()
        except APIError as e:
            self._fail("Error fetching tasks", e)
            return False
        self.tasks = tasks
        self.loaded = True
        return True

    async def create(self, data: TaskCreate) -> Optional[Task]:
        """Create on the server and prepend the confirmed task."""
        try:
            task = await self.api.create_task(data)
        except APIError as e:
            self._fail("Error creating task", e)
            return None
        self.tasks.insert(0, task)
        self.notify(Notification("Task created", "Your task has been created successfully"))
        return task

    async def update(self, task_id: str, data: TaskUpdate) -> Optional[Task]:
        """Update on the server and swap in the returned task."""
        try:
            task = await self.api.update_task(task_id, data)
        except APIError as e:
            self._fail("Error updating task", e)
            return None
        self._replace(task)
        self.notify(Notification("Task updated", "Your task has been updated successfully"))
        return task

    async def toggle_complete(self, task_id: str, completed: bool) -> Optional[Task]:
        """Flip completion on the server; no success toast."""
        try:
            task = await self.api.toggle_task_completion(task_id, completed)
        except APIError as e:
            self._fail("Error updating task", e)
            return None
        self._replace(task)
        return task

    async def delete(self, task_id: str) -> bool:
        """Delete on the server, then drop it from the cache."""
        try:
            await self.api.delete_task(task_id)
        except APIError as e:
            self._fail("Error deleting task", e)
            return False
        self.tasks = [task for task in self.tasks if task.id != task_id]
        self.notify(Notification("Task deleted", "Your task has been deleted"))
        return True
