"""View-model behind the task list screen: search, completed toggle, sort and view mode."""

from datetime import datetime
from typing import Literal, Optional

from client.organizer import SORT_KEYS, TaskGroup, count_remaining, filter_tasks, group_tasks, sort_tasks
from client.task_cache import TaskCache
from models.task import Task

ViewMode = Literal["list", "grouped"]


class TaskListView:
    """Screen state layered over a TaskCache. Filters never touch the cache itself."""

    def __init__(self, cache: TaskCache):
        self.cache = cache
        self.search_term = ""
        self.show_completed = False
        self.sort_by = "dueDate"
        self.view_mode: ViewMode = "list"

    def set_sort(self, key: str) -> None:
        """Select the sort key; one of ``SORT_KEYS``."""
        if key not in SORT_KEYS:
            raise ValueError(f"Unknown sort key: {key!r}")
        self.sort_by = key

    def toggle_show_completed(self) -> None:
        """Show or hide completed tasks."""
        self.show_completed = not self.show_completed

    def _filtered(self) -> list[Task]:
        return filter_tasks(self.cache.tasks, self.search_term, self.show_completed)

    def visible_tasks(self) -> list[Task]:
        """Filtered, then sorted by the selected key."""
        return sort_tasks(self._filtered(), self.sort_by)

    def groups(self, now: Optional[datetime] = None) -> list[TaskGroup]:
        """Filtered, then sorted and bucketed by due date."""
        return group_tasks(self.visible_tasks(), now)

    @property
    def remaining_count(self) -> int:
        # Counted over the whole cache, regardless of filters.
        return count_remaining(self.cache.tasks)
