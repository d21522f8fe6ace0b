"""
Task Organizer

Pure functions over the in-memory task list: search filtering, sorting,
grouping into due-date buckets, and the per-day lookups used by the calendar
view. Calendar days are evaluated in the zone of the supplied ``now``, or
in local time when none is given.
"""

from collections import defaultdict
from datetime import date, datetime, timedelta, tzinfo
from typing import Iterable, NamedTuple, Optional

from models.task import Task, PRIORITIES


SORT_KEYS = ("dueDate", "priority", "createdAt")

MONDAY = 0
SUNDAY = 6

PRIORITY_RANK = {priority: rank for rank, priority in enumerate(PRIORITIES)}

OVERDUE = "overdue"
TODAY = "today"
TOMORROW = "tomorrow"
THIS_WEEK = "thisWeek"
LATER = "later"
NO_DATE = "noDate"

# Display order of the grouped view
GROUP_LABELS = {
    OVERDUE: "Overdue",
    TODAY: "Today",
    TOMORROW: "Tomorrow",
    THIS_WEEK: "This Week",
    LATER: "Later",
    NO_DATE: "No Due Date",
}


class TaskGroup(NamedTuple):
    key: str
    label: str
    tasks: list[Task]


def _matches(task: Task, term: str) -> bool:
    if term in task.title.lower():
        return True
    if task.description and term in task.description.lower():
        return True
    return any(term in tag.lower() for tag in task.tags)


def filter_tasks(tasks: Iterable[Task], search_term: str = "", show_completed: bool = False) -> list[Task]:
    """
    Keep tasks that match the search term and the completed toggle.

    The term is matched case-insensitively as a substring of the title, the
    description or any tag. An empty term matches everything.
    """
    term = search_term.lower()
    return [
        task for task in tasks
        if (show_completed or not task.completed) and (not term or _matches(task, term))
    ]


def sort_tasks(tasks: Iterable[Task], key: str = "dueDate") -> list[Task]:
    """
    Return a new list sorted by ``key``.

    - ``dueDate``: earliest first, tasks without a due date last.
    - ``priority``: high, medium, low.
    - ``createdAt``: newest first.

    The sort is stable, so ties keep their incoming order.
    """
    if key == "dueDate":
        return sorted(
            tasks,
            key=lambda t: (t.due_date is None, t.due_date.timestamp() if t.due_date else 0.0),
        )
    if key == "priority":
        return sorted(tasks, key=lambda t: PRIORITY_RANK[t.priority])
    if key == "createdAt":
        return sorted(tasks, key=lambda t: t.created_at, reverse=True)
    raise ValueError(f"Unknown sort key: {key!r} (expected one of {', '.join(SORT_KEYS)})")


def _local_now(now: Optional[datetime]) -> datetime:
    # Aware values keep their zone; naive ones are local wall-clock time.
    if now is None:
        return datetime.now().astimezone()
    if now.tzinfo is None:
        return now.astimezone()
    return now


def _local_date(moment: datetime, tz: tzinfo) -> date:
    return moment.astimezone(tz).date()


def start_of_week(day: date, week_starts_on: int = SUNDAY) -> date:
    return day - timedelta(days=(day.weekday() - week_starts_on) % 7)


def date_bucket(task: Task, now: Optional[datetime] = None, week_starts_on: int = SUNDAY) -> str:
    """Return the single due-date bucket key a task belongs to."""
    if task.due_date is None:
        return NO_DATE

    now = _local_now(now)
    today = now.date()
    due = _local_date(task.due_date, now.tzinfo)

    if due < today:
        return OVERDUE
    if due == today:
        return TODAY
    if due == today + timedelta(days=1):
        return TOMORROW
    if due < start_of_week(today, week_starts_on) + timedelta(days=7):
        return THIS_WEEK
    return LATER


def group_tasks(
    tasks: Iterable[Task],
    now: Optional[datetime] = None,
    week_starts_on: int = SUNDAY,
) -> list[TaskGroup]:
    """
    Partition tasks into due-date buckets.

    Groups come back in display order (overdue, today, tomorrow, this week,
    later, no due date) and empty groups are left out. Tasks keep their
    incoming order inside a group.
    """
    now = _local_now(now)
    buckets: dict[str, list[Task]] = {key: [] for key in GROUP_LABELS}
    for task in tasks:
        buckets[date_bucket(task, now, week_starts_on)].append(task)

    return [
        TaskGroup(key, label, buckets[key])
        for key, label in GROUP_LABELS.items()
        if buckets[key]
    ]


def count_remaining(tasks: Iterable[Task]) -> int:
    """Number of tasks not yet completed."""
    return sum(1 for task in tasks if not task.completed)


def tasks_by_date(tasks: Iterable[Task], tz: Optional[tzinfo] = None) -> dict[str, list[Task]]:
    """Map local calendar days (``YYYY-MM-DD``) to the tasks due on them."""
    tz = tz or _local_now(None).tzinfo
    by_date: dict[str, list[Task]] = defaultdict(list)
    for task in tasks:
        if task.due_date is not None:
            by_date[_local_date(task.due_date, tz).isoformat()].append(task)
    return dict(by_date)


def tasks_for_date(tasks: Iterable[Task], day: date, tz: Optional[tzinfo] = None) -> list[Task]:
    """Tasks due on one local calendar day."""
    return tasks_by_date(tasks, tz).get(day.isoformat(), [])


def date_priority(tasks: Iterable[Task]) -> Optional[str]:
    """Highest priority among the given tasks, or None when there are none."""
    ranks = [PRIORITY_RANK[task.priority] for task in tasks]
    if not ranks:
        return None
    return PRIORITIES[min(ranks)]
