"""Transient user notifications ("toasts") raised by the client state layer."""

import logging
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    title: str
    description: str = ""
    variant: str = "default"  # "default" or "destructive"

    @property
    def is_error(self) -> bool:
        return self.variant == "destructive"


Notifier = Callable[[Notification], None]


def log_notification(notification: Notification) -> None:
    """Default notifier: write the notification to the log."""
    level = logging.WARNING if notification.is_error else logging.INFO
    logger.log(level, f"[CLIENT] {notification.title}: {notification.description}")


class NotificationLog:
    """Notifier that keeps every notification it receives, newest last."""

    def __init__(self):
        self.items: list[Notification] = []

    def __call__(self, notification: Notification) -> None:
        self.items.append(notification)

    @property
    def last(self) -> Notification:
        return self.items[-1]
