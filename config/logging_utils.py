"""
Logging Utilities

Application-wide logging setup plus prefix-tagged helpers. Debug output is
gated on the DEBUG setting.
"""

import logging

from config.settings import settings


_LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"

_app_logger = logging.getLogger("notifydo")


def setup_logging() -> None:
    """
    Configure the root logger once for the running process.

    Level is DEBUG when ``settings.DEBUG`` is set, INFO otherwise. Calling it
    again is a no-op if handlers are already installed.
    """
    root = logging.getLogger()
    level = logging.DEBUG if settings.DEBUG else logging.INFO
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt="%H:%M:%S"))
        root.addHandler(handler)
    root.setLevel(level)


def _tag(message: str, prefix: str) -> str:
    return f"[{prefix}] {message}" if prefix else message


def log_debug(message: str, *args, prefix: str = "") -> None:
    """
    Log a debug message only if DEBUG is set to True in settings.

    Args:
        message: The message to log
        *args: Additional arguments to format into the message
        prefix: Optional prefix for categorizing logs (e.g., "AUTH", "TASKS")
    """
    if not settings.DEBUG:
        return

    formatted_message = _tag(message, prefix)
    if args:
        formatted_message = formatted_message % args

    _app_logger.debug(formatted_message)


def log_success(message: str, prefix: str = "") -> None:
    """
    Log a success message with a checkmark.

    Args:
        message: The success message
        prefix: Optional prefix for categorizing logs
    """
    _app_logger.info(_tag(f"✓ {message}", prefix))


def log_error(message: str, prefix: str = "") -> None:
    """
    Log an error message with an X mark.

    Args:
        message: The error message
        prefix: Optional prefix for categorizing logs
    """
    _app_logger.error(_tag(f"✗ {message}", prefix))
