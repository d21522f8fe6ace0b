"""
Session Context

Holds the current user and drives the anonymous / authenticating /
authenticated lifecycle. The context is an explicit object: create one and
pass it to whatever needs it.
"""

import logging
from enum import Enum
from typing import Callable, Optional

from client.api_client import APIError, NotifyDoAPI
from client.notifications import Notification, Notifier, log_notification
from client.storage import ClientStorage
from client.task_cache import TaskCache
from models.user import UserResponse

logger = logging.getLogger(__name__)

Navigator = Callable[[str], None]

HOME_PATH = "/"
LOGIN_PATH = "/login"


class SessionState(str, Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


def _log_navigation(path: str) -> None:
    logger.debug(f"[SESSION] navigate -> {path}")


class SessionContext:
    """Current-user state composed with the API client, task cache and routing."""

    def __init__(
        self,
        api: NotifyDoAPI,
        storage: ClientStorage,
        cache: Optional[TaskCache] = None,
        notify: Optional[Notifier] = None,
        navigate: Optional[Navigator] = None,
    ):
        self.api = api
        self.storage = storage
        self.notify = notify or log_notification
        self.navigate = navigate or _log_navigation
        self.cache = cache or TaskCache(api, self.notify)
        self.state = SessionState.ANONYMOUS
        self.user: Optional[UserResponse] = None
        self.api.on_unauthorized = self._on_unauthorized

    @property
    def is_authenticated(self) -> bool:
        return self.state is SessionState.AUTHENTICATED

    @property
    def is_loading(self) -> bool:
        return self.state is SessionState.AUTHENTICATING

    @property
    def token(self) -> Optional[str]:
        return self.storage.get_item(self.api.token_key)

    async def _enter_authenticated(self, user: UserResponse) -> None:
        self.user = user
        self.state = SessionState.AUTHENTICATED
        await self.cache.load()

    def _teardown(self) -> None:
        self.storage.remove_item(self.api.token_key)
        self.cache.clear()
        self.user = None
        self.state = SessionState.ANONYMOUS

    async def restore(self) -> bool:
        """Resume a session from a token left in client storage."""
        if not self.token:
            return False

        self.state = SessionState.AUTHENTICATING
        try:
            profile = await self.api.get_user_profile()
        except APIError as e:
            logger.info(f"[SESSION] Stored token rejected: {e.message}")
            self._teardown()
            return False

        await self._enter_authenticated(UserResponse.model_validate(profile))
        # The first task load may have been answered 401 and ended the session.
        return self.is_authenticated

    async def _authenticate(self, call, failure_title: str, default_message: str) -> Optional[dict]:
        """Run a register/login call; the response payload, or None if no session resulted."""
        self.state = SessionState.AUTHENTICATING
        try:
            data = await call()
        except APIError as e:
            self.state = SessionState.ANONYMOUS
            self.notify(Notification(failure_title, e.message or default_message, "destructive"))
            return None

        self.storage.set_item(self.api.token_key, data["token"])
        await self._enter_authenticated(UserResponse.model_validate(data))
        if not self.is_authenticated:
            self.notify(Notification(failure_title, "Your session has expired", "destructive"))
            return None
        return data

    async def register(self, name: str, email: str, password: str) -> bool:
        """Create an account and sign in with it."""
        data = await self._authenticate(
            lambda: self.api.register_user(name, email, password),
            "Registration failed",
            "Something went wrong",
        )
        if data is None:
            return False
        self.notify(Notification("Registration successful", "Welcome to NotifyDo!"))
        self.navigate(HOME_PATH)
        return True

    async def login(self, email: str, password: str) -> bool:
        """Sign in with email and password."""
        data = await self._authenticate(
            lambda: self.api.login_user(email, password),
            "Login failed",
            "Invalid credentials",
        )
        if data is None:
            return False
        self.notify(Notification("Login successful", f"Welcome back, {data['name']}!"))
        self.navigate(HOME_PATH)
        return True

    def logout(self) -> None:
        """Drop the token and cached tasks, then go to the login screen."""
        self._teardown()
        self.navigate(LOGIN_PATH)
        self.notify(Notification("Logged out", "You have been logged out successfully"))

    def _on_unauthorized(self) -> None:
        # Any 401 from an authenticated endpoint ends the session.
        if self.state is SessionState.ANONYMOUS and self.user is None:
            self.navigate(LOGIN_PATH)
            return
        logger.info("[SESSION] Session expired, logging out")
        self._teardown()
        self.navigate(LOGIN_PATH)
