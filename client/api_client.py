"""
NotifyDo API Client

Async HTTP client used by the frontend state layer. The session token is
read from durable client storage before every request and cleared whenever an
authenticated endpoint answers 401.
"""

import inspect
import logging
from typing import Awaitable, Callable, Optional, Union

import httpx

from config.settings import settings
from client.storage import ClientStorage
from models.task import Task, TaskCreate, TaskUpdate

logger = logging.getLogger(__name__)

UnauthorizedCallback = Callable[[], Union[Awaitable[None], None]]


class APIError(Exception):
    """Raised when an API call fails or cannot reach the server."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class NotifyDoAPI:
    """Client for the NotifyDo REST API."""

    def __init__(
        self,
        storage: ClientStorage,
        base_url: str = settings.API_URL,
        on_unauthorized: Optional[UnauthorizedCallback] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        token_key: str = settings.CLIENT_TOKEN_KEY,
    ):
        self.storage = storage
        self.token_key = token_key
        self.on_unauthorized = on_unauthorized
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()

    async def __aenter__(self) -> "NotifyDoAPI":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _auth_headers(self) -> dict[str, str]:
        token = self.storage.get_item(self.token_key)
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    async def _handle_unauthorized(self) -> None:
        self.storage.remove_item(self.token_key)
        if self.on_unauthorized is not None:
            result = self.on_unauthorized()
            if inspect.isawaitable(result):
                await result

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[dict] = None,
        authenticated: bool = True,
    ):
        try:
            response = await self._client.request(
                method, path, json=json, headers=self._auth_headers()
            )
        except httpx.RequestError as e:
            logger.warning(f"[CLIENT] {method} {path} failed: {e}")
            raise APIError(f"Network error: {e}") from e

        if response.is_success:
            return response.json()

        if response.status_code == 401 and authenticated:
            await self._handle_unauthorized()

        message = "Something went wrong"
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("detail"):
            message = str(body["detail"])
        raise APIError(message, status_code=response.status_code)

    # Auth API calls

    async def register_user(self, name: str, email: str, password: str) -> dict:
        """Create an account; returns the user plus a bearer token."""
        return await self._request(
            "POST", "/users",
            json={"name": name, "email": email, "password": password},
            authenticated=False,
        )

    async def login_user(self, email: str, password: str) -> dict:
        """Exchange credentials for the user plus a bearer token."""
        return await self._request(
            "POST", "/users/login",
            json={"email": email, "password": password},
            authenticated=False,
        )

    async def get_user_profile(self) -> dict:
        """Fetch the signed-in user."""
        return await self._request("GET", "/users/profile")

    # Task API calls

    async def fetch_tasks(self) -> list[Task]:
        """All tasks owned by the signed-in user."""
        data = await self._request("GET", "/tasks")
        return [Task.model_validate(item) for item in data]

    async def create_task(self, task_data: TaskCreate) -> Task:
        """Create a task; unset optional fields are left to server defaults."""
        payload = task_data.model_dump(mode="json", by_alias=True, exclude_none=True)
        return Task.model_validate(await self._request("POST", "/tasks", json=payload))

    async def get_task_by_id(self, task_id: str) -> Task:
        """Fetch a single task."""
        return Task.model_validate(await self._request("GET", f"/tasks/{task_id}"))

    async def update_task(self, task_id: str, task_data: TaskUpdate) -> Task:
        """Send only the fields set on ``task_data``; returns the merged task."""
        payload = task_data.model_dump(mode="json", by_alias=True, exclude_unset=True)
        return Task.model_validate(await self._request("PUT", f"/tasks/{task_id}", json=payload))

    async def delete_task(self, task_id: str) -> dict:
        """Delete a task permanently."""
        return await self._request("DELETE", f"/tasks/{task_id}")

    async def toggle_task_completion(self, task_id: str, completed: bool) -> Task:
        """Set the completed flag of a task."""
        return await self.update_task(task_id, TaskUpdate(completed=completed))
