"""Client state layer end to end: API client, session context and task cache against the app."""

from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport

from client.api_client import APIError, NotifyDoAPI
from client.notifications import NotificationLog
from client.session import SessionContext, SessionState
from client.storage import ClientStorage
from models.task import TaskCreate, TaskUpdate

TOKEN_KEY = "userToken"


@pytest.fixture
def storage(tmp_path: Path) -> ClientStorage:
    return ClientStorage(tmp_path / "storage.json")


@pytest_asyncio.fixture
async def api(app, storage):
    client = NotifyDoAPI(storage, base_url="http://test/api", transport=ASGITransport(app=app))
    yield client
    await client.close()


@pytest.fixture
def notes() -> NotificationLog:
    return NotificationLog()


@pytest.fixture
def visited() -> list[str]:
    return []


@pytest.fixture
def session(api, storage, notes, visited) -> SessionContext:
    return SessionContext(api, storage, notify=notes, navigate=visited.append)


class TestSessionLifecycle:
    async def test_register_authenticates_and_persists_token(self, session, storage, tmp_path, visited, notes):
        assert session.state is SessionState.ANONYMOUS

        ok = await session.register("Ada", "ada@example.com", "secret123")

        assert ok is True
        assert session.is_authenticated
        assert session.user.name == "Ada"
        assert ClientStorage(tmp_path / "storage.json").get_item(TOKEN_KEY)
        assert session.cache.loaded and len(session.cache) == 0
        assert visited == ["/"]
        assert notes.last.title == "Registration successful"

    async def test_failed_login_stays_anonymous(self, session, storage, notes, visited):
        await session.register("Ada", "ada@example.com", "secret123")
        session.logout()

        ok = await session.login("ada@example.com", "wrong-password")

        assert ok is False
        assert session.state is SessionState.ANONYMOUS
        assert storage.get_item(TOKEN_KEY) is None
        assert notes.last.is_error
        assert notes.last.title == "Login failed"
        assert notes.last.description == "Invalid email or password"
        assert visited[-1] == "/login"

    async def test_duplicate_registration_reports_server_message(self, session, notes):
        await session.register("Ada", "ada@example.com", "secret123")
        session.logout()

        assert await session.register("Ada 2", "ada@example.com", "secret123") is False
        assert notes.last.description == "User already exists"

    async def test_login_loads_existing_tasks(self, session, api):
        await session.register("Ada", "ada@example.com", "secret123")
        await session.cache.create(TaskCreate(title="Buy milk", priority="low"))
        session.logout()
        assert len(session.cache) == 0

        assert await session.login("ada@example.com", "secret123")

        assert [t.title for t in session.cache] == ["Buy milk"]

    async def test_logout_clears_everything(self, session, storage, visited):
        await session.register("Ada", "ada@example.com", "secret123")
        await session.cache.create(TaskCreate(title="x"))

        session.logout()

        assert session.state is SessionState.ANONYMOUS
        assert session.user is None
        assert storage.get_item(TOKEN_KEY) is None
        assert len(session.cache) == 0 and not session.cache.loaded
        assert visited[-1] == "/login"

    async def test_restore_from_stored_token(self, session, api, storage, notes, visited):
        await session.register("Ada", "ada@example.com", "secret123")
        await session.cache.create(TaskCreate(title="persisted"))

        reopened = SessionContext(api, storage, notify=notes, navigate=visited.append)
        assert await reopened.restore() is True

        assert reopened.is_authenticated
        assert reopened.user.email == "ada@example.com"
        assert [t.title for t in reopened.cache] == ["persisted"]

    async def test_restore_with_bad_token_clears_it(self, session, storage):
        storage.set_item(TOKEN_KEY, "stale-token")

        assert await session.restore() is False

        assert session.state is SessionState.ANONYMOUS
        assert storage.get_item(TOKEN_KEY) is None

    async def test_restore_without_token_is_noop(self, session):
        assert await session.restore() is False
        assert session.state is SessionState.ANONYMOUS

    async def test_any_401_logs_the_session_out(self, session, storage, visited):
        await session.register("Ada", "ada@example.com", "secret123")
        storage.set_item(TOKEN_KEY, "tampered")

        assert await session.cache.load() is False

        assert session.state is SessionState.ANONYMOUS
        assert storage.get_item(TOKEN_KEY) is None
        assert visited[-1] == "/login"


class TestTaskCache:
    @pytest_asyncio.fixture
    async def signed_in(self, session):
        await session.register("Ada", "ada@example.com", "secret123")
        return session

    async def test_create_prepends_server_task(self, signed_in):
        cache = signed_in.cache
        first = await cache.create(TaskCreate(title="first"))
        second = await cache.create(TaskCreate(title="second", tags=["x"]))

        assert [t.id for t in cache] == [second.id, first.id]
        assert second.user_id == signed_in.user.id
        assert second.tags == ["x"]

    async def test_update_mirrors_server_response(self, signed_in):
        cache = signed_in.cache
        created = await cache.create(TaskCreate(title="draft", description="notes"))

        updated = await cache.update(created.id, TaskUpdate(title="final", description=""))

        assert cache.get(created.id) == updated
        assert updated.title == "final"
        assert updated.description == ""
        assert updated.updated_at >= created.updated_at

    async def test_toggle_round_trip(self, signed_in):
        cache = signed_in.cache
        created = await cache.create(TaskCreate(title="laundry"))

        await cache.toggle_complete(created.id, True)
        assert cache.get(created.id).completed is True

        await cache.toggle_complete(created.id, False)
        assert cache.get(created.id).completed is False

    async def test_delete_removes_after_confirmation(self, signed_in):
        cache = signed_in.cache
        keep = await cache.create(TaskCreate(title="keep"))
        drop = await cache.create(TaskCreate(title="drop"))

        assert await cache.delete(drop.id) is True

        assert [t.id for t in cache] == [keep.id]

    async def test_failed_call_leaves_cache_unchanged(self, signed_in, notes):
        cache = signed_in.cache
        await cache.create(TaskCreate(title="only"))
        before = list(cache.tasks)

        result = await cache.update(str(ObjectId()), TaskUpdate(title="ghost"))

        assert result is None
        assert cache.tasks == before
        assert notes.last.is_error
        assert notes.last.description == "Task not found"
        assert signed_in.is_authenticated

    async def test_cache_is_per_user(self, signed_in, api, storage, notes, visited):
        await signed_in.cache.create(TaskCreate(title="Buy milk", priority="low"))
        signed_in.logout()

        other = SessionContext(api, storage, notify=notes, navigate=visited.append)
        await other.register("Bob", "bob@example.com", "secret123")

        assert other.cache.loaded
        assert list(other.cache) == []

    async def test_get_task_by_id(self, signed_in, api):
        created = await signed_in.cache.create(TaskCreate(title="lookup", tags=["a"]))

        fetched = await api.get_task_by_id(created.id)

        assert fetched == created


class TestAPIClientErrors:
    async def test_network_failure(self, storage):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        api = NotifyDoAPI(storage, base_url="http://test/api", transport=httpx.MockTransport(refuse))
        with pytest.raises(APIError) as exc_info:
            await api.fetch_tasks()
        await api.close()

        assert exc_info.value.status_code is None

    async def test_non_json_error_body(self, storage):
        api = NotifyDoAPI(
            storage,
            base_url="http://test/api",
            transport=httpx.MockTransport(lambda request: httpx.Response(502, text="bad gateway")),
        )
        with pytest.raises(APIError) as exc_info:
            await api.get_user_profile()
        await api.close()

        assert exc_info.value.status_code == 502
        assert exc_info.value.message == "Something went wrong"

    async def test_bearer_header_read_from_storage_on_every_request(self, storage):
        seen = []

        def record(request):
            seen.append(request.headers.get("authorization"))
            return httpx.Response(200, json=[])

        api = NotifyDoAPI(storage, base_url="http://test/api", transport=httpx.MockTransport(record))
        await api.fetch_tasks()
        storage.set_item(TOKEN_KEY, "t1")
        await api.fetch_tasks()
        await api.close()

        assert seen == [None, "Bearer t1"]

    async def test_login_401_does_not_trigger_global_logout(self, storage):
        calls = []
        storage.set_item(TOKEN_KEY, "keep-me")
        api = NotifyDoAPI(
            storage,
            base_url="http://test/api",
            on_unauthorized=lambda: calls.append("logout"),
            transport=httpx.MockTransport(
                lambda request: httpx.Response(401, json={"detail": "Invalid email or password"})
            ),
        )
        with pytest.raises(APIError):
            await api.login_user("a@b.c", "x")
        await api.close()

        assert calls == []
        assert storage.get_item(TOKEN_KEY) == "keep-me"


def _login_ok_tasks_rejected(request: httpx.Request) -> httpx.Response:
    if request.url.path.endswith("/users/login"):
        return httpx.Response(
            200, json={"id": "u1", "name": "Ada", "email": "ada@example.com", "token": "t1"}
        )
    if request.url.path.endswith("/users/profile"):
        return httpx.Response(200, json={"id": "u1", "name": "Ada", "email": "ada@example.com"})
    return httpx.Response(401, json={"detail": "Not authorized, token failed"})


class TestSessionEndedDuringSignIn:
    @pytest_asyncio.fixture
    async def rejecting_session(self, storage, notes, visited):
        api = NotifyDoAPI(
            storage, base_url="http://test/api", transport=httpx.MockTransport(_login_ok_tasks_rejected)
        )
        yield SessionContext(api, storage, notify=notes, navigate=visited.append)
        await api.close()

    async def test_login_fails_when_first_task_load_is_rejected(self, rejecting_session, storage, notes, visited):
        ok = await rejecting_session.login("ada@example.com", "secret123")

        assert ok is False
        assert rejecting_session.state is SessionState.ANONYMOUS
        assert rejecting_session.user is None
        assert storage.get_item(TOKEN_KEY) is None
        assert "/" not in visited
        assert visited[-1] == "/login"
        assert notes.last.is_error
        assert notes.last.title == "Login failed"

    async def test_register_fails_when_first_task_load_is_rejected(self, storage, notes, visited):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/users"):
                return httpx.Response(
                    201, json={"id": "u1", "name": "Ada", "email": "ada@example.com", "token": "t1"}
                )
            return httpx.Response(401, json={"detail": "Not authorized, token failed"})

        api = NotifyDoAPI(storage, base_url="http://test/api", transport=httpx.MockTransport(handler))
        session = SessionContext(api, storage, notify=notes, navigate=visited.append)

        assert await session.register("Ada", "ada@example.com", "secret123") is False
        await api.close()

        assert session.state is SessionState.ANONYMOUS
        assert all(n.title != "Registration successful" for n in notes.items)
        assert "/" not in visited

    async def test_restore_fails_when_first_task_load_is_rejected(self, rejecting_session, storage):
        storage.set_item(TOKEN_KEY, "t1")

        assert await rejecting_session.restore() is False

        assert rejecting_session.state is SessionState.ANONYMOUS
        assert storage.get_item(TOKEN_KEY) is None

    async def test_is_loading_while_signing_in(self, storage, notes, visited):
        observed = []
        holder = {}

        def handler(request: httpx.Request) -> httpx.Response:
            observed.append(holder["session"].is_loading)
            if request.url.path.endswith("/users/login"):
                return _login_ok_tasks_rejected(request)
            return httpx.Response(200, json=[])

        api = NotifyDoAPI(storage, base_url="http://test/api", transport=httpx.MockTransport(handler))
        session = holder["session"] = SessionContext(api, storage, notify=notes, navigate=visited.append)

        assert session.is_loading is False
        assert await session.login("ada@example.com", "secret123") is True
        await api.close()

        assert observed[0] is True
        assert session.is_loading is False
        assert session.is_authenticated
        assert notes.last.description == "Welcome back, Ada!"
