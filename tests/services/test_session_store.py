"""Tests for the session store."""
import json
from typing import Any

import httpx
import pytest
import respx
from httpx import Response

from order_desk.api_client import ApiClient
from order_desk.core.storage import TOKEN_KEY, USER_KEY, MemoryStorage
from order_desk.schemas import Session, UserRole
from order_desk.services.session_store import SessionStore
from order_desk.shared.api_errors import INVALID_RESPONSE_MESSAGE, ApiError


@pytest.fixture
def store(api: ApiClient, storage: MemoryStorage) -> SessionStore:
    return SessionStore(api, storage)


def _login_route(mock_api: respx.MockRouter, user: dict[str, Any], token: str = "tok") -> respx.Route:
    return mock_api.post("/auth/login").mock(
        return_value=Response(200, json={"token": token, "user": user}),
    )


class TestLogin:
    async def test__login__sets_session_and_storage(
        self,
        store: SessionStore,
        storage: MemoryStorage,
        mock_api: respx.MockRouter,
        admin_user: dict[str, Any],
    ) -> None:
        _login_route(mock_api, admin_user)

        user = await store.login("admin@example.com", "secret1")

        assert user.id == "u-admin"
        assert store.is_authenticated
        assert store.token == "tok"
        assert store.user is not None
        assert store.user.role is UserRole.ADMIN
        assert storage.get(TOKEN_KEY) == "tok"
        assert json.loads(storage.get(USER_KEY) or "")["_id"] == "u-admin"
        assert not store.is_loading

    async def test__login__token_sent_on_following_requests(
        self,
        store: SessionStore,
        mock_api: respx.MockRouter,
        api: ApiClient,
        employee_user: dict[str, Any],
    ) -> None:
        _login_route(mock_api, employee_user, token="abc123")
        mock_api.get("/orders").mock(return_value=Response(200, json=[]))

        await store.login("omar@example.com", "secret1")
        await api.get_orders()

        assert "authorization" not in mock_api.calls[0].request.headers
        assert mock_api.calls[1].request.headers["authorization"] == "Bearer abc123"

    async def test__login_failure__state_unchanged(
        self,
        store: SessionStore,
        storage: MemoryStorage,
        mock_api: respx.MockRouter,
    ) -> None:
        mock_api.post("/auth/login").mock(
            return_value=Response(401, json={"message": "Invalid credentials"}),
        )

        with pytest.raises(ApiError) as exc_info:
            await store.login("admin@example.com", "wrong")

        assert exc_info.value.message == "Invalid credentials"
        assert not store.is_authenticated
        assert store.token is None
        assert storage.get(TOKEN_KEY) is None
        assert not store.is_loading

    async def test__login_failure__existing_session_kept(
        self,
        store: SessionStore,
        mock_api: respx.MockRouter,
        admin_user: dict[str, Any],
    ) -> None:
        route = _login_route(mock_api, admin_user)
        await store.login("admin@example.com", "secret1")
        route.mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(ApiError):
            await store.login("other@example.com", "secret1")

        assert store.user is not None
        assert store.user.id == "u-admin"

    async def test__login__response_without_token__invalid(
        self,
        store: SessionStore,
        mock_api: respx.MockRouter,
        admin_user: dict[str, Any],
    ) -> None:
        mock_api.post("/auth/login").mock(return_value=Response(200, json={"user": admin_user}))

        with pytest.raises(ApiError) as exc_info:
            await store.login("admin@example.com", "secret1")

        assert exc_info.value.message == INVALID_RESPONSE_MESSAGE
        assert not store.is_authenticated


class TestLogout:
    async def test__logout__clears_session_and_storage(
        self,
        store: SessionStore,
        storage: MemoryStorage,
        mock_api: respx.MockRouter,
        admin_user: dict[str, Any],
    ) -> None:
        _login_route(mock_api, admin_user)
        logout = mock_api.post("/auth/logout").mock(return_value=Response(200, json={}))
        await store.login("admin@example.com", "secret1")

        await store.logout()

        assert logout.called
        assert logout.calls[0].request.headers["authorization"] == "Bearer tok"
        assert not store.is_authenticated
        assert store.token is None
        assert storage.get(TOKEN_KEY) is None
        assert storage.get(USER_KEY) is None

    async def test__logout__network_failure_still_clears(
        self,
        store: SessionStore,
        storage: MemoryStorage,
        mock_api: respx.MockRouter,
        admin_user: dict[str, Any],
    ) -> None:
        _login_route(mock_api, admin_user)
        mock_api.post("/auth/logout").mock(side_effect=httpx.ConnectError("refused"))
        await store.login("admin@example.com", "secret1")

        await store.logout()

        assert not store.is_authenticated
        assert storage.get(TOKEN_KEY) is None

    async def test__logout__server_error_still_clears(
        self,
        store: SessionStore,
        mock_api: respx.MockRouter,
        admin_user: dict[str, Any],
    ) -> None:
        _login_route(mock_api, admin_user)
        mock_api.post("/auth/logout").mock(return_value=Response(500, json={"message": "boom"}))
        await store.login("admin@example.com", "secret1")

        await store.logout()

        assert not store.is_authenticated


class TestRestore:
    def test__restore__from_storage(self, api: ApiClient, admin_user: dict[str, Any]) -> None:
        storage = MemoryStorage({TOKEN_KEY: "tok", USER_KEY: json.dumps(admin_user)})
        store = SessionStore(api, storage)

        session = store.restore()

        assert session.is_authenticated
        assert store.token == "tok"
        assert store.user is not None
        assert store.user.email == "admin@example.com"

    def test__restore__corrupt_user__keys_removed(self, api: ApiClient) -> None:
        storage = MemoryStorage({TOKEN_KEY: "tok", USER_KEY: "{not json"})
        store = SessionStore(api, storage)

        session = store.restore()

        assert not session.is_authenticated
        assert TOKEN_KEY not in storage
        assert USER_KEY not in storage

    def test__restore__user_missing_fields__keys_removed(self, api: ApiClient) -> None:
        storage = MemoryStorage({TOKEN_KEY: "tok", USER_KEY: json.dumps({"name": "x"})})
        store = SessionStore(api, storage)

        assert not store.restore().is_authenticated
        assert TOKEN_KEY not in storage

    def test__restore__token_without_user__unauthenticated(self, api: ApiClient) -> None:
        store = SessionStore(api, MemoryStorage({TOKEN_KEY: "tok"}))

        assert not store.restore().is_authenticated
        assert store.token is None

    async def test__restore__round_trips_login(
        self,
        api: ApiClient,
        storage: MemoryStorage,
        mock_api: respx.MockRouter,
        employee_user: dict[str, Any],
    ) -> None:
        """What login persists, a fresh store restores."""
        _login_route(mock_api, employee_user)
        await SessionStore(api, storage).login("omar@example.com", "secret1")

        restored = SessionStore(api, storage).restore()

        assert restored.user is not None
        assert restored.user.id == "u-emp"
        assert restored.token == "tok"


class TestSubscribe:
    async def test__listeners_notified(
        self,
        store: SessionStore,
        mock_api: respx.MockRouter,
        admin_user: dict[str, Any],
    ) -> None:
        _login_route(mock_api, admin_user)
        mock_api.post("/auth/logout").mock(return_value=Response(200, json={}))
        seen: list[Session] = []
        store.subscribe(seen.append)

        await store.login("admin@example.com", "secret1")
        await store.logout()

        assert [s.is_authenticated for s in seen] == [True, False]

    def test__unsubscribe(self, store: SessionStore) -> None:
        seen: list[Session] = []
        unsubscribe = store.subscribe(seen.append)
        unsubscribe()
        unsubscribe()

        store.restore()

        assert seen == []
