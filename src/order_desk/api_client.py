"""HTTP client for the order-management REST backend."""

import logging
from collections.abc import Callable
from typing import Any

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from .core.config import Settings, get_settings
from .schemas import (
    Analytics,
    Client,
    ClientCreate,
    ClientUpdate,
    LoginRequest,
    LoginResponse,
    Order,
    OrderCreate,
    OrderUpdate,
    RoleUpdate,
    User,
    UserCreate,
    UserRole,
    UserUpdate,
)
from .shared.api_errors import (
    INVALID_RESPONSE_MESSAGE,
    NETWORK_ERROR_MESSAGE,
    ApiError,
    error_from_response,
)

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], str | None]

_orders_adapter = TypeAdapter(list[Order])
_clients_adapter = TypeAdapter(list[Client])
_users_adapter = TypeAdapter(list[User])


def _no_token() -> str | None:
    return None


def _get_headers(token: str | None) -> dict[str, str]:
    """Get common headers for API requests."""
    headers = {"Content-Type": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def _to_body(payload: BaseModel | dict[str, Any] | None) -> Any:
    """Serialize a request payload to camelCase JSON-compatible data."""
    if payload is None:
        return None
    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="json", by_alias=True, exclude_none=True)
    return payload


class ApiClient:
    """
    Uniform transport over the REST backend.

    Every request carries ``Content-Type: application/json`` and, when the
    token provider returns a token, ``Authorization: Bearer <token>``. Every
    failure is raised as ApiError. Responses are validated against the
    schemas in ``order_desk.schemas``; a shape mismatch is a failure too.

    No retries are made and requests are not cancelled.
    """

    def __init__(
        self,
        token_provider: TokenProvider = _no_token,
        *,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._token_provider = token_provider
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=settings.api_url,
            timeout=settings.api_timeout,
        )

    def set_token_provider(self, token_provider: TokenProvider) -> None:
        """Replace the callable used to look up the bearer token."""
        self._token_provider = token_provider

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def request(
        self,
        method: str,
        path: str,
        json: BaseModel | dict[str, Any] | None = None,
    ) -> Any:
        """
        Send a request and return the decoded JSON body.

        Raises:
            ApiError: On transport failure, non-2xx status, or a non-JSON
                success body.
        """
        body = _to_body(json)
        try:
            response = await self._client.request(
                method,
                path,
                json=body,
                headers=_get_headers(self._token_provider()),
            )
        except httpx.HTTPError as e:
            logger.warning("api_transport_error method=%s path=%s error=%s", method, path, e)
            raise ApiError(NETWORK_ERROR_MESSAGE) from e

        if not response.is_success:
            error = error_from_response(response)
            logger.info(
                "api_error method=%s path=%s status=%s message=%s",
                method, path, response.status_code, error.message,
            )
            raise error

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(INVALID_RESPONSE_MESSAGE, status_code=response.status_code) from e

    async def _parse(self, method: str, path: str, adapter: Any, json: Any = None) -> Any:
        data = await self.request(method, path, json=json)
        try:
            if isinstance(adapter, TypeAdapter):
                return adapter.validate_python(data)
            return adapter.model_validate(data)
        except ValidationError as e:
            logger.warning("api_schema_mismatch method=%s path=%s errors=%s", method, path, e.errors())
            raise ApiError(INVALID_RESPONSE_MESSAGE) from e

    # Auth endpoints
    async def login(self, email: str, password: str) -> LoginResponse:
        return await self._parse(
            "POST", "/auth/login", LoginResponse, LoginRequest(email=email, password=password),
        )

    async def logout(self) -> None:
        await self.request("POST", "/auth/logout")

    # Orders endpoints
    async def get_orders(self) -> list[Order]:
        return await self._parse("GET", "/orders", _orders_adapter)

    async def get_order(self, order_id: str) -> Order:
        return await self._parse("GET", f"/orders/{order_id}", Order)

    async def create_order(self, data: OrderCreate | dict[str, Any]) -> Order:
        return await self._parse("POST", "/orders", Order, data)

    async def update_order(self, order_id: str, data: OrderUpdate | dict[str, Any]) -> Order:
        return await self._parse("PUT", f"/orders/{order_id}", Order, data)

    async def delete_order(self, order_id: str) -> None:
        await self.request("DELETE", f"/orders/{order_id}")

    # Clients endpoints
    async def get_clients(self) -> list[Client]:
        return await self._parse("GET", "/clients", _clients_adapter)

    async def get_client(self, client_id: str) -> Client:
        return await self._parse("GET", f"/clients/{client_id}", Client)

    async def create_client(self, data: ClientCreate | dict[str, Any]) -> Client:
        return await self._parse("POST", "/clients", Client, data)

    async def update_client(self, client_id: str, data: ClientUpdate | dict[str, Any]) -> Client:
        return await self._parse("PUT", f"/clients/{client_id}", Client, data)

    async def delete_client(self, client_id: str) -> None:
        await self.request("DELETE", f"/clients/{client_id}")

    # Users endpoints (staff are served under /employees)
    async def get_users(self) -> list[User]:
        return await self._parse("GET", "/employees", _users_adapter)

    async def get_user(self, user_id: str) -> User:
        return await self._parse("GET", f"/employees/{user_id}", User)

    async def create_user(self, data: UserCreate | dict[str, Any]) -> User:
        return await self._parse("POST", "/employees", User, data)

    async def update_user(self, user_id: str, data: UserUpdate | dict[str, Any]) -> User:
        return await self._parse("PUT", f"/employees/{user_id}", User, data)

    async def update_user_role(self, user_id: str, role: UserRole | str) -> User:
        return await self._parse(
            "PUT", f"/employees/{user_id}/role", User, RoleUpdate(role=UserRole(role)),
        )

    async def delete_user(self, user_id: str) -> None:
        await self.request("DELETE", f"/employees/{user_id}")

    # Analytics endpoints
    async def get_analytics(self) -> Analytics:
        return await self._parse("GET", "/analytics", Analytics)
