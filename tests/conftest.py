"""Pytest fixtures for testing."""
from collections.abc import AsyncGenerator, Generator
from typing import Any

import httpx
import pytest
import respx

from order_desk.api_client import ApiClient
from order_desk.app import App, create_app
from order_desk.core.config import Settings
from order_desk.core.storage import MemoryStorage
from order_desk.services.query_cache import QueryCache
from order_desk.services.resource_queries import ResourceQueries

API_URL = "http://localhost:8000"


@pytest.fixture
def settings(tmp_path: Any) -> Settings:
    """Settings isolated from the local environment and .env file."""
    return Settings(
        _env_file=None,
        VITE_API_URL=API_URL,
        ORDER_DESK_STORAGE_PATH=str(tmp_path / "storage.json"),
    )


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def mock_api() -> Generator[respx.MockRouter]:
    """Context manager for mocking API responses."""
    with respx.mock(base_url=API_URL, assert_all_called=False) as respx_mock:
        yield respx_mock


@pytest.fixture
async def api(settings: Settings, mock_api: respx.MockRouter) -> AsyncGenerator[ApiClient]:  # noqa: ARG001
    async with httpx.AsyncClient(base_url=API_URL) as http_client:
        yield ApiClient(settings=settings, http_client=http_client)


@pytest.fixture
def queries(api: ApiClient) -> ResourceQueries:
    return ResourceQueries(api, QueryCache())


@pytest.fixture
async def app(
    settings: Settings,
    storage: MemoryStorage,
    mock_api: respx.MockRouter,  # noqa: ARG001
) -> AsyncGenerator[App]:
    async with httpx.AsyncClient(base_url=API_URL) as http_client:
        async with create_app(settings, storage, http_client) as application:
            yield application


@pytest.fixture
def admin_user() -> dict[str, Any]:
    """Sample admin user as returned by the backend."""
    return {
        "_id": "u-admin",
        "name": "Mona Admin",
        "email": "admin@example.com",
        "role": "admin",
        "createdAt": "2024-01-01T00:00:00.000Z",
    }


@pytest.fixture
def employee_user() -> dict[str, Any]:
    """Sample employee user as returned by the backend."""
    return {
        "_id": "u-emp",
        "name": "Omar Employee",
        "email": "omar@example.com",
        "role": "employee",
        "createdAt": "2024-01-02T00:00:00.000Z",
    }


@pytest.fixture
def sample_clients() -> list[dict[str, Any]]:
    return [
        {
            "_id": "c1",
            "name": "Ahmed Hassan",
            "defaultAddress": "12 Tahrir St, Cairo",
            "phoneNumbers": ["01012345678"],
            "addresses": ["12 Tahrir St, Cairo"],
            "rating": 4,
            "createdAt": "2024-01-05T10:00:00.000Z",
        },
        {
            "_id": "c2",
            "name": "Sara Ali",
            "defaultAddress": "5 Corniche, Alexandria",
            "phoneNumbers": ["01198765432", "01511112222"],
            "addresses": ["5 Corniche, Alexandria"],
            "rating": 5,
            "createdAt": "2024-01-06T10:00:00.000Z",
        },
        {
            "_id": "c3",
            "name": "Youssef Nabil",
            "defaultAddress": "3 Nile St, Giza",
            "phoneNumbers": ["01233334444"],
            "addresses": ["3 Nile St, Giza"],
            "rating": 3,
            "createdAt": "2024-01-07T10:00:00.000Z",
        },
    ]


def make_order(
    _id: str,
    client: str | dict[str, Any],
    status: str = "pending",
    total: float = 100,
    delivery_fees: float = 20,
    created_at: str = "2024-02-01T10:00:00.000Z",
    created_by: str | dict[str, Any] = "u-emp",
    **extra: Any,
) -> dict[str, Any]:
    """Build an order payload in the backend's wire format."""
    return {
        "_id": _id,
        "orderId": f"ORD-{_id}",
        "trackId": f"TRK-{_id}",
        "clientId": client,
        "items": [{"name": "Shirt", "quantity": 1, "price": total - delivery_fees, "size": "L"}],
        "deliveryFees": delivery_fees,
        "total": total,
        "status": status,
        "createdBy": created_by,
        "createdAt": created_at,
        "updatedAt": created_at,
        **extra,
    }


@pytest.fixture
def sample_orders(sample_clients: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Orders referencing clients both by id and embedded."""
    return [
        make_order("o1", "c1", "delivered", 300, 20, "2024-02-01T10:00:00.000Z", "u-admin"),
        make_order("o2", sample_clients[1], "pending", 150, 30, "2024-02-03T10:00:00.000Z"),
        make_order("o3", "c2", "delivered", 500, 50, "2024-02-02T10:00:00.000Z"),
        make_order("o4", "c2", "returned", 80, 20, "2024-02-05T10:00:00.000Z"),
        make_order("o5", "c3", "cancelled", 60, 10, "2024-01-30T10:00:00.000Z"),
    ]


@pytest.fixture
def sample_analytics() -> dict[str, Any]:
    return {
        "totalOrders": 5,
        "deliveredOrders": 2,
        "pendingOrders": 1,
        "returnedOrders": 1,
        "totalRevenue": 800,
        "netProfit": 210,
        "averageOrderValue": 218,
    }


@pytest.fixture
def order_factory() -> Any:
    """Factory building order payloads in the backend's wire format."""
    return make_order
