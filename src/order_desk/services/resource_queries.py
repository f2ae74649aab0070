"""
Cached reads and invalidating mutations for every backend resource.

Reads go through QueryCache under a category key; each successful mutation
invalidates its category so the next read refetches.
"""
import logging
from typing import Any

from ..api_client import ApiClient
from ..schemas import (
    Analytics,
    Client,
    ClientCreate,
    ClientUpdate,
    Order,
    OrderCreate,
    OrderUpdate,
    User,
    UserCreate,
    UserRole,
    UserUpdate,
    ref_id,
)
from .query_cache import QueryCache, make_key

logger = logging.getLogger(__name__)

ORDERS = "orders"
CLIENTS = "clients"
USERS = "employees"
ANALYTICS = "analytics"

# Categories whose data is derived from orders on the backend
_ORDER_DEPENDENTS = (ANALYTICS,)


class ResourceQueries:
    """Resource reads and mutations bound to one API client and cache."""

    def __init__(self, api: ApiClient, cache: QueryCache) -> None:
        self._api = api
        self._cache = cache

    @property
    def cache(self) -> QueryCache:
        return self._cache

    def _invalidate(self, *categories: str) -> None:
        for category in categories:
            self._cache.invalidate(category)

    # Orders
    async def orders(self) -> list[Order]:
        return await self._cache.get(make_key(ORDERS), self._api.get_orders)

    async def order(self, order_id: str) -> Order:
        return await self._cache.get(
            make_key(ORDERS, order_id), lambda: self._api.get_order(order_id),
        )

    async def client_orders(self, client_id: str) -> list[Order]:
        """Orders placed by a client, filtered from the full order list."""
        return [o for o in await self.orders() if ref_id(o.client_id) == client_id]

    async def user_orders(self, user_id: str) -> list[Order]:
        """Orders created by a staff user, filtered from the full order list."""
        return [o for o in await self.orders() if ref_id(o.created_by) == user_id]

    async def create_order(self, data: OrderCreate | dict[str, Any]) -> Order:
        order = await self._api.create_order(data)
        self._invalidate(ORDERS, *_ORDER_DEPENDENTS)
        logger.info("order_created id=%s", order.id)
        return order

    async def update_order(self, order_id: str, data: OrderUpdate | dict[str, Any]) -> Order:
        order = await self._api.update_order(order_id, data)
        self._invalidate(ORDERS, *_ORDER_DEPENDENTS)
        logger.info("order_updated id=%s", order_id)
        return order

    async def delete_order(self, order_id: str) -> None:
        await self._api.delete_order(order_id)
        self._invalidate(ORDERS, *_ORDER_DEPENDENTS)
        logger.info("order_deleted id=%s", order_id)

    # Clients
    async def clients(self) -> list[Client]:
        return await self._cache.get(make_key(CLIENTS), self._api.get_clients)

    async def client(self, client_id: str) -> Client:
        return await self._cache.get(
            make_key(CLIENTS, client_id), lambda: self._api.get_client(client_id),
        )

    async def create_client(self, data: ClientCreate | dict[str, Any]) -> Client:
        client = await self._api.create_client(data)
        self._invalidate(CLIENTS)
        logger.info("client_created id=%s", client.id)
        return client

    async def update_client(self, client_id: str, data: ClientUpdate | dict[str, Any]) -> Client:
        client = await self._api.update_client(client_id, data)
        self._invalidate(CLIENTS)
        logger.info("client_updated id=%s", client_id)
        return client

    async def delete_client(self, client_id: str) -> None:
        await self._api.delete_client(client_id)
        self._invalidate(CLIENTS)
        logger.info("client_deleted id=%s", client_id)

    # Users
    async def users(self) -> list[User]:
        return await self._cache.get(make_key(USERS), self._api.get_users)

    async def user(self, user_id: str) -> User:
        return await self._cache.get(
            make_key(USERS, user_id), lambda: self._api.get_user(user_id),
        )

    async def create_user(self, data: UserCreate | dict[str, Any]) -> User:
        user = await self._api.create_user(data)
        self._invalidate(USERS)
        logger.info("user_created id=%s", user.id)
        return user

    async def update_user(self, user_id: str, data: UserUpdate | dict[str, Any]) -> User:
        user = await self._api.update_user(user_id, data)
        self._invalidate(USERS)
        logger.info("user_updated id=%s", user_id)
        return user

    async def update_user_role(self, user_id: str, role: UserRole | str) -> User:
        user = await self._api.update_user_role(user_id, role)
        self._invalidate(USERS)
        logger.info("user_role_updated id=%s role=%s", user_id, role)
        return user

    async def delete_user(self, user_id: str) -> None:
        await self._api.delete_user(user_id)
        self._invalidate(USERS)
        logger.info("user_deleted id=%s", user_id)

    # Analytics
    async def analytics(self) -> Analytics:
        return await self._cache.get(make_key(ANALYTICS), self._api.get_analytics)
