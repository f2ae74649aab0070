"""
View models for the dashboard screens.

Each ``load`` reads through ResourceQueries and returns the data a screen
renders. ApiError propagates so the caller can show it and offer a retry.
"""
import asyncio
from dataclasses import dataclass

from ..schemas import Analytics, Client, Order, User
from . import stats
from .resource_queries import ResourceQueries
from .stats import ALL_STATUSES, ClientStats, SortDirection


@dataclass(frozen=True)
class DashboardSummary:
    analytics: Analytics
    revenue_without_delivery: float
    top_clients: list[Client]
    recent_orders: list[Order]


@dataclass(frozen=True)
class OrdersPage:
    orders: list[Order]
    total_count: int
    search: str
    status: str
    sort_field: str
    sort_direction: SortDirection


@dataclass(frozen=True)
class ClientsPage:
    clients: list[ClientStats]
    total_clients: int
    total_orders: int
    total_value: float


@dataclass(frozen=True)
class UserRow:
    user: User
    order_count: int


class DashboardView:
    def __init__(self, queries: ResourceQueries) -> None:
        self._queries = queries

    async def load(self) -> DashboardSummary:
        """Headline analytics plus revenue, top clients and recent orders."""
        analytics, orders, clients = await asyncio.gather(
            self._queries.analytics(),
            self._queries.orders(),
            self._queries.clients(),
        )
        return DashboardSummary(
            analytics=analytics,
            revenue_without_delivery=stats.revenue_without_delivery(orders),
            top_clients=stats.top_clients(clients, orders),
            recent_orders=stats.recent_orders(orders),
        )


class OrdersView:
    def __init__(self, queries: ResourceQueries) -> None:
        self._queries = queries

    async def load(
        self,
        search: str = "",
        status: str = ALL_STATUSES,
        sort_field: str = "created_at",
        sort_direction: SortDirection = "desc",
    ) -> OrdersPage:
        orders = await self._queries.orders()
        visible = stats.sort_orders(
            stats.filter_orders(orders, search, status), sort_field, sort_direction,
        )
        return OrdersPage(
            orders=visible,
            total_count=len(orders),
            search=search,
            status=status,
            sort_field=sort_field,
            sort_direction=sort_direction,
        )


class ClientsView:
    def __init__(self, queries: ResourceQueries) -> None:
        self._queries = queries

    async def load(self, search: str = "") -> ClientsPage:
        """Clients ranked by score, filtered by ``search``, with column totals."""
        clients, orders = await asyncio.gather(self._queries.clients(), self._queries.orders())
        ranked = stats.filter_client_stats(stats.client_stats(clients, orders), search)
        return ClientsPage(
            clients=ranked,
            total_clients=len(ranked),
            total_orders=sum(s.total_orders for s in ranked),
            total_value=sum((s.total_value for s in ranked), 0.0),
        )


class UsersView:
    def __init__(self, queries: ResourceQueries) -> None:
        self._queries = queries

    async def load(self) -> list[UserRow]:
        users, orders = await asyncio.gather(self._queries.users(), self._queries.orders())
        counts = stats.order_counts_by_user(orders)
        return [UserRow(user=u, order_count=counts[u.id]) for u in users]
