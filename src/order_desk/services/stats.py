"""
Client-side aggregates over cached collections.

Everything here is a pure function of the current orders/clients snapshot and
is recomputed on every call.
"""
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal

from pydantic.alias_generators import to_snake

from ..schemas import Client, Order, OrderStatus, order_total, ref_id, ref_label

__all__ = [
    "ClientStats",
    "client_score",
    "client_stats",
    "filter_client_stats",
    "filter_orders",
    "next_sort",
    "order_counts_by_client",
    "order_counts_by_user",
    "order_total",
    "recent_orders",
    "requires_quick_edit",
    "revenue_without_delivery",
    "sort_orders",
    "top_clients",
]

SortDirection = Literal["asc", "desc"]

DEFAULT_LIMIT = 5
ALL_STATUSES = "all"

# Weights for ranking clients: delivered value dominates order count, which
# dominates rating
VALUE_WEIGHT = 1000
ORDER_COUNT_WEIGHT = 100


@dataclass(frozen=True)
class ClientStats:
    """A client with its order aggregates and ranking score."""

    client: Client
    total_orders: int
    total_value: float
    score: float


def client_score(total_value: float, total_orders: int, rating: float) -> float:
    """Ranking score: ``total_value * 1000 + total_orders * 100 + rating``."""
    return total_value * VALUE_WEIGHT + total_orders * ORDER_COUNT_WEIGHT + rating


def order_counts_by_client(orders: Iterable[Order]) -> Counter[str]:
    return Counter(cid for o in orders if (cid := ref_id(o.client_id)) is not None)


def order_counts_by_user(orders: Iterable[Order]) -> Counter[str]:
    return Counter(uid for o in orders if (uid := ref_id(o.created_by)) is not None)


def client_stats(clients: Iterable[Client], orders: Sequence[Order]) -> list[ClientStats]:
    """
    Per-client order count, delivered value and score, best first.

    ``total_value`` sums ``total`` over the client's delivered orders. Clients
    with equal scores keep their input order.
    """
    counts = order_counts_by_client(orders)
    delivered_value: Counter[str] = Counter()
    for order in orders:
        if order.status == OrderStatus.DELIVERED:
            cid = ref_id(order.client_id)
            if cid is not None:
                delivered_value[cid] += order.total

    stats = []
    for client in clients:
        total_orders = counts[client.id]
        total_value = float(delivered_value[client.id])
        stats.append(
            ClientStats(
                client=client,
                total_orders=total_orders,
                total_value=total_value,
                score=client_score(total_value, total_orders, client.rating),
            ),
        )
    return sorted(stats, key=lambda s: s.score, reverse=True)


def revenue_without_delivery(orders: Iterable[Order]) -> float:
    """Sum of ``total - delivery_fees`` over delivered orders."""
    return sum(
        (o.total - o.delivery_fees for o in orders if o.status == OrderStatus.DELIVERED),
        0.0,
    )


def top_clients(
    clients: Iterable[Client],
    orders: Iterable[Order],
    limit: int = DEFAULT_LIMIT,
) -> list[Client]:
    """Clients with the most orders first, ties broken by higher rating."""
    counts = order_counts_by_client(orders)
    ranked = sorted(clients, key=lambda c: (counts[c.id], c.rating or 0), reverse=True)
    return ranked[:limit]


def _timestamp(value: datetime | None) -> float | None:
    return value.timestamp() if value is not None else None


def recent_orders(orders: Iterable[Order], limit: int = DEFAULT_LIMIT) -> list[Order]:
    """Newest orders first by ``created_at``."""
    return sort_orders(orders, "created_at", "desc")[:limit]


def filter_orders(
    orders: Iterable[Order],
    search: str = "",
    status: str = ALL_STATUSES,
) -> list[Order]:
    """
    Orders matching a free-text search and a status filter.

    The search is case-insensitive over order id, tracking id and client
    label (the client's name when embedded, otherwise its id).
    """
    term = search.strip().lower()
    result = []
    for order in orders:
        if status != ALL_STATUSES and order.status != status:
            continue
        if term and not any(
            term in value.lower()
            for value in (order.order_id, order.track_id, ref_label(order.client_id))
        ):
            continue
        result.append(order)
    return result


def _sort_value(order: Order, field: str) -> Any:
    if field == "client_id":
        return ref_label(order.client_id)
    if field == "created_by":
        return ref_label(order.created_by)
    if field == "items":
        return sum(item.quantity for item in order.items)
    value = getattr(order, field)
    if isinstance(value, datetime):
        return _timestamp(value)
    return value


def sort_orders(
    orders: Iterable[Order],
    field: str = "created_at",
    direction: SortDirection = "desc",
) -> list[Order]:
    """
    Orders sorted by any order field.

    ``field`` may be given in snake_case or camelCase (``createdAt``). Client
    and creator references sort by label, timestamps chronologically and
    items by total quantity. Orders missing the field go last in either
    direction; ties keep input order.
    """
    attr = to_snake(field)
    if attr not in Order.model_fields:
        raise ValueError(f"Unknown order field: '{field}'")
    present, missing = [], []
    for order in orders:
        (missing if _sort_value(order, attr) is None else present).append(order)
    present.sort(key=lambda o: _sort_value(o, attr), reverse=direction == "desc")
    return present + missing


def next_sort(
    current_field: str,
    current_direction: SortDirection,
    field: str,
) -> tuple[str, SortDirection]:
    """Clicking the active column flips direction; a new column starts descending."""
    if field == current_field:
        return field, "asc" if current_direction == "desc" else "desc"
    return field, "desc"


def filter_client_stats(stats: Iterable[ClientStats], search: str = "") -> list[ClientStats]:
    """Clients whose name or default address contains ``search``, or whose phone does."""
    term = search.strip()
    if not term:
        return list(stats)
    lowered = term.lower()
    return [
        s for s in stats
        if lowered in s.client.name.lower()
        or lowered in s.client.default_address.lower()
        or any(term in phone for phone in s.client.phone_numbers)
    ]


def requires_quick_edit(order: Order) -> bool:
    """Delivered and returned orders may only have notes and rating edited."""
    return order.is_closed
