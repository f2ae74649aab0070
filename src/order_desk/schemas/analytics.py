"""Pydantic schema for the ``/analytics`` endpoint."""
from .base import WireModel


class Analytics(WireModel):
    """Aggregate statistics computed by the backend."""

    total_orders: int = 0
    delivered_orders: int = 0
    pending_orders: int = 0
    returned_orders: int = 0
    total_revenue: float = 0
    net_profit: float = 0
    average_order_value: float = 0
