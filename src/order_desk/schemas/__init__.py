"""Pydantic models for backend payloads."""
from .analytics import Analytics
from .auth import LoginRequest, LoginResponse, Session
from .client import Client, ClientCreate, ClientUpdate
from .order import (
    ClientRef,
    Order,
    OrderCreate,
    OrderItem,
    OrderItemInput,
    OrderStatus,
    OrderUpdate,
    UserRef,
    order_total,
)
from .refs import EmbeddedRef, IdRef, ref_id, ref_label
from .user import RoleUpdate, User, UserCreate, UserRole, UserUpdate

__all__ = [
    "Analytics",
    "Client",
    "ClientCreate",
    "ClientRef",
    "ClientUpdate",
    "EmbeddedRef",
    "IdRef",
    "LoginRequest",
    "LoginResponse",
    "Order",
    "OrderCreate",
    "OrderItem",
    "OrderItemInput",
    "OrderStatus",
    "OrderUpdate",
    "RoleUpdate",
    "Session",
    "User",
    "UserCreate",
    "UserRef",
    "UserRole",
    "UserUpdate",
    "order_total",
    "ref_id",
    "ref_label",
]
