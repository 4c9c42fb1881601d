"""
Data models for the offline POS cache.

This module exports all data models for easy import.
"""

from .audit_log import (
    ActionType,
    Actor,
    AuditLog,
    Outcome,
    create_audit_log,
)
from .cart import (
    Cart,
    CartLine,
)
from .item import (
    LOW_STOCK_LEVEL,
    Category,
    Item,
    ItemStatus,
    StockLevel,
    classify_stock,
)
from .order import (
    Order,
    OrderLine,
    OrderStatus,
    PaymentMethod,
)
from .sync import (
    LAST_SYNC_KEY,
    MutationAction,
    MutationStatus,
    PendingMutation,
    SyncMetadata,
)
from .user import (
    User,
    UserRole,
)

__all__ = [
    # Item models
    "Item",
    "ItemStatus",
    "Category",
    "StockLevel",
    "LOW_STOCK_LEVEL",
    "classify_stock",
    # Cart models
    "Cart",
    "CartLine",
    # Order models
    "Order",
    "OrderLine",
    "OrderStatus",
    "PaymentMethod",
    # User models
    "User",
    "UserRole",
    # Sync models
    "SyncMetadata",
    "PendingMutation",
    "MutationAction",
    "MutationStatus",
    "LAST_SYNC_KEY",
    # Audit log models
    "AuditLog",
    "ActionType",
    "Actor",
    "Outcome",
    "create_audit_log",
]
