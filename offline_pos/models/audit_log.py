"""
Audit log data models.

Defines data structures for recording local mutations and system events.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ActionType(str, Enum):
    """Types of actions that can be logged."""
    # Item actions
    ITEM_CREATED = "item_created"
    ITEM_UPDATED = "item_updated"
    ITEM_DELETED = "item_deleted"
    INVENTORY_DECREMENTED = "inventory_decremented"

    # Order actions
    ORDER_CREATED = "order_created"

    # Store lifecycle
    DATA_SEEDED = "data_seeded"
    DATA_CLEARED = "data_cleared"
    MUTATION_ACKNOWLEDGED = "mutation_acknowledged"

    # System actions
    SYSTEM_STARTUP = "system_startup"
    SYSTEM_SHUTDOWN = "system_shutdown"


class Actor(str, Enum):
    """Who performed the action."""
    USER = "user"
    SYSTEM = "system"


class Outcome(str, Enum):
    """Result of the action."""
    SUCCESS = "success"
    FAILURE = "failure"
    PENDING = "pending"


class AuditLog(BaseModel):
    """Represents a single audit log entry."""

    log_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = Field(default_factory=datetime.now)
    action_type: ActionType
    actor: Actor
    details: Dict[str, Any] = Field(default_factory=dict)
    outcome: Outcome = Field(default=Outcome.SUCCESS)
    item_id: Optional[str] = None
    order_id: Optional[str] = None
    error_message: Optional[str] = None

    def set_failure(self, error_message: str, details: Optional[Dict[str, Any]] = None) -> None:
        """Mark action as failed."""
        self.outcome = Outcome.FAILURE
        self.error_message = error_message
        if details:
            self.details.update(details)

    def to_readable_string(self) -> str:
        """Convert log entry to human-readable string."""
        timestamp_str = self.timestamp.strftime("%Y-%m-%d %H:%M:%S")
        actor_str = self.actor.value.upper()
        action_str = self.action_type.value.replace("_", " ").title()
        outcome_str = self.outcome.value.upper()

        base = f"[{timestamp_str}] {actor_str}: {action_str} - {outcome_str}"

        if self.error_message:
            base += f" - Error: {self.error_message}"

        return base


def create_audit_log(
    action_type: ActionType,
    actor: Actor,
    details: Optional[Dict[str, Any]] = None,
    item_id: Optional[str] = None,
    order_id: Optional[str] = None
) -> AuditLog:
    """
    Factory function to create audit log entries.

    Args:
        action_type: Type of action
        actor: Who performed the action
        details: Additional details
        item_id: Related item ID
        order_id: Related order ID

    Returns:
        AuditLog instance
    """
    return AuditLog(
        action_type=action_type,
        actor=actor,
        details=details or {},
        item_id=item_id,
        order_id=order_id
    )
