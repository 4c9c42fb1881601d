"""
Sync bookkeeping models.

SyncMetadata holds the advisory last-sync marker; PendingMutation is one
entry of the outbox that a future sync job would replay against the backend.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

LAST_SYNC_KEY = "lastSync"


class SyncMetadata(BaseModel):
    """A metadata record, keyed by ``key``."""

    key: str = Field(..., min_length=1)
    value: Any = None


class MutationAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class MutationStatus(str, Enum):
    PENDING = "pending"
    ACKNOWLEDGED = "acknowledged"


class PendingMutation(BaseModel):
    """A local write that has not been confirmed by a remote system."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    collection: str
    action: MutationAction
    record_id: str
    payload: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=datetime.now)
    status: MutationStatus = Field(default=MutationStatus.PENDING)
    acknowledged_at: Optional[datetime] = None

    def acknowledge(self) -> None:
        """Mark the mutation as confirmed remotely."""
        if self.status == MutationStatus.ACKNOWLEDGED:
            raise ValueError(f"Mutation {self.id} is already acknowledged")
        self.status = MutationStatus.ACKNOWLEDGED
        self.acknowledged_at = datetime.now()
