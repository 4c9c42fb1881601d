"""
Offline data service.

Owns the lifecycle of the local store: opening it, seeding it on first run,
the advisory last-sync marker, and the outbox of local mutations waiting for
a sync job that does not exist yet.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from ..database.local_store import LocalStore, StoreError
from ..models import (
    LAST_SYNC_KEY,
    ActionType,
    Actor,
    MutationAction,
    MutationStatus,
    PendingMutation,
    SyncMetadata,
)
from ..utils import AuditLogger, get_logger
from .connectivity_service import ConnectivityMonitor
from .sample_data import build_sample_bundle

OUTBOX = "outbox"


class OfflineDataService:
    """Manages the local store and first-run seeding."""

    def __init__(
        self,
        store: LocalStore,
        connectivity: Optional[ConnectivityMonitor] = None,
        audit_logger: Optional[AuditLogger] = None,
        seed_sample_data: bool = True,
    ) -> None:
        """
        Open the store and seed it if it is empty.

        Args:
            store: Local store instance
            connectivity: Connectivity monitor (defaults to forced offline)
            audit_logger: Audit logger (defaults to one writing into ``store``)
            seed_sample_data: Import the sample bundle when ``items`` is empty

        Raises:
            StoreError: If the store cannot be opened
        """
        self.store = store
        self.connectivity = connectivity or ConnectivityMonitor(force_offline=True)
        self.audit_logger = audit_logger or AuditLogger(store)
        self.logger = get_logger("offline_service")

        self.store.initialize()

        if seed_sample_data:
            self.initialize_sample_data_if_needed()

    def initialize_sample_data_if_needed(
        self,
        bundle: Optional[Dict[str, List[Dict[str, Any]]]] = None
    ) -> bool:
        """
        Seed the store unless it already holds items.

        Args:
            bundle: Records per collection; defaults to the built-in sample data

        Returns:
            True if data was seeded, False if skipped or failed
        """
        try:
            existing_items = self.store.get("items")
            if existing_items:
                self.logger.info("Data already exists, skipping sample data initialization")
                return False

            self.logger.info("Initializing sample data for offline mode...")
            bundle = bundle if bundle is not None else build_sample_bundle()

            with self.store.transaction():
                for collection, records in bundle.items():
                    self.store.put_many(collection, records)
                self.mark_synced()

            counts = {collection: len(records) for collection, records in bundle.items()}
            self.audit_logger.log_action(
                action_type=ActionType.DATA_SEEDED,
                actor=Actor.SYSTEM,
                details=counts,
            )
            self.logger.info(f"Sample data initialized successfully: {counts}")
            return True

        except StoreError as e:
            self.logger.error(f"Error initializing sample data: {e}")
            return False

    def store_data(self, collection: str, record: Dict[str, Any]) -> None:
        self.store.put(collection, record)

    def store_multiple_data(self, collection: str, records: Sequence[Dict[str, Any]]) -> int:
        return self.store.put_many(collection, records)

    def get_data(self, collection: str, key: Optional[str] = None):
        """
        Read one record or a whole collection.

        Returns:
            Record dict or None with a key, otherwise a list of records
        """
        return self.store.get(collection, key)

    def delete_data(self, collection: str, key: str) -> bool:
        return self.store.delete(collection, key)

    def clear_offline_data(self) -> int:
        """
        Wipe all cached data (logout/reset).

        Returns:
            Number of records removed
        """
        removed = self.store.clear()
        self.audit_logger.log_action(
            action_type=ActionType.DATA_CLEARED,
            actor=Actor.USER,
            details={"records_removed": removed},
        )
        self.logger.info("All offline data cleared")
        return removed

    def is_offline(self) -> bool:
        return self.connectivity.is_offline()

    def mark_synced(self, when: Optional[datetime] = None) -> None:
        """Record the advisory last-sync timestamp."""
        when = when or datetime.now()
        marker = SyncMetadata(key=LAST_SYNC_KEY, value=when.isoformat())
        self.store.put("metadata", marker.model_dump())

    def get_last_sync(self) -> Optional[datetime]:
        record = self.store.get("metadata", LAST_SYNC_KEY)
        if not record:
            return None
        marker = SyncMetadata.model_validate(record)
        return datetime.fromisoformat(marker.value) if marker.value else None

    # Outbox

    def queue_mutation(
        self,
        collection: str,
        action: MutationAction,
        record_id: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> PendingMutation:
        """
        Append a local write to the outbox.

        Args:
            collection: Collection the write touched
            action: create, update or delete
            record_id: Key of the written record
            payload: Record as written

        Returns:
            The queued mutation
        """
        mutation = PendingMutation(
            collection=collection,
            action=action,
            record_id=record_id,
            payload=payload or {},
        )
        self.store.put(OUTBOX, mutation.model_dump(mode="json"))
        self.logger.debug(f"Queued {action.value} of {collection}/{record_id}")
        return mutation

    def get_pending_mutations(self) -> List[PendingMutation]:
        """Get unacknowledged mutations, oldest first."""
        records = self.store.get(OUTBOX)
        return [
            PendingMutation.model_validate(record)
            for record in records
            if record.get("status") == MutationStatus.PENDING.value
        ]

    def acknowledge_mutation(self, mutation_id: str) -> bool:
        """
        Mark an outbox entry as confirmed by the remote system.

        Returns:
            True if a pending mutation was acknowledged
        """
        record = self.store.get(OUTBOX, mutation_id)
        if record is None:
            self.logger.warning(f"Mutation {mutation_id} not found in outbox")
            return False

        mutation = PendingMutation.model_validate(record)
        if mutation.status == MutationStatus.ACKNOWLEDGED:
            self.logger.warning(f"Mutation {mutation_id} was already acknowledged")
            return False

        mutation.acknowledge()
        self.store.put(OUTBOX, mutation.model_dump(mode="json"))
        self.audit_logger.log_action(
            action_type=ActionType.MUTATION_ACKNOWLEDGED,
            actor=Actor.SYSTEM,
            details={"mutation_id": mutation_id, "record_id": mutation.record_id},
        )
        return True
