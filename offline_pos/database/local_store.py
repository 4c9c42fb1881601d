"""
Local persistent key-value store.

Holds named collections of JSON records in a single SQLite file, optionally
encrypted at rest with Fernet.
"""

import json
import sqlite3
import threading
from contextlib import contextmanager
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Union

from cryptography.fernet import Fernet, InvalidToken

from ..utils import get_logger

# Primary-key field of each known collection.
COLLECTION_KEYS: Dict[str, str] = {
    "items": "id",
    "categories": "id",
    "orders": "id",
    "users": "id",
    "metadata": "key",
    "outbox": "id",
    "audit_log": "log_id",
}

DATA_COLLECTIONS = ("items", "categories", "orders", "users")

# Wiped by clear() on logout/reset; the audit trail survives.
CLEARABLE_COLLECTIONS = DATA_COLLECTIONS + ("metadata", "outbox")


class StoreError(Exception):
    """Raised when the underlying storage engine fails."""
    pass


class UnknownCollectionError(StoreError):
    """Raised for a collection name the store does not know."""
    pass


class InvalidRecordError(StoreError):
    """Raised for a record without a usable primary key or payload."""
    pass


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class LocalStore:
    """
    Collection-scoped key-value store backed by SQLite.

    Each public call runs in its own connection and commits on return,
    unless it is made inside ``transaction()``, in which case all calls share
    one connection and commit or roll back together.
    """

    def __init__(
        self,
        db_path: Union[str, Path],
        encryption_key: Optional[Union[str, bytes]] = None,
        timeout: float = 5.0
    ) -> None:
        """
        Initialize the store.

        Args:
            db_path: Path to the SQLite file
            encryption_key: Fernet key; payloads are stored in plain JSON when None
            timeout: Seconds to wait on a locked database
        """
        self.db_path = Path(db_path)
        self.timeout = timeout
        self.is_encrypted = encryption_key is not None
        try:
            self._cipher = Fernet(encryption_key) if encryption_key is not None else None
        except ValueError as e:
            raise StoreError(f"Invalid store encryption key: {e}") from e
        self._local = threading.local()
        self.logger = get_logger("local_store")

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.schema_path = Path(__file__).parent / "schema.sql"

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path), timeout=self.timeout)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def get_connection(self) -> Iterator[sqlite3.Connection]:
        """
        Context manager for database connections.

        Yields the open transaction's connection when one is active.
        """
        active = getattr(self._local, "connection", None)
        if active is not None:
            yield active
            return

        conn = self._connect()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Iterator["LocalStore"]:
        """
        Group store calls into one atomic unit.

        Nested calls join the outermost transaction.

        Yields:
            This store
        """
        if getattr(self._local, "connection", None) is not None:
            yield self
            return

        try:
            conn = self._connect()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to open transaction: {e}") from e

        self._local.connection = conn
        try:
            yield self
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            self._local.connection = None
            conn.close()

    @contextmanager
    def _storage_errors(self, action: str) -> Iterator[None]:
        try:
            yield
        except StoreError:
            raise
        except (sqlite3.Error, InvalidToken, json.JSONDecodeError) as e:
            self.logger.error(f"Store failed to {action}: {e}")
            raise StoreError(f"Failed to {action}: {e}") from e

    def initialize(self) -> None:
        """
        Create the schema if it does not exist.

        Raises:
            FileNotFoundError: If schema.sql is missing
            StoreError: If the database cannot be opened
        """
        if not self.schema_path.exists():
            raise FileNotFoundError(f"Schema file not found: {self.schema_path}")

        with open(self.schema_path, 'r') as f:
            schema_sql = f.read()

        with self._storage_errors("initialize schema"):
            with self.get_connection() as conn:
                conn.executescript(schema_sql)

        self.logger.info(
            f"Local store ready at {self.db_path} "
            f"(encryption {'ENABLED' if self.is_encrypted else 'DISABLED'})"
        )

    def _check_collection(self, collection: str) -> str:
        if collection not in COLLECTION_KEYS:
            raise UnknownCollectionError(f"Unknown collection: {collection}")
        return COLLECTION_KEYS[collection]

    def _record_key(self, collection: str, record: Dict[str, Any]) -> str:
        key_field = self._check_collection(collection)
        if not isinstance(record, dict):
            raise InvalidRecordError(f"Records must be dicts, got {type(record).__name__}")
        key = record.get(key_field)
        if key is None or key == "":
            raise InvalidRecordError(
                f"Record for '{collection}' is missing its key field '{key_field}'"
            )
        return str(key)

    def _encode(self, record: Dict[str, Any]) -> str:
        try:
            text = json.dumps(record, default=_json_default)
        except (TypeError, ValueError) as e:
            raise InvalidRecordError(f"Record is not JSON serializable: {e}") from e
        if self._cipher is None:
            return text
        return self._cipher.encrypt(text.encode("utf-8")).decode("ascii")

    def _decode(self, payload: str) -> Dict[str, Any]:
        if self._cipher is not None:
            payload = self._cipher.decrypt(payload.encode("ascii")).decode("utf-8")
        return json.loads(payload)

    def _upsert_rows(self, collection: str, records: Iterable[Dict[str, Any]]) -> List[tuple]:
        now = datetime.now().isoformat()
        return [
            (collection, self._record_key(collection, record), self._encode(record), now)
            for record in records
        ]

    _UPSERT = """
        INSERT INTO records (collection, record_key, payload, updated_at)
        VALUES (?, ?, ?, ?)
        ON CONFLICT (collection, record_key)
        DO UPDATE SET payload = excluded.payload, updated_at = excluded.updated_at
    """

    def put(self, collection: str, record: Dict[str, Any]) -> None:
        """
        Insert or overwrite a record by its primary key.

        Args:
            collection: Collection name
            record: JSON-compatible dict carrying the collection's key field
        """
        rows = self._upsert_rows(collection, [record])
        with self._storage_errors(f"write to '{collection}'"):
            with self.get_connection() as conn:
                conn.execute(self._UPSERT, rows[0])

    def put_many(self, collection: str, records: Sequence[Dict[str, Any]]) -> int:
        """
        Bulk variant of put; all writes commit together.

        Returns:
            Number of records written
        """
        rows = self._upsert_rows(collection, records)
        if not rows:
            self._check_collection(collection)
            return 0

        with self._storage_errors(f"bulk write to '{collection}'"):
            with self.get_connection() as conn:
                conn.executemany(self._UPSERT, rows)
        return len(rows)

    def get(
        self,
        collection: str,
        key: Optional[str] = None
    ) -> Union[Optional[Dict[str, Any]], List[Dict[str, Any]]]:
        """
        Read one record, or the whole collection.

        Args:
            collection: Collection name
            key: Record key; omit to read every record

        Returns:
            The record or None when a key is given, otherwise a list of all
            records in insertion order
        """
        self._check_collection(collection)

        with self._storage_errors(f"read from '{collection}'"):
            with self.get_connection() as conn:
                if key is not None:
                    row = conn.execute(
                        "SELECT payload FROM records WHERE collection = ? AND record_key = ?",
                        (collection, str(key)),
                    ).fetchone()
                    return self._decode(row["payload"]) if row else None

                rows = conn.execute(
                    "SELECT payload FROM records WHERE collection = ? ORDER BY rowid",
                    (collection,),
                ).fetchall()
                return [self._decode(row["payload"]) for row in rows]

    def delete(self, collection: str, key: str) -> bool:
        """
        Physically remove a record.

        Returns:
            True if a record was removed
        """
        self._check_collection(collection)
        with self._storage_errors(f"delete from '{collection}'"):
            with self.get_connection() as conn:
                cursor = conn.execute(
                    "DELETE FROM records WHERE collection = ? AND record_key = ?",
                    (collection, str(key)),
                )
                return cursor.rowcount > 0

    def count(self, collection: str) -> int:
        self._check_collection(collection)
        with self._storage_errors(f"count '{collection}'"):
            with self.get_connection() as conn:
                row = conn.execute(
                    "SELECT COUNT(*) AS count FROM records WHERE collection = ?",
                    (collection,),
                ).fetchone()
                return row["count"]

    def clear(self, collections: Optional[Sequence[str]] = None) -> int:
        """
        Wipe collections; defaults to every clearable collection.

        Returns:
            Number of records removed
        """
        names = tuple(collections) if collections is not None else CLEARABLE_COLLECTIONS
        for name in names:
            self._check_collection(name)
        if not names:
            return 0

        placeholders = ", ".join("?" for _ in names)
        with self._storage_errors("clear collections"):
            with self.get_connection() as conn:
                cursor = conn.execute(
                    f"DELETE FROM records WHERE collection IN ({placeholders})",
                    names,
                )
                removed = cursor.rowcount

        self.logger.info(f"Cleared {removed} records from {', '.join(names)}")
        return removed

    def verify_encryption(self) -> bool:
        """
        Verify that stored payloads decrypt with the configured key.

        Returns:
            True if the store is encrypted and every payload sampled decrypts
        """
        if not self.is_encrypted:
            return False

        try:
            with self.get_connection() as conn:
                rows = conn.execute("SELECT payload FROM records LIMIT 10").fetchall()
            for row in rows:
                self._decode(row["payload"])
            return True
        except (sqlite3.Error, InvalidToken, json.JSONDecodeError):
            return False

    def vacuum(self) -> None:
        """Vacuum the database to reclaim space."""
        with self._storage_errors("vacuum"):
            conn = self._connect()
            try:
                conn.execute("VACUUM")
            finally:
                conn.close()

    def backup(self, backup_path: Union[str, Path]) -> None:
        """
        Copy the database to another file.

        Encrypted payloads stay encrypted in the copy.
        """
        with self._storage_errors("back up store"):
            with self.get_connection() as source:
                backup_conn = sqlite3.connect(str(backup_path))
                try:
                    source.backup(backup_conn)
                finally:
                    backup_conn.close()

        self.logger.info(f"Local store backed up to: {backup_path}")


def create_local_store(
    db_path: Union[str, Path] = "data/offline_pos.db",
    encryption_key: Optional[Union[str, bytes]] = None
) -> LocalStore:
    """
    Factory function to create an initialized LocalStore.

    Args:
        db_path: Path to database file
        encryption_key: Fernet key (None stores plain JSON)

    Returns:
        Ready-to-use LocalStore
    """
    store = LocalStore(db_path, encryption_key)
    store.initialize()
    return store
