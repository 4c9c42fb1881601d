"""
Local persistence for the offline POS cache.
"""

from .local_store import (
    CLEARABLE_COLLECTIONS,
    COLLECTION_KEYS,
    DATA_COLLECTIONS,
    InvalidRecordError,
    LocalStore,
    StoreError,
    UnknownCollectionError,
    create_local_store,
)

__all__ = [
    "LocalStore",
    "create_local_store",
    "StoreError",
    "UnknownCollectionError",
    "InvalidRecordError",
    "COLLECTION_KEYS",
    "DATA_COLLECTIONS",
    "CLEARABLE_COLLECTIONS",
]
