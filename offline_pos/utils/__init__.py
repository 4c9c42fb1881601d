"""
Utility functions for the offline POS cache.
"""

from .encryption import (
    generate_encryption_key,
    generate_reference,
)
from .logger import (
    AuditLogger,
    PosLogger,
    get_logger,
    reset_loggers,
)

__all__ = [
    # Encryption
    "generate_encryption_key",
    "generate_reference",
    # Logging
    "PosLogger",
    "AuditLogger",
    "get_logger",
    "reset_loggers",
]
