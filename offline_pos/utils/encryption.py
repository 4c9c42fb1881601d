"""
Encryption and identifier helpers for the offline POS cache.
"""

import secrets
import string

from cryptography.fernet import Fernet

REFERENCE_ALPHABET = string.digits + string.ascii_uppercase


def generate_encryption_key() -> bytes:
    """
    Generate a new Fernet encryption key.

    Returns:
        Encryption key bytes
    """
    return Fernet.generate_key()


def generate_reference(prefix: str, length: int = 6) -> str:
    """
    Generate a human-readable local identifier, e.g. "MA-JAF-4K9Z2Q".

    Args:
        prefix: Leading label, joined to the random part with "-"
        length: Number of base-36 characters in the random part

    Returns:
        Identifier string
    """
    suffix = "".join(secrets.choice(REFERENCE_ALPHABET) for _ in range(length))
    return f"{prefix}-{suffix}" if prefix else suffix
