"""
Offline-first local cache for a restaurant point-of-sale register.
"""

__version__ = "0.1.0"
