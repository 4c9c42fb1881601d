"""
API-shaped facade over the local store.
"""

from .offline_api import OfflineAPI, OfflineAPIError, RecordNotFoundError
from .responses import ApiResponse

__all__ = ["OfflineAPI", "OfflineAPIError", "RecordNotFoundError", "ApiResponse"]
