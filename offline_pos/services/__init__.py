"""
Business logic services for the offline POS cache.

CartService sits on top of the API facade; import it from
``offline_pos.services.cart_service``.
"""

from .connectivity_service import ConnectivityMonitor
from .offline_service import OfflineDataService

__all__ = ["ConnectivityMonitor", "OfflineDataService"]
