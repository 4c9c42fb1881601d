"""
Connectivity detection for the offline cache.

The register is forced offline by default. Switching ``force_offline`` off
makes the monitor probe the backend's health endpoint instead.
"""

import time
from typing import Optional
from urllib.parse import urljoin

import requests

from ..utils import get_logger


class ConnectivityMonitor:
    """Reports whether the remote API should be treated as unreachable."""

    def __init__(
        self,
        force_offline: bool = True,
        api_url: Optional[str] = None,
        health_endpoint: str = "/api/health",
        timeout_seconds: float = 3,
        check_interval_seconds: float = 30,
    ):
        """
        Initialize connectivity monitor.

        Args:
            force_offline: Report offline without probing
            api_url: Base URL of the backend API
            health_endpoint: Path probed for reachability
            timeout_seconds: HTTP timeout for the probe
            check_interval_seconds: How long a probe result is reused
        """
        self.force_offline = force_offline
        self.api_url = api_url
        self.health_endpoint = health_endpoint
        self.timeout = timeout_seconds
        self.check_interval = check_interval_seconds

        self.logger = get_logger("connectivity_service")

        self._last_result: Optional[bool] = None
        self._last_checked: Optional[float] = None

    @classmethod
    def from_config(cls, config) -> "ConnectivityMonitor":
        """Build a monitor from the ``offline`` config section."""
        return cls(
            force_offline=config.get("offline.force_offline", True),
            api_url=config.get("offline.api_url"),
            health_endpoint=config.get("offline.health_endpoint", "/api/health"),
            timeout_seconds=config.get("offline.timeout_seconds", 3),
            check_interval_seconds=config.get("offline.check_interval_seconds", 30),
        )

    def set_force_offline(self, force_offline: bool) -> None:
        self.force_offline = force_offline
        self._last_result = None
        self._last_checked = None
        self.logger.info(f"Forced offline mode {'enabled' if force_offline else 'disabled'}")

    def is_offline(self) -> bool:
        """
        Check whether the app should behave as disconnected.

        Returns:
            True when forced, unconfigured, or the backend is unreachable
        """
        if self.force_offline or not self.api_url:
            return True

        now = time.monotonic()
        if (
            self._last_result is not None
            and self._last_checked is not None
            and now - self._last_checked < self.check_interval
        ):
            return not self._last_result

        self._last_result = self._probe()
        self._last_checked = now
        return not self._last_result

    def is_online(self) -> bool:
        return not self.is_offline()

    def _probe(self) -> bool:
        """Hit the health endpoint; True when it answers with a 2xx."""
        url = urljoin(self.api_url, self.health_endpoint)
        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
            self.logger.debug(f"Backend reachable at {url}")
            return True
        except requests.RequestException as e:
            self.logger.warning(f"Backend unreachable at {url}: {e}")
            return False
