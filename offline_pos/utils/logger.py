"""
Logging infrastructure for the offline POS cache.

Provides file/console logging with rotation and an audit trail that can be
mirrored into the local store.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from ..config.config_manager import get_config_manager
from ..models.audit_log import ActionType, Actor, Outcome, create_audit_log


class PosLogger:
    """
    Application logger.

    Provides both file and console logging with proper formatting.
    """

    def __init__(
        self,
        name: str = "offline_pos",
        log_dir: Optional[str] = None,
        log_file: str = "offline_pos.log"
    ) -> None:
        """
        Initialize logger.

        Args:
            name: Logger name
            log_dir: Directory for log files (defaults to logging.log_dir)
            log_file: Log file name
        """
        config = get_config_manager()
        self.log_level = config.get("logging.level", "INFO")
        self.max_file_size_mb = config.get("logging.max_file_size_mb", 10)
        self.backup_count = config.get("logging.backup_count", 5)

        self.name = name
        self.log_dir = Path(log_dir or config.get("logging.log_dir", "logs"))
        self.log_file = self.log_dir / log_file
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, self.log_level))
        self.logger.propagate = False

        for handler in list(self.logger.handlers):
            handler.close()
        self.logger.handlers.clear()

        self.file_formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        self.console_formatter = logging.Formatter(
            fmt='%(asctime)s - %(levelname)s - %(message)s',
            datefmt='%H:%M:%S'
        )

        self._setup_file_handler()
        self._setup_console_handler()

    def _setup_file_handler(self) -> None:
        """Set up rotating file handler."""
        max_bytes = self.max_file_size_mb * 1024 * 1024

        file_handler = RotatingFileHandler(
            self.log_file,
            maxBytes=max_bytes,
            backupCount=self.backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(self.file_formatter)

        self.logger.addHandler(file_handler)

    def _setup_console_handler(self) -> None:
        """Set up console handler."""
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(getattr(logging, self.log_level))
        console_handler.setFormatter(self.console_formatter)

        self.logger.addHandler(console_handler)

    def get_logger(self) -> logging.Logger:
        return self.logger

    def close(self) -> None:
        """Detach and close all handlers."""
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)


class AuditLogger:
    """
    Audit logger for domain actions.

    Every entry goes to the "audit" log; when a store is attached it is also
    written to the store's audit_log collection.
    """

    COLLECTION = "audit_log"

    def __init__(self, store=None) -> None:
        """
        Initialize audit logger.

        Args:
            store: LocalStore instance (optional)
        """
        self.store = store
        self.file_logger = get_logger("audit")

    def log_action(
        self,
        action_type: ActionType,
        actor: Actor = Actor.USER,
        details: Optional[Dict[str, Any]] = None,
        outcome: Outcome = Outcome.SUCCESS,
        item_id: Optional[str] = None,
        order_id: Optional[str] = None,
        error_message: Optional[str] = None
    ) -> None:
        """
        Log an action to the audit trail.

        Args:
            action_type: Type of action
            actor: Who performed the action
            details: Additional details
            outcome: Action outcome
            item_id: Related item ID
            order_id: Related order ID
            error_message: Error message if failed
        """
        entry = create_audit_log(
            action_type=action_type,
            actor=actor,
            details=details,
            item_id=item_id,
            order_id=order_id
        )
        if outcome == Outcome.FAILURE:
            entry.set_failure(error_message or "unknown error")
        else:
            entry.outcome = outcome

        self.file_logger.info(
            f"AUDIT: {entry.action_type.value} by {entry.actor.value} - {entry.outcome.value}"
        )

        if self.store is None:
            return

        # Imported here to keep utils free of a hard dependency on the database package.
        from ..database.local_store import StoreError

        try:
            self.store.put(self.COLLECTION, entry.model_dump(mode="json"))
        except StoreError as e:
            self.file_logger.error(f"Failed to write audit log to store: {e}")

    def get_recent_logs(self, limit: int = 100) -> list:
        """
        Get recent audit logs from the store, newest first.

        Args:
            limit: Maximum number of logs to retrieve

        Returns:
            List of audit log entries
        """
        if self.store is None:
            return []

        entries = self.store.get(self.COLLECTION) or []
        entries.sort(key=lambda entry: entry.get("timestamp", ""), reverse=True)
        return entries[:limit]


_loggers: Dict[str, PosLogger] = {}


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get application logger.

    Args:
        name: Optional logger name (defaults to offline_pos)

    Returns:
        Logger instance
    """
    name = name or "offline_pos"
    if name not in _loggers:
        _loggers[name] = PosLogger(name)
    return _loggers[name].get_logger()


def reset_loggers() -> None:
    """Close and forget all logger instances (mainly for testing)."""
    for pos_logger in _loggers.values():
        pos_logger.close()
    _loggers.clear()
