"""
Configuration management for the offline POS cache.

Handles application settings and encrypted credential storage.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from cryptography.fernet import Fernet

CONFIG_DIR_ENV = "OFFLINE_POS_CONFIG_DIR"


class ConfigManager:
    """
    Manages application configuration and settings.

    Provides secure storage for sensitive data like the store encryption key.
    """

    def __init__(self, config_dir: str = "config") -> None:
        """
        Initialize configuration manager.

        Args:
            config_dir: Directory for configuration files
        """
        self.config_dir = Path(config_dir)
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self.config_file = self.config_dir / "app_config.json"
        self.credentials_file = self.config_dir / "credentials.enc"
        self.key_file = self.config_dir / ".key"

        self.config: Dict[str, Any] = {}
        self.credentials: Dict[str, Any] = {}

        self._init_encryption()
        self.load_config()

    def _init_encryption(self) -> None:
        """Initialize encryption for credentials."""
        if self.key_file.exists():
            with open(self.key_file, 'rb') as f:
                self.encryption_key = f.read()
        else:
            self.encryption_key = Fernet.generate_key()
            with open(self.key_file, 'wb') as f:
                f.write(self.encryption_key)
            if os.name != 'nt':
                os.chmod(self.key_file, 0o600)

        self.cipher = Fernet(self.encryption_key)

    def load_config(self) -> None:
        """Load configuration from files."""
        if self.config_file.exists():
            with open(self.config_file, 'r') as f:
                self.config = json.load(f)
        else:
            self.config = self._get_default_config()
            self.save_config()

        if self.credentials_file.exists():
            with open(self.credentials_file, 'rb') as f:
                encrypted_data = f.read()
            decrypted_data = self.cipher.decrypt(encrypted_data)
            self.credentials = json.loads(decrypted_data.decode())

    def save_config(self) -> None:
        """Save configuration to file."""
        with open(self.config_file, 'w') as f:
            json.dump(self.config, f, indent=2)

    def save_credentials(self) -> None:
        """Save encrypted credentials to file."""
        json_data = json.dumps(self.credentials).encode()
        encrypted_data = self.cipher.encrypt(json_data)

        with open(self.credentials_file, 'wb') as f:
            f.write(encrypted_data)

        if os.name != 'nt':
            os.chmod(self.credentials_file, 0o600)

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration."""
        return {
            "app_version": "0.1.0",
            "database": {
                "path": "data/offline_pos.db",
                "encrypted": False
            },
            "offline": {
                # Single connectivity toggle; the register runs disconnected
                # until this is switched off and api_url points at a backend.
                "force_offline": True,
                "api_url": "http://localhost:5000",
                "health_endpoint": "/api/health",
                "timeout_seconds": 3,
                "check_interval_seconds": 30
            },
            "seeding": {
                "enabled": True
            },
            "orders": {
                "id_prefix": "MA-JAF",
                "default_payment_method": "cash"
            },
            "logging": {
                "level": "INFO",
                "log_dir": "logs",
                "max_file_size_mb": 10,
                "backup_count": 5
            }
        }

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value.

        Args:
            key: Configuration key (supports dot notation, e.g., "database.path")
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    def set(self, key: str, value: Any, save: bool = True) -> None:
        """
        Set configuration value.

        Args:
            key: Configuration key (supports dot notation)
            value: Value to set
            save: Whether to save immediately
        """
        keys = key.split('.')
        config = self.config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

        if save:
            self.save_config()

    def get_credential(self, key: str) -> Optional[str]:
        """Get encrypted credential."""
        return self.credentials.get(key)

    def set_credential(self, key: str, value: str, save: bool = True) -> None:
        """
        Set encrypted credential.

        Args:
            key: Credential key
            value: Credential value
            save: Whether to save immediately
        """
        self.credentials[key] = value
        if save:
            self.save_credentials()

    def remove_credential(self, key: str, save: bool = True) -> bool:
        """
        Remove a credential.

        Returns:
            True if credential was removed
        """
        if key in self.credentials:
            del self.credentials[key]
            if save:
                self.save_credentials()
            return True
        return False

    def has_credential(self, key: str) -> bool:
        return key in self.credentials

    def reset_to_defaults(self) -> None:
        """Reset configuration to defaults."""
        self.config = self._get_default_config()
        self.save_config()

    def get_store_encryption_key(self) -> Optional[str]:
        """
        Get the local store encryption key.

        Returns:
            Fernet key as text, or None if not set
        """
        return self.get_credential("store_encryption_key")

    def set_store_encryption_key(self, key: str) -> None:
        self.set_credential("store_encryption_key", key)


_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_dir: Optional[str] = None) -> ConfigManager:
    """
    Get global configuration manager instance.

    Args:
        config_dir: Directory to load from on first use; falls back to
            $OFFLINE_POS_CONFIG_DIR, then "config"

    Returns:
        ConfigManager instance
    """
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager(
            config_dir or os.environ.get(CONFIG_DIR_ENV, "config")
        )
    return _config_manager


def reset_config_manager() -> None:
    """Reset global configuration manager (mainly for testing)."""
    global _config_manager
    _config_manager = None
