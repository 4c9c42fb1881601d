"""
Tests for the command line entry point.
"""

import pytest

from offline_pos.config import get_config_manager
from offline_pos.main import OfflinePOSApplication, build_parser, main
from offline_pos.utils import generate_encryption_key


class TestApplication:

    @pytest.fixture(autouse=True)
    def setup(self, tmp_path):
        self.config_dir = str(tmp_path / "config")

    def test_initialize_seeds_store(self):
        app = OfflinePOSApplication(config_dir=self.config_dir)

        assert app.initialize() is True
        assert len(app.api.get_items().data) == 10
        app.shutdown()

    def test_initialize_without_seed(self):
        app = OfflinePOSApplication(config_dir=self.config_dir)

        assert app.initialize(seed=False) is True
        assert app.api.get_items().data == []

    def test_encrypted_store_requires_key(self):
        app = OfflinePOSApplication(config_dir=self.config_dir)
        app.config.set("database.encrypted", True)

        assert app.initialize() is False

    def test_encrypted_store_with_key(self):
        app = OfflinePOSApplication(config_dir=self.config_dir)
        app.config.set("database.encrypted", True)
        app.config.set_store_encryption_key(generate_encryption_key().decode())

        assert app.initialize() is True
        assert app.store.verify_encryption() is True


class TestCommandLine:

    @pytest.fixture(autouse=True)
    def setup(self, tmp_path):
        self.base = ["--config-dir", str(tmp_path / "config")]

    def test_parser_requires_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_status(self, capsys):
        assert main(self.base + ["status"]) == 0
        assert '"pending_mutations": 0' in capsys.readouterr().out

    def test_items_active(self, capsys):
        assert main(self.base + ["items", "--active"]) == 0
        assert "Jollof Rice" in capsys.readouterr().out

    def test_reset_requires_confirmation(self, capsys):
        assert main(self.base + ["reset"]) == 1
        assert "--yes" in capsys.readouterr().err

    def test_reset_then_seed(self, capsys):
        assert main(self.base + ["dashboard"]) == 0
        assert main(self.base + ["reset", "--yes"]) == 0
        assert main(self.base + ["--no-seed", "items"]) == 0
        capsys.readouterr()

        assert main(self.base + ["seed"]) == 0
        assert "Sample data imported" in capsys.readouterr().out

    def test_sales_by_day(self, capsys):
        assert main(self.base + ["sales", "--by-day"]) == 0
        assert '"amount"' in capsys.readouterr().out

    def test_audit_lists_startup(self, capsys):
        assert main(self.base + ["audit", "--limit", "5"]) == 0
        assert "SYSTEM: System Startup - SUCCESS" in capsys.readouterr().out

    def test_backup_and_vacuum(self, tmp_path):
        backup_path = tmp_path / "backup.db"

        assert main(self.base + ["backup", str(backup_path)]) == 0
        assert main(self.base + ["vacuum"]) == 0
        assert backup_path.exists()

    def test_keygen_enables_encryption_once(self, tmp_path, capsys):
        assert main(self.base + ["keygen"]) == 0
        assert main(self.base + ["keygen"]) == 1

        config = get_config_manager()
        assert config.get("database.encrypted") is True
        assert config.get_store_encryption_key() is not None

    def test_malformed_store_key_fails_cleanly(self, capsys):
        config = get_config_manager(self.base[1])
        config.set("database.encrypted", True)
        config.set_store_encryption_key("not-a-fernet-key")

        assert main(self.base + ["status"]) == 1
        assert "initialization failed" in capsys.readouterr().err
