"""
Shared fixtures: every test runs in its own working directory so config,
logs and store files never leak between tests.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from offline_pos.api import OfflineAPI
from offline_pos.config import CONFIG_DIR_ENV, reset_config_manager
from offline_pos.database import create_local_store
from offline_pos.services import OfflineDataService
from offline_pos.utils import reset_loggers


@pytest.fixture(autouse=True)
def isolated_workdir(tmp_path, monkeypatch):
    """Run each test from an empty directory with fresh config and loggers."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(CONFIG_DIR_ENV, raising=False)
    reset_config_manager()
    reset_loggers()
    yield tmp_path
    reset_loggers()
    reset_config_manager()


@pytest.fixture
def store(tmp_path):
    return create_local_store(tmp_path / "data" / "test.db")


@pytest.fixture
def seeded_service(store):
    return OfflineDataService(store)


@pytest.fixture
def empty_service(store):
    return OfflineDataService(store, seed_sample_data=False)


@pytest.fixture
def seeded_api(seeded_service):
    return OfflineAPI(seeded_service)


@pytest.fixture
def empty_api(empty_service):
    return OfflineAPI(empty_service)
