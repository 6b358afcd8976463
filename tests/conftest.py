"""Shared fixtures for the Hifz tracker tests.

Tests are organized by layer (core, web, cli). Statistics are computed
against a pinned "today" so day windows are deterministic.
"""

from datetime import date, datetime, timezone

import pytest
from fastapi.testclient import TestClient

from hifz.config.app_config import AppConfig, LoggingConfig, clear_config_cache
from hifz.core.seed import seed_sample_data
from hifz.core.stats import StatsEngine
from hifz.core.store import HifzStore
from hifz.web.api import create_app

# Friday
TODAY = date(2024, 3, 15)
NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)

TEACHER_HEADERS = {"X-User-Id": "1"}
STUDENT_HEADERS = {"X-User-Id": "2"}


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Keep HIFZ_* environment and the config cache out of every test."""
    for name in ("HIFZ_CONFIG", "HIFZ_LOG_LEVEL", "HIFZ_SEED_SAMPLE_DATA"):
        monkeypatch.delenv(name, raising=False)
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def store():
    """Empty store."""
    return HifzStore()


@pytest.fixture
def engine(store):
    """Stats engine over ``store`` with today pinned."""
    return StatsEngine(store, today=lambda: TODAY)


@pytest.fixture
def seeded_store():
    """Store holding the sample data, relative to NOW."""
    return seed_sample_data(HifzStore(), now=NOW)


@pytest.fixture
def app_config():
    return AppConfig(seed_sample_data=False, logging=LoggingConfig(level="WARNING"))


def _client_for(store: HifzStore, config: AppConfig) -> TestClient:
    app = create_app(config=config, store=store)
    app.state.stats = StatsEngine(store, today=lambda: TODAY)
    return TestClient(app)


@pytest.fixture
def client(seeded_store, app_config):
    """Test client serving the sample data."""
    return _client_for(seeded_store, app_config)


@pytest.fixture
def empty_client(store, app_config):
    """Test client serving an empty store."""
    return _client_for(store, app_config)
