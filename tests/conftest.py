"""Shared fixtures for the WebConvert+ test suite."""

import pytest

from webconvert.core.config import reset_config
from webconvert.core.settings import MemorySettingsStore, Settings
from webconvert.services.rates import RateSnapshot

_ENV_VARS = (
    "WEBCONVERT_TARGET_CURRENCY",
    "WEBCONVERT_UNIT_SYSTEM",
    "WEBCONVERT_TIMEZONE",
    "WEBCONVERT_LOCALE",
    "WEBCONVERT_CONSOLE_LOGS",
)


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep config, state and log files out of the real home directory."""
    monkeypatch.setenv("WEBCONVERT_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("WEBCONVERT_STATE_FILE", str(tmp_path / "state.json"))
    monkeypatch.setenv("WEBCONVERT_CONFIG", str(tmp_path / "config.toml"))
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def test_rates():
    """Small, round-numbered rate table relative to USD."""
    return RateSnapshot(base="USD", date="2024-05-01", rates={"USD": 1, "INR": 83, "EUR": 0.5, "GBP": 0.8})


@pytest.fixture
def configure():
    """Apply a settings snapshot to a converter and mark it ready."""

    def _configure(converter, **settings):
        converter.configure(Settings(**settings))
        converter.initialized = True
        return converter

    return _configure


@pytest.fixture
def memory_store():
    def _make(**values):
        return MemorySettingsStore(values)

    return _make


class FailingStore:
    """Settings store whose reads always fail."""

    async def get(self, keys=None):
        raise OSError("storage unavailable")

    async def set(self, items):
        raise OSError("storage unavailable")

    async def remove(self, keys):
        raise OSError("storage unavailable")


@pytest.fixture
def failing_store():
    return FailingStore()
