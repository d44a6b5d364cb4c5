import sys
from pathlib import Path

import pytest

# Make tests/fakes.py importable regardless of pytest import mode
sys.path.insert(0, str(Path(__file__).parent))

from core.config_provider import ConfigProvider, ConfigSnapshot
from core.session_lifecycle import SessionLifecycleOrchestrator
from fakes import FakeEngineFactory


@pytest.fixture(autouse=True)
def reset_singletons():
    """Process-wide singletons must not leak between tests."""
    ConfigProvider.reset()
    SessionLifecycleOrchestrator.reset()
    yield
    ConfigProvider.reset()
    SessionLifecycleOrchestrator.reset()


@pytest.fixture
def traces_dir(tmp_path):
    return tmp_path / "traces"


@pytest.fixture
def make_config(tmp_path, traces_dir):
    """Factory for snapshots with test-friendly defaults."""
    def _factory(**overrides):
        values = {
            "browser": "chromium",
            "headless": "true",
            "downloads.path": str(tmp_path / "downloads"),
            "traces.dir": str(traces_dir),
            "base.url": "http://localhost:3000",
        }
        values.update(overrides)
        return ConfigSnapshot({k: v for k, v in values.items() if v is not None})
    return _factory


@pytest.fixture
def engine_factory():
    return FakeEngineFactory()


@pytest.fixture
def lifecycle(make_config, engine_factory):
    return SessionLifecycleOrchestrator(config=make_config(), engine_factory=engine_factory)
