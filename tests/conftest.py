"""
Shared fixtures for redis-scripts tests
Provides temporary script directories and an in-memory Redis
"""
from pathlib import Path

import fakeredis
import pytest

import redis_scripts.registry as registry_module
from core.config import get_settings
from redis_scripts import reset_scripts


@pytest.fixture(autouse=True)
def isolate_global_state():
    """Reset process-wide defaults so tests cannot leak search paths or settings"""
    saved = registry_module.DEFAULT_SEARCH_PATH
    registry_module.DEFAULT_SEARCH_PATH = None
    get_settings.cache_clear()
    reset_scripts()
    yield
    registry_module.DEFAULT_SEARCH_PATH = saved
    get_settings.cache_clear()
    reset_scripts()


@pytest.fixture
def write_script(tmp_path):
    """Write a .lua file below tmp_path and return its path"""

    def _write(relative: str, content: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def fake_redis():
    """In-memory Redis with Lua scripting support"""
    client = fakeredis.FakeRedis(decode_responses=True)
    client.script_flush()
    yield client
    client.flushall()
