# plugins/core_support_data/tests/conftest.py

from typing import List

import pytest

from plugins.core_cache.store import FileSystemCache
from plugins.core_config.contracts import AppConfig, SupportDataConfig
from plugins.core_support_data.contracts import PluginContext
from plugins.core_support_data.tests.support_fakes import FakeClock, FakeDatabase, FakeEnvironment


@pytest.fixture
def run_log() -> List[str]:
    """插件运行时把自己的 identifier 追加到这里，用于断言执行顺序和次数。"""
    return []


@pytest.fixture
def fake_database() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def fake_environment() -> FakeEnvironment:
    return FakeEnvironment()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock, tmp_path) -> FileSystemCache:
    return FileSystemCache(cache_dir=str(tmp_path / "cache"), clock=clock)


@pytest.fixture
def app_config(tmp_path) -> AppConfig:
    return AppConfig(home=str(tmp_path), support_data=SupportDataConfig())


@pytest.fixture
def plugin_context(fake_database, app_config, fake_environment) -> PluginContext:
    return PluginContext(database=fake_database, config=app_config, environment=fake_environment)
