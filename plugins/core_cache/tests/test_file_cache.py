# plugins/core_cache/tests/test_file_cache.py

from pathlib import Path

import pytest

from plugins.core_cache.store import FileSystemCache


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache_dir(tmp_path) -> str:
    return str(tmp_path / "cache")


@pytest.fixture
def cache(cache_dir, clock) -> FileSystemCache:
    return FileSystemCache(cache_dir=cache_dir, clock=clock)


class TestFileSystemCache:

    async def test_set_and_get(self, cache):
        await cache.set("ns", "key", {"a": 1}, ttl=60)
        assert await cache.get("ns", "key") == {"a": 1}

    async def test_missing_entry_returns_none(self, cache):
        assert await cache.get("ns", "missing") is None

    async def test_namespaces_are_isolated(self, cache):
        await cache.set("SupportDataCollector", "DataCollect", "local", ttl=60)
        await cache.set("SupportDataCollect", "DataCollect", "remote", ttl=60)

        assert await cache.get("SupportDataCollector", "DataCollect") == "local"
        assert await cache.get("SupportDataCollect", "DataCollect") == "remote"

    async def test_entries_are_shared_between_instances(self, cache, cache_dir, clock):
        """Web 进程写入的条目，CLI 进程（另一个实例）打开同一目录就能读到。"""
        await cache.set("SupportDataCollector", "DataCollect", {"success": True}, ttl=600)

        other_process = FileSystemCache(cache_dir=cache_dir, clock=clock)
        assert await other_process.get("SupportDataCollector", "DataCollect") == {"success": True}

        await other_process.delete("SupportDataCollector", "DataCollect")
        assert await cache.get("SupportDataCollector", "DataCollect") is None

    async def test_values_are_snapshots(self, cache):
        value = {"findings": [1, 2]}
        await cache.set("ns", "key", value, ttl=60)

        # 修改写入方的对象不影响缓存
        value["findings"].append(3)
        first = await cache.get("ns", "key")
        assert first == {"findings": [1, 2]}

        # 修改读取到的对象也不影响缓存
        first["findings"].clear()
        assert await cache.get("ns", "key") == {"findings": [1, 2]}

    async def test_entry_expires_after_ttl(self, cache, clock):
        await cache.set("ns", "key", "value", ttl=600)

        clock.advance(599)
        assert await cache.get("ns", "key") == "value"

        clock.advance(1)
        assert await cache.get("ns", "key") is None

    async def test_last_write_wins(self, cache):
        await cache.set("ns", "key", "first", ttl=60)
        await cache.set("ns", "key", "second", ttl=60)
        assert await cache.get("ns", "key") == "second"

    @pytest.mark.parametrize("ttl", [0, -1])
    async def test_non_positive_ttl_is_rejected(self, cache, ttl):
        with pytest.raises(ValueError, match="TTL must be positive"):
            await cache.set("ns", "key", "value", ttl=ttl)

    async def test_unreadable_entry_is_a_miss(self, cache, cache_dir):
        await cache.set("ns", "key", "value", ttl=60)
        entry_file = next(Path(cache_dir).rglob("*.json"))
        entry_file.write_text("{corrupt", encoding="utf-8")

        assert await cache.get("ns", "key") is None

        await cache.set("ns", "key", "fresh", ttl=60)
        assert await cache.get("ns", "key") == "fresh"

    async def test_names_with_separators_stay_inside_the_cache_dir(self, cache, tmp_path):
        await cache.set("../outside", "a/b", "value", ttl=60)

        assert await cache.get("../outside", "a/b") == "value"
        assert not (tmp_path / "outside").exists()

    async def test_delete_and_clear(self, cache):
        await cache.set("a", "k1", 1, ttl=60)
        await cache.set("a", "k2", 2, ttl=60)
        await cache.set("b", "k1", 3, ttl=60)

        await cache.delete("a", "k1")
        assert await cache.get("a", "k1") is None
        # 删除不存在的条目不报错
        await cache.delete("a", "k1")

        await cache.clear("a")
        assert await cache.get("a", "k2") is None
        assert await cache.get("b", "k1") == 3

        await cache.clear()
        assert await cache.get("b", "k1") is None
        await cache.clear("never-used")
