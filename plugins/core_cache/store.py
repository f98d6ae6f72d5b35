# plugins/core_cache/store.py
import asyncio
import json
import time
import shutil
import logging
from pathlib import Path
from typing import Any, Callable, Optional
from urllib.parse import quote

import aiofiles

from .contracts import CacheInterface

logger = logging.getLogger(__name__)


class FileSystemCache(CacheInterface):
    """
    把缓存条目保存在 `<cache_dir>/<namespace>/<key>.json` 中。
    - Web 进程和 CLI 进程共享同一个目录：CLI 的 collect(use_cache=True)
      能读到 Web 进程最近一次本地收集写入的结果。
    - 值以 JSON 存储，读写天然是快照，调用方修改拿到的对象不会影响缓存。
    - 过期时间使用墙钟（跨进程可比较），过期条目在读取时惰性删除。
    """
    def __init__(self, cache_dir: str, clock: Callable[[], float] = time.time):
        self._cache_dir = Path(cache_dir)
        self._cache_dir.mkdir(parents=True, exist_ok=True)
        self._clock = clock
        logger.info(f"FileSystemCache initialized. Directory: {self._cache_dir.resolve()}")

    def _namespace_dir(self, namespace: str) -> Path:
        return self._cache_dir / quote(namespace, safe="")

    def _entry_path(self, namespace: str, key: str) -> Path:
        return self._namespace_dir(namespace) / f"{quote(key, safe='')}.json"

    async def get(self, namespace: str, key: str) -> Optional[Any]:
        path = self._entry_path(namespace, key)
        if not path.is_file():
            return None

        async with aiofiles.open(path, mode='r', encoding='utf-8') as f:
            content = await f.read()
        try:
            entry = json.loads(content)
            expires_at = float(entry["expires_at"])
            value = entry["value"]
        except (ValueError, TypeError, KeyError) as e:
            # 损坏的条目等同于未命中，下一次 set 会覆盖它
            logger.warning(f"Ignoring unreadable cache entry '{namespace}/{key}': {e}")
            return None

        if self._clock() >= expires_at:
            path.unlink(missing_ok=True)
            logger.debug(f"Cache entry '{namespace}/{key}' expired.")
            return None
        return value

    async def set(self, namespace: str, key: str, value: Any, ttl: int) -> None:
        if ttl <= 0:
            raise ValueError(f"TTL must be positive, got {ttl}.")

        path = self._entry_path(namespace, key)
        path.parent.mkdir(parents=True, exist_ok=True)
        content = json.dumps({"expires_at": self._clock() + ttl, "value": value})

        # 先写临时文件再替换，另一个进程不会读到写了一半的条目
        tmp_path = path.with_suffix(".json.tmp")
        async with aiofiles.open(tmp_path, mode='w', encoding='utf-8') as f:
            await f.write(content)
        tmp_path.replace(path)
        logger.debug(f"Cache entry '{namespace}/{key}' set with TTL {ttl}s.")

    async def delete(self, namespace: str, key: str) -> None:
        self._entry_path(namespace, key).unlink(missing_ok=True)

    async def clear(self, namespace: Optional[str] = None) -> None:
        target = self._cache_dir if namespace is None else self._namespace_dir(namespace)
        if not target.is_dir():
            return
        if namespace is None:
            for child in list(target.iterdir()):
                if child.is_dir():
                    await asyncio.to_thread(shutil.rmtree, child)
                else:
                    child.unlink(missing_ok=True)
        else:
            await asyncio.to_thread(shutil.rmtree, target)
