# plugins/core_cache/contracts.py

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Optional


class CacheInterface(ABC):
    """
    跨进程共享的缓存：值按 (namespace, key) 存放，并带有 TTL（秒）。值必须可以序列化为 JSON。
    写入是“最后写入者胜出”的快照，不做合并。
    """
    @abstractmethod
    async def get(self, namespace: str, key: str) -> Optional[Any]:
        raise NotImplementedError

    @abstractmethod
    async def set(self, namespace: str, key: str, value: Any, ttl: int) -> None:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, namespace: str, key: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def clear(self, namespace: Optional[str] = None) -> None:
        raise NotImplementedError
