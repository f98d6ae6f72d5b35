# plugins/core_system_data/contracts.py

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Dict, Optional


class SystemDataError(Exception):
    pass


class SystemDataInterface(ABC):
    """
    系统级的持久化键值存储（例如远程回退使用的 ChallengeToken）。
    add 只能创建新键，update 只能修改已存在的键。
    """
    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    async def add(self, key: str, value: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def update(self, key: str, value: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, key: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def all(self) -> Dict[str, str]:
        raise NotImplementedError
