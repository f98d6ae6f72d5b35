# plugins/core_database/contracts.py

from __future__ import annotations
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, List, Optional, Sequence, Tuple

Row = Tuple[Any, ...]


class DatabaseEngine(str, Enum):
    """数据库引擎标签，由 DSN 的 scheme 直接映射得到。"""
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    ORACLE = "oracle"
    MSSQL = "mssql"
    UNKNOWN = "unknown"

    @classmethod
    def from_dsn(cls, dsn: Optional[str]) -> "DatabaseEngine":
        if not dsn or "://" not in dsn:
            return cls.UNKNOWN
        # "postgresql+asyncpg://..." -> "postgresql"
        scheme = dsn.split("://", 1)[0].split("+", 1)[0].lower()
        return _SCHEME_ALIASES.get(scheme, cls.UNKNOWN)


_SCHEME_ALIASES = {
    "postgresql": DatabaseEngine.POSTGRESQL,
    "postgres": DatabaseEngine.POSTGRESQL,
    "mysql": DatabaseEngine.MYSQL,
    "mariadb": DatabaseEngine.MYSQL,
    "oracle": DatabaseEngine.ORACLE,
    "mssql": DatabaseEngine.MSSQL,
}


class DatabaseError(Exception):
    """数据库不可达或查询失败。对诊断插件来说这是基础设施故障。"""
    pass


class DatabaseInterface(ABC):
    """
    只暴露诊断插件需要的能力：知道自己是什么引擎，能执行查询并取回行。
    """
    @property
    @abstractmethod
    def engine(self) -> DatabaseEngine:
        raise NotImplementedError

    @abstractmethod
    async def fetch_rows(self, sql: str, *args: Any, limit: Optional[int] = None) -> List[Row]:
        raise NotImplementedError

    @abstractmethod
    async def close(self) -> None:
        raise NotImplementedError


def apply_limit(rows: Sequence[Row], limit: Optional[int]) -> List[Row]:
    if limit is None:
        return list(rows)
    return list(rows[:limit])
