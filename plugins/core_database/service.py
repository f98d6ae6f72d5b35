# plugins/core_database/service.py

import logging
from typing import Any, List, Optional

import asyncpg

from .contracts import DatabaseEngine, DatabaseError, DatabaseInterface, Row, apply_limit

logger = logging.getLogger(__name__)


class PostgresDatabase(DatabaseInterface):
    """
    基于 asyncpg 连接池的 PostgreSQL 访问。
    连接池在第一次查询时才创建，应用启动不依赖数据库可达。
    """
    def __init__(self, dsn: str, min_size: int = 1, max_size: int = 5, command_timeout: float = 30.0):
        self._dsn = dsn
        self._min_size = min_size
        self._max_size = max_size
        self._command_timeout = command_timeout
        self._pool: Optional[asyncpg.Pool] = None

    @property
    def engine(self) -> DatabaseEngine:
        return DatabaseEngine.POSTGRESQL

    async def _get_pool(self) -> asyncpg.Pool:
        if self._pool is None:
            try:
                self._pool = await asyncpg.create_pool(
                    dsn=self._dsn,
                    min_size=self._min_size,
                    max_size=self._max_size,
                    command_timeout=self._command_timeout,
                )
            except (OSError, asyncpg.PostgresError) as e:
                raise DatabaseError(f"Could not connect to PostgreSQL: {e}") from e
            logger.info("PostgreSQL connection pool created.")
        return self._pool

    async def fetch_rows(self, sql: str, *args: Any, limit: Optional[int] = None) -> List[Row]:
        pool = await self._get_pool()
        try:
            async with pool.acquire() as conn:
                records = await conn.fetch(sql, *args)
        except (OSError, asyncpg.PostgresError) as e:
            raise DatabaseError(f"Query failed: {e}") from e
        return apply_limit([tuple(record.values()) for record in records], limit)

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info("PostgreSQL connection pool closed.")


class UnavailableDatabase(DatabaseInterface):
    """
    未配置 DSN，或者配置了本应用没有驱动的引擎。
    engine 仍然如实报告，使按引擎判断适用性的诊断插件可以安静地跳过。
    """
    def __init__(self, engine: DatabaseEngine = DatabaseEngine.UNKNOWN, reason: str = "No database configured."):
        self._engine = engine
        self._reason = reason

    @property
    def engine(self) -> DatabaseEngine:
        return self._engine

    async def fetch_rows(self, sql: str, *args: Any, limit: Optional[int] = None) -> List[Row]:
        raise DatabaseError(self._reason)

    async def close(self) -> None:
        pass


def create_database(dsn: Optional[str]) -> DatabaseInterface:
    engine = DatabaseEngine.from_dsn(dsn)
    if engine is DatabaseEngine.POSTGRESQL:
        return PostgresDatabase(dsn)
    if dsn:
        logger.warning(f"No driver available for database engine '{engine.value}'. Database queries will fail.")
        return UnavailableDatabase(engine, reason=f"No driver available for database engine '{engine.value}'.")
    return UnavailableDatabase()
