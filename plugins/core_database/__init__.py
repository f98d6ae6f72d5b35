# plugins/core_database/__init__.py
import logging

from backend.core.contracts import Container, HookManager
from .contracts import DatabaseInterface
from .service import create_database

logger = logging.getLogger(__name__)


def _create_database(container: Container) -> DatabaseInterface:
    config = container.resolve("config")
    return create_database(config.database_dsn)


async def close_database(container: Container):
    """钩子实现：应用关闭时释放连接池。"""
    database: DatabaseInterface = container.resolve("database")
    await database.close()


def register_plugin(container: Container, hook_manager: HookManager):
    logger.info("--> 正在注册 [core_database] 插件...")
    container.register("database", _create_database, singleton=True)
    hook_manager.add_implementation("app_shutdown", close_database, plugin_name="core_database")
    logger.info("插件 [core_database] 注册成功。")
