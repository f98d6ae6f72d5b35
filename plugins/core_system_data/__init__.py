# plugins/core_system_data/__init__.py
import logging

from backend.core.contracts import Container, HookManager
from .store import FileSystemDataStore

logger = logging.getLogger(__name__)


def _create_system_data_store(container: Container) -> FileSystemDataStore:
    config = container.resolve("config")
    return FileSystemDataStore(assets_base_dir=config.assets_dir)


def register_plugin(container: Container, hook_manager: HookManager):
    logger.info("--> 正在注册 [core_system_data] 插件...")
    container.register("system_data", _create_system_data_store, singleton=True)
    logger.info("插件 [core_system_data] 注册成功。")
