# plugins/core_cache/__init__.py
import logging
from pathlib import Path

from backend.core.contracts import Container, HookManager
from .store import FileSystemCache

logger = logging.getLogger(__name__)


def _create_cache(container: Container) -> FileSystemCache:
    config = container.resolve("config")
    return FileSystemCache(cache_dir=str(Path(config.assets_dir) / "cache"))


def register_plugin(container: Container, hook_manager: HookManager):
    logger.info("--> 正在注册 [core_cache] 插件...")
    container.register("cache", _create_cache, singleton=True)
    logger.info("插件 [core_cache] 注册成功。")
