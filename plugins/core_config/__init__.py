# plugins/core_config/__init__.py
import logging

from backend.core.contracts import Container, HookManager
from .contracts import AppConfig

logger = logging.getLogger(__name__)


def _create_config() -> AppConfig:
    config = AppConfig.from_env()
    logger.debug(
        f"AppConfig loaded: http_type={config.http_type}, script_alias='{config.script_alias}', "
        f"database configured={config.database_dsn is not None}"
    )
    return config


def register_plugin(container: Container, hook_manager: HookManager):
    logger.info("--> 正在注册 [core_config] 插件...")
    container.register("config", _create_config, singleton=True)
    logger.info("插件 [core_config] 注册成功。")
