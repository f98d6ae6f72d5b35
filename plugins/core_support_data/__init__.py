# plugins/core_support_data/__init__.py
import logging
from typing import List

from fastapi import APIRouter

from backend.core.contracts import Container, HookManager
from .contracts import PluginContext
from .registry import SupportDataPluginRegistry
from .checks import register_builtin_plugins
from .challenge import ChallengeTokenStore
from .collector import SupportDataCollector
from .environment import LocalEnvironment
from .remote import RemoteCollectionRunner
from .api import support_data_router, create_public_router

logger = logging.getLogger(__name__)

# --- 服务工厂 ---

def _create_registry() -> SupportDataPluginRegistry:
    return register_builtin_plugins(SupportDataPluginRegistry())


def _create_plugin_context(container: Container) -> PluginContext:
    return PluginContext(
        database=container.resolve("database"),
        config=container.resolve("config"),
        environment=LocalEnvironment(),
    )


def _create_challenge_tokens(container: Container) -> ChallengeTokenStore:
    return ChallengeTokenStore(container.resolve("system_data"))


def _create_remote_runner(container: Container) -> RemoteCollectionRunner:
    return RemoteCollectionRunner(
        config=container.resolve("config"),
        cache=container.resolve("cache"),
        challenge_tokens=container.resolve("support_data_challenge_tokens"),
    )


def _create_collector(container: Container) -> SupportDataCollector:
    return SupportDataCollector(
        registry=container.resolve("support_data_plugin_registry"),
        cache=container.resolve("cache"),
        context=container.resolve("support_data_plugin_context"),
        remote_runner=container.resolve("support_data_remote_runner"),
    )

# --- 钩子实现 ---

async def populate_plugin_registry(container: Container, hook_manager: HookManager):
    """钩子实现：收集其他平台插件提供的诊断插件，追加在内置插件之后。"""
    registry: SupportDataPluginRegistry = container.resolve("support_data_plugin_registry")
    contributed = await hook_manager.filter("collect_support_data_plugins", [])
    for identifier, plugin_class in contributed:
        registry.add(identifier, plugin_class)
    logger.info(f"Support data registry populated with {len(registry)} plugin(s).")


async def provide_api_routers(routers: List[APIRouter], container: Container) -> List[APIRouter]:
    """钩子实现：提供管理端 API 和 public 端点。"""
    config = container.resolve("config")
    routers.append(support_data_router)
    routers.append(create_public_router(config.script_alias))
    logger.debug("Provided support data API routers to the application.")
    return routers

# --- 主注册函数 ---
def register_plugin(container: Container, hook_manager: HookManager):
    logger.info("--> 正在注册 [core_support_data] 插件...")

    # 1. 注册服务
    container.register("support_data_plugin_registry", _create_registry, singleton=True)
    container.register("support_data_plugin_context", _create_plugin_context, singleton=True)
    container.register("support_data_challenge_tokens", _create_challenge_tokens, singleton=True)
    container.register("support_data_remote_runner", _create_remote_runner, singleton=True)
    container.register("support_data_collector", _create_collector, singleton=True)

    # 2. 注册钩子实现
    hook_manager.add_implementation(
        "services_post_register",
        populate_plugin_registry,
        plugin_name="core_support_data"
    )
    hook_manager.add_implementation(
        "collect_api_routers",
        provide_api_routers,
        plugin_name="core_support_data"
    )

    logger.info("插件 [core_support_data] 注册成功。")
