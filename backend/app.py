# backend/app.py
import logging
from contextlib import asynccontextmanager
from typing import Tuple

from fastapi import FastAPI, APIRouter
from fastapi.middleware.cors import CORSMiddleware

from backend.container import Container
from backend.core.hooks import HookManager
from backend.core.loader import PluginLoader
from backend.core.request_context import RequestContextMiddleware

logger = logging.getLogger(__name__)


async def build_container() -> Tuple[Container, HookManager]:
    """
    组装平台核心：容器、钩子管理器、全部插件。
    Web 应用（lifespan）和 CLI 共用这一步，区别只在于 CLI 不会收集路由。
    """
    container = Container()
    hook_manager = HookManager(container)

    # 1. 注册平台核心服务
    container.register("container", lambda: container)
    container.register("hook_manager", lambda: hook_manager)

    # 2. 加载插件（同步注册）
    loader = PluginLoader(container, hook_manager)
    manifests = loader.load_plugins()
    container.register("loaded_plugins_manifests", lambda: manifests)

    # 3. 异步初始化：插件在这里填充注册表、建立连接等
    await hook_manager.trigger('services_post_register')
    return container, hook_manager


@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- 启动阶段 ---
    container, hook_manager = await build_container()
    app.state.container = container
    hook_manager.add_shared_context("app", app)

    # 平台核心负责收集并装配 API 路由
    routers_to_add: list[APIRouter] = await hook_manager.filter("collect_api_routers", [])
    if routers_to_add:
        logger.info(f"已收集到 {len(routers_to_add)} 个路由。正在添加到应用中...")
        for router in routers_to_add:
            app.include_router(router)
            logger.debug(f"已添加路由: prefix='{router.prefix}', tags={router.tags}")
    else:
        logger.warning("未从插件中收集到任何 API 路由。")

    await hook_manager.trigger('app_startup_complete')
    logger.info("--- Ticketry 已就绪 ---")
    yield
    # --- 关闭阶段 ---
    logger.info("--- Ticketry 正在关闭 ---")
    await hook_manager.trigger('app_shutdown')


def create_app() -> FastAPI:
    """应用工厂函数"""
    app = FastAPI(
        title="Ticketry",
        version="0.3.0",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # 最后添加 = 最外层；所有请求都会先经过它
    app.add_middleware(RequestContextMiddleware)

    return app
