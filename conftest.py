# conftest.py

import os
from typing import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from asgi_lifespan import LifespanManager

from backend.app import create_app
from backend.core.contracts import Container


# --- 1. 环境隔离 ---

@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """
    每个测试都从干净的 TICKETRY_* 环境开始：
    - system_data.json 写到临时目录，不污染工作区；
    - 不配置数据库，PostgreSQL 检查项因引擎不匹配而跳过；
    - 关闭依赖宿主机 `df` 的磁盘分区检查，结果与运行测试的机器无关。
    """
    for name in list(os.environ):
        if name.startswith("TICKETRY_"):
            monkeypatch.delenv(name, raising=False)

    monkeypatch.setenv("TICKETRY_HOME", str(tmp_path))
    monkeypatch.setenv("TICKETRY_ASSETS_DIR", str(tmp_path / "assets"))
    monkeypatch.setenv("TICKETRY_SUPPORT_DATA_DISABLE_PLUGINS", "support_data.os.disk_partition")


# --- 2. 基础应用与客户端 Fixtures ---

@pytest.fixture
def app() -> FastAPI:
    """每个测试一个全新的应用实例，配置在 lifespan 启动时才从环境读取。"""
    return create_app()


@pytest.fixture
async def running_app(app: FastAPI) -> AsyncGenerator[LifespanManager, None]:
    """运行完整 lifespan（插件加载、服务注册、路由收集）的应用。"""
    async with LifespanManager(app) as manager:
        yield manager


@pytest.fixture
async def client(running_app: LifespanManager) -> AsyncGenerator[AsyncClient, None]:
    """
    【用于端到端测试】
    httpx.AsyncClient 需要通过 ASGITransport 与 ASGI 应用通信。
    """
    transport = ASGITransport(app=running_app.app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def container(app: FastAPI, running_app: LifespanManager) -> Container:
    return app.state.container
