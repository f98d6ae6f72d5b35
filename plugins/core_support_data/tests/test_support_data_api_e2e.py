# plugins/core_support_data/tests/test_support_data_api_e2e.py

import pytest
from httpx import AsyncClient, ASGITransport

from backend.container import Container
from backend.core.hooks import HookManager
from plugins.core_support_data import populate_plugin_registry
from plugins.core_support_data.checks import register_builtin_plugins
from plugins.core_support_data.collector import SupportDataCollector
from plugins.core_support_data.contracts import (
    CACHE_KEY,
    LOCAL_CACHE_NAMESPACE,
    REMOTE_CACHE_NAMESPACE,
    CollectionResult,
)
from plugins.core_support_data.registry import SupportDataPluginRegistry
from plugins.core_support_data.remote import RemoteCollectionRunner
from plugins.core_support_data.tests.support_fakes import make_plugin

# 标记此文件中所有测试均为端到端(e2e)测试
pytestmark = [pytest.mark.asyncio, pytest.mark.e2e]

PUBLIC_URL = "/ticketry/public.pl"


class TestSupportDataAPI:
    """
    【E2E测试】
    测试 `core_support_data` 插件提供的 API 端点。
    """

    async def test_agent_endpoint_collects_in_request_context(self, client: AsyncClient, container):
        container.resolve("support_data_plugin_registry").add(
            "support_data.test.static", make_plugin(path="Test", findings=[("ok", "Static", "1")])
        )

        response = await client.get("/api/support-data", params={"use_cache": False})

        assert response.status_code == 200, response.text
        body = response.json()
        assert body["success"] is True
        # 没有配置数据库、磁盘检查被禁用：只剩测试插件的结果
        assert [(f["identifier"], f["label"], f["status"]) for f in body["findings"]] == [
            ("support_data.test.static", "Static", "OK"),
        ]

        cache = container.resolve("cache")
        assert await cache.get(LOCAL_CACHE_NAMESPACE, CACHE_KEY) == body

    async def test_agent_endpoint_reports_plugin_failure(self, client: AsyncClient, container):
        container.resolve("support_data_plugin_registry").add(
            "support_data.test.failing", make_plugin(fail_with="cannot reach service")
        )

        response = await client.get("/api/support-data", params={"use_cache": False})

        assert response.status_code == 200
        assert response.json() == {
            "success": False,
            "error_message": "Error during execution of support_data.test.failing: cannot reach service",
            "findings": [],
        }

    async def test_public_endpoint_rejects_unknown_action(self, client: AsyncClient):
        response = await client.post(PUBLIC_URL, data={"Action": "SomethingElse", "ChallengeToken": "x"})
        assert response.status_code == 400

    async def test_public_endpoint_rejects_missing_action(self, client: AsyncClient, container):
        token = await container.resolve("support_data_challenge_tokens").refresh()

        response = await client.post(PUBLIC_URL, data={"ChallengeToken": token})
        assert response.status_code == 400

        response = await client.post(PUBLIC_URL)
        assert response.status_code == 400

    async def test_public_endpoint_rejects_missing_token(self, client: AsyncClient):
        response = await client.post(PUBLIC_URL, data={"Action": "PublicSupportDataCollector"})
        assert response.status_code == 403

    async def test_public_endpoint_rejects_wrong_token(self, client: AsyncClient, container):
        await container.resolve("support_data_challenge_tokens").refresh()

        response = await client.post(
            PUBLIC_URL, data={"Action": "PublicSupportDataCollector", "ChallengeToken": "0" * 32}
        )
        assert response.status_code == 403

    async def test_public_endpoint_accepts_current_token(self, client: AsyncClient, container):
        token = await container.resolve("support_data_challenge_tokens").refresh()

        response = await client.post(
            PUBLIC_URL, data={"Action": "PublicSupportDataCollector", "ChallengeToken": token}
        )

        assert response.status_code == 200, response.text
        assert CollectionResult.model_validate(response.json()).success is True


class TestRemoteRoundTrip:

    async def test_collector_outside_request_reaches_the_app(self, running_app, container, monkeypatch):
        """
        在请求上下文之外调用 collect()：远程回退通过 ASGITransport 调用应用自己的 public 端点，
        应用在请求上下文中完成本地收集并返回 JSON。
        """
        container.resolve("support_data_plugin_registry").add(
            "support_data.test.static", make_plugin(path="Test", findings=[("information", "Round Trip", "yes")])
        )

        config = container.resolve("config")
        cache = container.resolve("cache")
        runner = RemoteCollectionRunner(
            config=config.model_copy(update={
                "support_data": config.support_data.model_copy(update={"http_hostname": "test"}),
            }),
            cache=cache,
            challenge_tokens=container.resolve("support_data_challenge_tokens"),
            transport=ASGITransport(app=running_app.app),
        )
        collector = SupportDataCollector(
            registry=container.resolve("support_data_plugin_registry"),
            cache=cache,
            context=container.resolve("support_data_plugin_context"),
            remote_runner=runner,
        )

        result = await collector.collect()

        assert result.success is True, result.error_message
        assert [(f.identifier, f.label, f.value) for f in result.findings] == [
            ("support_data.test.static", "Round Trip", "yes"),
        ]
        # 远程取回的结果缓存在另一个命名空间下
        assert await cache.get(REMOTE_CACHE_NAMESPACE, CACHE_KEY) == result.model_dump(mode="json")


class TestPluginContribution:

    async def test_other_plugins_can_contribute_support_data_plugins(self):
        container = Container()
        hook_manager = HookManager(container)
        registry = register_builtin_plugins(SupportDataPluginRegistry())
        container.register("support_data_plugin_registry", lambda: registry)

        contributed = make_plugin(path="Ticketing")

        async def contribute(plugins: list):
            plugins.append(("support_data.ticketing.queues", contributed))
            return plugins

        hook_manager.add_implementation("collect_support_data_plugins", contribute, plugin_name="ticketing")
        await populate_plugin_registry(container, hook_manager)

        assert registry.identifiers()[-1] == "support_data.ticketing.queues"
        assert len(registry) == 4
