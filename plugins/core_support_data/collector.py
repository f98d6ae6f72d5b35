# plugins/core_support_data/collector.py

import logging
from typing import Callable, List, Optional, Tuple

from pydantic import ValidationError

from backend.core.request_context import in_request_context
from plugins.core_cache.contracts import CacheInterface
from plugins.core_config.contracts import SupportDataConfig
from .aggregator import aggregate_results
from .contracts import (
    CACHE_KEY,
    LOCAL_CACHE_NAMESPACE,
    CollectionResult,
    PluginContext,
    PluginDescriptor,
    PluginLoadError,
    RemoteCollectionRunnerInterface,
    SupportDataCollectorInterface,
)
from .registry import SupportDataPluginRegistry

logger = logging.getLogger(__name__)


class SupportDataCollector(SupportDataCollectorInterface):
    """
    收集系统支持数据：
      1. (可选) 读缓存；
      2. 不在请求上下文中时，整体委托给远程回退；
      3. 否则按注册顺序逐个运行已启用的插件，聚合、过滤、写缓存。

    任何一个插件失败都会让整次收集失败（fail-fast），不返回部分结果。
    """
    def __init__(
        self,
        registry: SupportDataPluginRegistry,
        cache: CacheInterface,
        context: PluginContext,
        remote_runner: RemoteCollectionRunnerInterface,
        config: Optional[SupportDataConfig] = None,
        in_web_context: Callable[[], bool] = in_request_context,
    ):
        self._registry = registry
        self._cache = cache
        self._context = context
        self._remote_runner = remote_runner
        self._config = config or context.config.support_data
        self._in_web_context = in_web_context

    async def collect(self, use_cache: bool = False, web_timeout: Optional[float] = None) -> CollectionResult:
        if use_cache:
            cached = await self._read_cache()
            if cached is not None:
                return cached

        # 只有在真实的 Web 请求中才能采集到 Web 服务器相关的数据；
        # 从 CLI 等环境调用时，让应用通过 HTTP 调用自己来完成收集
        if not self._in_web_context():
            logger.debug("No request context available, delegating to the remote fallback runner.")
            return await self._remote_runner.run(web_timeout=web_timeout or self._config.web_timeout)

        return await self.collect_local()

    async def collect_local(self) -> CollectionResult:
        """在当前进程内运行全部已启用的插件。"""
        disabled = set(self._config.disabled_plugins)
        plugin_results: List[Tuple[str, CollectionResult]] = []

        for descriptor in self._registry.describe(disabled):
            if not descriptor.enabled:
                logger.debug(f"Skipping disabled support data plugin '{descriptor.identifier}'.")
                continue

            try:
                plugin = self._registry.create(descriptor.identifier, self._context)
            except PluginLoadError as e:
                logger.error(str(e), exc_info=e)
                return CollectionResult.failure(f"Could not load {descriptor.identifier}!")

            result = await self._run_plugin(descriptor, plugin)
            plugin_results.append((descriptor.identifier, result))
            if not result.success:
                break

        aggregated = aggregate_results(plugin_results)
        if not aggregated.success:
            logger.warning(f"SupportDataCollector - {aggregated.error_message}")
            return aggregated

        # 执行后再按标识符过滤一次：有些插件会用自己之外的标识符报告结果
        excluded = disabled | set(self._config.identifier_filter_blacklist)
        result = CollectionResult.ok([f for f in aggregated.findings if f.identifier not in excluded])

        await self._cache.set(
            LOCAL_CACHE_NAMESPACE, CACHE_KEY, result.model_dump(mode='json'), ttl=self._config.cache_ttl
        )
        logger.info(f"Support data collected: {len(result.findings)} finding(s).")
        return result

    async def _run_plugin(self, descriptor: PluginDescriptor, plugin) -> CollectionResult:
        try:
            result = await plugin.run()
        except Exception as e:
            # 插件边界：任何异常都视为基础设施故障
            logger.warning(f"Support data plugin '{descriptor.identifier}' raised: {e}", exc_info=e)
            return CollectionResult.failure(str(e) or type(e).__name__)

        if not isinstance(result, CollectionResult):
            return CollectionResult.failure(f"Plugin returned {type(result).__name__} instead of a CollectionResult.")
        return result

    async def _read_cache(self) -> Optional[CollectionResult]:
        cached = await self._cache.get(LOCAL_CACHE_NAMESPACE, CACHE_KEY)
        if not isinstance(cached, dict):
            return None
        try:
            return CollectionResult.model_validate(cached)
        except ValidationError as e:
            logger.warning(f"Ignoring invalid cached support data: {e}")
            return None
