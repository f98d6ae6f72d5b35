# plugins/core_support_data/remote.py

import asyncio
import json
import logging
import socket
from typing import Awaitable, Callable, Optional

import httpx
from pydantic import ValidationError

from plugins.core_cache.contracts import CacheInterface
from plugins.core_config.contracts import AppConfig, PLACEHOLDER_FQDN
from plugins.core_system_data.contracts import SystemDataError
from .contracts import (
    CACHE_KEY,
    PUBLIC_ACTION,
    REMOTE_CACHE_NAMESPACE,
    ChallengeTokenStoreInterface,
    CollectionResult,
    RemoteCollectionRunnerInterface,
)

logger = logging.getLogger(__name__)

LOOPBACK_ADDRESS = "127.0.0.1"

RESOLVE_TIMEOUT_SECONDS = 5.0

HostResolver = Callable[[str], Awaitable[bool]]


async def resolves(host: str, timeout: float = RESOLVE_TIMEOUT_SECONDS) -> bool:
    """主机名能否在 timeout 秒内解析（gethostbyname 是阻塞调用，放到线程里执行）。"""
    try:
        await asyncio.wait_for(asyncio.to_thread(socket.gethostbyname, host), timeout)
        return True
    except (socket.gaierror, UnicodeError):
        return False
    except asyncio.TimeoutError:
        logger.warning(f"Resolving '{host}' timed out after {timeout}s.")
        return False


class RemoteCollectionRunner(RemoteCollectionRunnerInterface):
    """
    在没有入站请求上下文时（例如命令行），让正在运行的 Web 应用调用自己的
    public 端点完成收集：只有在真实请求里才能观察到的诊断项（Web 服务器进程等）
    因此也能被收集到。

    所有失败都以 `CollectionResult.failure(...)` 返回，从不抛出。
    """
    def __init__(
        self,
        config: AppConfig,
        cache: CacheInterface,
        challenge_tokens: ChallengeTokenStoreInterface,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        resolver: HostResolver = resolves,
    ):
        self._config = config
        self._cache = cache
        self._challenge_tokens = challenge_tokens
        self._transport = transport
        self._resolver = resolver

    async def resolve_host(self) -> str:
        """显式配置 > 可解析的 FQDN（非占位值）> 可解析的 localhost > 127.0.0.1"""
        override = self._config.support_data.http_hostname
        if override:
            return override

        fqdn = self._config.fqdn
        if fqdn and fqdn != PLACEHOLDER_FQDN and await self._resolver(fqdn):
            return fqdn

        if await self._resolver("localhost"):
            return "localhost"

        return LOOPBACK_ADDRESS

    def build_url(self, host: str) -> str:
        return f"{self._config.http_type}://{host}/{self._config.script_alias}public.pl"

    def _fail(self, message: str, level: int = logging.WARNING) -> CollectionResult:
        logger.log(level, f"SupportDataCollector - {message}")
        return CollectionResult.failure(message)

    async def _post(self, url: str, token: str, timeout: float) -> httpx.Response:
        async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
            return await client.post(
                url,
                data={"Action": PUBLIC_ACTION, "ChallengeToken": token},
            )

    async def run(self, web_timeout: Optional[float] = None) -> CollectionResult:
        timeout = web_timeout or self._config.support_data.web_timeout

        # 每次远程调用前生成新令牌，public 端点凭它放行这一次免登录的请求
        try:
            token = await self._challenge_tokens.refresh()
        except (SystemDataError, OSError) as e:
            return self._fail(f"Can't store challenge token - {e}", level=logging.ERROR)

        url = self.build_url(await self.resolve_host())
        logger.debug(f"Collecting support data via web request to {url} (timeout {timeout}s)")

        try:
            # httpx 的 timeout 是按阶段计算的；wait_for 限制整个调用的总时长
            response = await asyncio.wait_for(self._post(url, token, timeout), timeout)
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            return self._fail(f"Can't connect to server - timeout after {timeout}s ({type(e).__name__})")
        except httpx.HTTPError as e:
            return self._fail(f"Can't connect to server - {type(e).__name__}: {e}")

        if response.status_code != httpx.codes.OK:
            return self._fail(f"Can't connect to server - {response.status_code} {response.reason_phrase}")

        if not response.content:
            return self._fail("No content received.")

        body = response.content.decode("utf-8", errors="replace")

        # 丢弃 HTML 响应（错误页等）
        if body.startswith("<"):
            return self._fail("Response looks like HTML instead of JSON.")

        try:
            data = json.loads(body)
            if not isinstance(data, dict):
                raise ValueError("not a JSON object")
            result = CollectionResult.model_validate(data)
        except (ValueError, ValidationError):
            # json.JSONDecodeError 是 ValueError 的子类
            return self._fail(f"Can't decode JSON: '{body}'!", level=logging.ERROR)

        await self._cache.set(REMOTE_CACHE_NAMESPACE, CACHE_KEY, data, ttl=self._config.support_data.cache_ttl)
        return result
