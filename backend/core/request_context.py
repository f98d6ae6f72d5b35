# backend/core/request_context.py

from contextvars import ContextVar
from typing import Any, Dict, Optional

# 当前正在处理的入站 HTTP 请求的 ASGI scope；请求之外（CLI、后台任务）为 None
_current_scope: ContextVar[Optional[Dict[str, Any]]] = ContextVar("current_request_scope", default=None)


def in_request_context() -> bool:
    return _current_scope.get() is not None


def current_request_scope() -> Optional[Dict[str, Any]]:
    return _current_scope.get()


class RequestContextMiddleware:
    """
    纯 ASGI 中间件：在处理 HTTP 请求期间记录请求元数据。
    下游的 endpoint 与本中间件在同一个 task 中执行，因此能读到这里设置的 ContextVar。
    """
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        token = _current_scope.set(scope)
        try:
            await self.app(scope, receive, send)
        finally:
            _current_scope.reset(token)
