# backend/core/dependencies.py

from typing import Any
from fastapi import Request


class Service:
    """
    FastAPI 依赖：按名称从 app.state.container 中解析服务。
    用法: `collector = Depends(Service("support_data_collector"))`
    """
    def __init__(self, name: str):
        self.name = name

    def __call__(self, request: Request) -> Any:
        return request.app.state.container.resolve(self.name)
