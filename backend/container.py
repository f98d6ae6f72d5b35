# backend/container.py

import inspect
import logging
from typing import Any, Callable, Dict, List

from backend.core.contracts import Container as ContainerInterface

logger = logging.getLogger(__name__)


class Container(ContainerInterface):
    """
    按名称注册服务工厂的 DI 容器。
    工厂可以接收容器本身作为唯一参数，也可以不接收参数。
    整个应用运行在单个事件循环中，这里不需要锁。
    """
    def __init__(self):
        self._factories: Dict[str, Callable] = {}
        self._singletons: Dict[str, bool] = {}
        self._instances: Dict[str, Any] = {}
        # 正在解析中的服务名（有序），用于循环依赖检测和报错路径
        self._resolving: List[str] = []

    def register(self, name: str, factory: Callable, singleton: bool = True) -> None:
        if name in self._factories:
            logger.warning(f"Overwriting service registration for '{name}'")
            # 重新注册后旧实例作废
            self._instances.pop(name, None)
        self._factories[name] = factory
        self._singletons[name] = singleton

    def has(self, name: str) -> bool:
        return name in self._factories

    def resolve(self, name: str) -> Any:
        if name in self._resolving:
            path = " -> ".join(self._resolving + [name])
            raise RuntimeError(f"Circular dependency detected: {path}")

        is_singleton = self._singletons.get(name, True)
        if is_singleton and name in self._instances:
            return self._instances[name]

        if name not in self._factories:
            raise ValueError(f"Service '{name}' not found in container.")

        self._resolving.append(name)
        try:
            instance = self._build(self._factories[name])
        finally:
            self._resolving.pop()

        if is_singleton:
            self._instances[name] = instance
            logger.debug(f"Resolved service '{name}'. Singleton: True")
        return instance

    def _build(self, factory: Callable) -> Any:
        # 只看工厂签名决定是否注入容器，不能靠捕获 TypeError，否则会吞掉工厂内部的错误
        if inspect.signature(factory).parameters:
            return factory(self)
        return factory()
