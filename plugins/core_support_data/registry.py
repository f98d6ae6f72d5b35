# plugins/core_support_data/registry.py

import logging
from typing import Callable, Collection, Dict, List, Tuple, Type

from .contracts import PluginContext, PluginDescriptor, PluginLoadError
from .plugin_base import SupportDataPlugin

logger = logging.getLogger(__name__)


class SupportDataPluginRegistry:
    """
    诊断插件的静态注册表：identifier -> 插件类。
    执行顺序就是注册顺序，对同一份注册列表总是确定的。
    """
    def __init__(self):
        self._plugins: Dict[str, Type[SupportDataPlugin]] = {}

    def register(self, identifier: str) -> Callable[[Type[SupportDataPlugin]], Type[SupportDataPlugin]]:
        """装饰器形式的注册。"""
        def decorator(plugin_class: Type[SupportDataPlugin]) -> Type[SupportDataPlugin]:
            self.add(identifier, plugin_class)
            return plugin_class
        return decorator

    def add(self, identifier: str, plugin_class: Type[SupportDataPlugin]) -> None:
        if identifier in self._plugins:
            # 覆盖时保留原来的位置，顺序不变
            logger.warning(f"Overwriting support data plugin registration for '{identifier}'.")
        self._plugins[identifier] = plugin_class
        logger.debug(f"Support data plugin '{identifier}' registered: {plugin_class.__name__}")

    def identifiers(self) -> List[str]:
        return list(self._plugins)

    def items(self) -> List[Tuple[str, Type[SupportDataPlugin]]]:
        return list(self._plugins.items())

    def __contains__(self, identifier: str) -> bool:
        return identifier in self._plugins

    def __len__(self) -> int:
        return len(self._plugins)

    def describe(self, disabled: Collection[str] = ()) -> List[PluginDescriptor]:
        return [
            PluginDescriptor(
                identifier=identifier,
                enabled=identifier not in disabled,
                display_path=plugin_class.get_display_path(),
            )
            for identifier, plugin_class in self._plugins.items()
        ]

    def create(self, identifier: str, context: PluginContext) -> SupportDataPlugin:
        plugin_class = self._plugins.get(identifier)
        if plugin_class is None:
            raise PluginLoadError(f"Support data plugin '{identifier}' is not registered.")
        try:
            return plugin_class(context, identifier)
        except Exception as e:
            raise PluginLoadError(f"Could not construct support data plugin '{identifier}': {e}") from e
