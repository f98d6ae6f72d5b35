# plugins/core_support_data/checks/__init__.py

from typing import List, Tuple, Type

from ..plugin_base import SupportDataPlugin
from ..registry import SupportDataPluginRegistry
from .postgresql import PostgresDateStyleCheck, PostgresSizeCheck
from .operating_system import DiskPartitionCheck

# 内置诊断插件，按执行顺序排列
BUILTIN_PLUGINS: List[Tuple[str, Type[SupportDataPlugin]]] = [
    ("support_data.database.postgresql.date_style", PostgresDateStyleCheck),
    ("support_data.database.postgresql.size", PostgresSizeCheck),
    ("support_data.os.disk_partition", DiskPartitionCheck),
]


def register_builtin_plugins(registry: SupportDataPluginRegistry) -> SupportDataPluginRegistry:
    for identifier, plugin_class in BUILTIN_PLUGINS:
        registry.add(identifier, plugin_class)
    return registry
