# backend/core/loader.py

import json
import logging
import importlib
import importlib.resources
from typing import Any, Dict, List

from backend.core.contracts import Container, HookManager, PluginRegisterFunc

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 100


class PluginLoadingError(RuntimeError):
    pass


class PluginLoader:
    """
    发现 `plugins` 包下带 manifest.json 的子包，按 (priority, name) 排序后
    依次调用它们的 register_plugin(container, hook_manager)。
    """
    def __init__(self, container: Container, hook_manager: HookManager, package: str = "plugins"):
        self._container = container
        self._hook_manager = hook_manager
        self._package = package

    def load_plugins(self) -> List[Dict[str, Any]]:
        """执行插件加载的全过程：发现、排序、注册。返回已加载插件的清单列表。"""
        all_plugins = self._discover_plugins()
        if not all_plugins:
            logger.warning(f"No plugins discovered in package '{self._package}'.")
            return []

        sorted_plugins = sorted(all_plugins, key=lambda p: (p['manifest'].get('priority', DEFAULT_PRIORITY), p['name']))
        logger.debug(
            "Plugin load order: "
            + ", ".join(f"{p['name']}({p['manifest'].get('priority', DEFAULT_PRIORITY)})" for p in sorted_plugins)
        )

        self._register_plugins(sorted_plugins)
        logger.info(f"所有插件均已加载并注册完毕 ({len(sorted_plugins)} 个)。")
        return [p['manifest'] for p in sorted_plugins]

    def _discover_plugins(self) -> List[Dict[str, Any]]:
        discovered = []
        try:
            package_root = importlib.resources.files(self._package)
        except ModuleNotFoundError:
            return discovered

        for plugin_path in package_root.iterdir():
            if not plugin_path.is_dir() or plugin_path.name.startswith(('__', '.')):
                continue

            manifest_path = plugin_path / "manifest.json"
            if not manifest_path.is_file():
                continue

            try:
                manifest = json.loads(manifest_path.read_text(encoding='utf-8'))
            except json.JSONDecodeError as e:
                # 清单损坏的插件直接跳过，不影响其他插件
                logger.warning(f"Skipping plugin '{plugin_path.name}': invalid manifest.json ({e})")
                continue

            discovered.append({
                "name": manifest.get('name', plugin_path.name),
                "manifest": manifest,
                "import_path": f"{self._package}.{plugin_path.name}",
            })
        return discovered

    def _register_plugins(self, plugins: List[Dict[str, Any]]):
        for plugin_info in plugins:
            plugin_name = plugin_info['name']
            import_path = plugin_info['import_path']

            try:
                plugin_module = importlib.import_module(import_path)
                register_func: PluginRegisterFunc = getattr(plugin_module, "register_plugin")
                register_func(self._container, self._hook_manager)
            except Exception as e:
                # 插件之间存在服务依赖，一个失败就停止启动
                logger.critical(f"致命错误：加载插件 '{plugin_name}' ({import_path}) 失败", exc_info=e)
                raise PluginLoadingError(f"无法加载插件 {plugin_name}") from e
