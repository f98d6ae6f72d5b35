# plugins/core_support_data/plugin_base.py

from abc import ABC, abstractmethod
from typing import Any, ClassVar, List, Optional

from .contracts import CollectionResult, Finding, FindingStatus, PluginContext


class SupportDataPlugin(ABC):
    """
    所有诊断插件的基类。

    子类需要:
      - 声明类属性 `display_path`（分组标签，例如 "Database"）；
      - 实现 `async run()`，通过 add_result_* 记录结果，最后 `return self.get_results()`。

    插件判断自己不适用时（引擎或操作系统不匹配），直接返回空结果即可，这不是错误。
    只有基础设施故障（数据库不可达、系统命令失败）才应该抛出异常。
    """
    display_path: ClassVar[str] = ""

    def __init__(self, context: PluginContext, identifier: str):
        self.context = context
        self.identifier = identifier
        self._findings: List[Finding] = []

    # 常用协作者的快捷访问
    @property
    def database(self):
        return self.context.database

    @property
    def config(self):
        return self.context.config

    @property
    def environment(self):
        return self.context.environment

    @classmethod
    def get_display_path(cls) -> str:
        return cls.display_path

    @abstractmethod
    async def run(self) -> CollectionResult:
        raise NotImplementedError

    def get_results(self) -> CollectionResult:
        return CollectionResult.ok(self._findings)

    def add_result_ok(self, label: str, value: Any, message: str = "", identifier: Optional[str] = None) -> None:
        self._add_result(FindingStatus.OK, label, value, message, identifier)

    def add_result_information(self, label: str, value: Any, message: str = "", identifier: Optional[str] = None) -> None:
        self._add_result(FindingStatus.INFORMATION, label, value, message, identifier)

    def add_result_warning(self, label: str, value: Any, message: str = "", identifier: Optional[str] = None) -> None:
        self._add_result(FindingStatus.WARNING, label, value, message, identifier)

    def add_result_problem(self, label: str, value: Any, message: str = "", identifier: Optional[str] = None) -> None:
        self._add_result(FindingStatus.PROBLEM, label, value, message, identifier)

    def add_result_unknown(self, label: str, value: Any, message: str = "", identifier: Optional[str] = None) -> None:
        self._add_result(FindingStatus.UNKNOWN, label, value, message, identifier)

    def _add_result(self, status: FindingStatus, label: str, value: Any, message: str, identifier: Optional[str]) -> None:
        # identifier 可以覆盖：有些插件会以子标识符报告额外信息
        self._findings.append(Finding(
            identifier=identifier or self.identifier,
            display_path=self.get_display_path(),
            status=status,
            label=label,
            value="" if value is None else str(value),
            message=message or "",
        ))
