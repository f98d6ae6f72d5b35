# plugins/core_support_data/contracts.py

from __future__ import annotations
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from plugins.core_config.contracts import AppConfig
from plugins.core_database.contracts import DatabaseInterface

# --- 1. 缓存与远程调用的固定约定 ---

CACHE_TTL_SECONDS = 600
CACHE_KEY = "DataCollect"
# 本地收集结果的缓存命名空间
LOCAL_CACHE_NAMESPACE = "SupportDataCollector"
# 远程回退取回的结果使用另一个命名空间（拼写不同）。下游读取方可能依赖其中任何一个，保持原样。
REMOTE_CACHE_NAMESPACE = "SupportDataCollect"

CHALLENGE_TOKEN_KEY = "SupportDataCollector::ChallengeToken"
PUBLIC_ACTION = "PublicSupportDataCollector"


# --- 2. 数据模型 ---

class FindingStatus(str, Enum):
    OK = "OK"
    INFORMATION = "Information"
    WARNING = "Warning"
    PROBLEM = "Problem"
    UNKNOWN = "Unknown"


class Finding(BaseModel):
    """一条诊断数据。(identifier, label) 在一次收集中应当唯一，但这里不做强制。"""
    model_config = ConfigDict(frozen=True)

    identifier: str
    display_path: str
    status: FindingStatus
    label: str
    value: str = ""
    message: str = ""


class CollectionResult(BaseModel):
    """
    一次收集（或一个插件一次运行）的结果。
    success 为 False 时必须带 error_message，且不得携带任何 findings。
    """
    success: bool
    error_message: Optional[str] = None
    findings: List[Finding] = Field(default_factory=list)

    @model_validator(mode='after')
    def check_consistency(self) -> "CollectionResult":
        if self.success and self.error_message:
            raise ValueError("A successful result must not carry an error_message.")
        if not self.success:
            if not self.error_message:
                raise ValueError("A failed result must carry an error_message.")
            if self.findings:
                raise ValueError("A failed result must not carry findings.")
        return self

    @classmethod
    def ok(cls, findings: Optional[List[Finding]] = None) -> "CollectionResult":
        return cls(success=True, findings=list(findings or []))

    @classmethod
    def failure(cls, error_message: str) -> "CollectionResult":
        return cls(success=False, error_message=error_message)


class PluginDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    identifier: str
    enabled: bool
    display_path: str


# --- 3. 错误类型 ---

class SupportDataError(Exception):
    pass


class PluginInfrastructureError(SupportDataError):
    """插件无法完成检查（例如无法执行系统命令）。会中止整次收集。"""
    pass


class PluginLoadError(SupportDataError):
    """已注册的插件无法被构造。会中止整次收集。"""
    pass


# --- 4. 插件协作者 ---

class OSFamily(str, Enum):
    LINUX = "linux"
    DARWIN = "darwin"
    BSD = "bsd"
    UNIX = "unix"
    WINDOWS = "windows"
    OTHER = "other"


UNIX_LIKE_FAMILIES = frozenset({OSFamily.LINUX, OSFamily.DARWIN, OSFamily.BSD, OSFamily.UNIX})


class EnvironmentInterface(ABC):
    """操作系统 / 运行环境探针。"""
    @property
    @abstractmethod
    def os_family(self) -> OSFamily:
        raise NotImplementedError

    @property
    def is_unix_like(self) -> bool:
        return self.os_family in UNIX_LIKE_FAMILIES

    @abstractmethod
    async def disk_partition(self, path: str) -> str:
        raise NotImplementedError


class PluginContext(BaseModel):
    """构造时注入给每个诊断插件的协作者集合。"""
    database: DatabaseInterface
    config: AppConfig
    environment: EnvironmentInterface
    model_config = ConfigDict(arbitrary_types_allowed=True)


# --- 5. 服务接口 ---

class SupportDataCollectorInterface(ABC):
    @abstractmethod
    async def collect(self, use_cache: bool = False, web_timeout: Optional[float] = None) -> CollectionResult:
        raise NotImplementedError


class RemoteCollectionRunnerInterface(ABC):
    @abstractmethod
    async def run(self, web_timeout: Optional[float] = None) -> CollectionResult:
        raise NotImplementedError


class ChallengeTokenStoreInterface(ABC):
    @abstractmethod
    async def refresh(self) -> str: raise NotImplementedError
    @abstractmethod
    async def verify(self, candidate: Any) -> bool: raise NotImplementedError
