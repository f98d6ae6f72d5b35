# plugins/core_config/contracts.py

from __future__ import annotations
import os
from typing import Callable, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

ENV_PREFIX = "TICKETRY_"

# FQDN 的出厂占位值，远程回退时不能把它当作真实主机名
PLACEHOLDER_FQDN = "yourhost.example.com"


def _split_list(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(',') if item.strip()]


class SupportDataConfig(BaseModel):
    """支持数据收集器的配置。"""
    model_config = ConfigDict(frozen=True)

    disabled_plugins: List[str] = Field(default_factory=list, description="Plugin identifiers that are neither run nor reported.")
    identifier_filter_blacklist: List[str] = Field(default_factory=list, description="Finding identifiers removed from the final result.")
    http_hostname: Optional[str] = Field(default=None, description="Overrides the host used by the remote fallback.")
    web_timeout: float = Field(default=20.0, gt=0)
    cache_ttl: int = Field(default=600, gt=0)


class AppConfig(BaseModel):
    """
    整个应用的配置，启动时构建一次，之后作为 `config` 服务显式注入到各组件。
    """
    model_config = ConfigDict(frozen=True)

    fqdn: str = PLACEHOLDER_FQDN
    http_type: Literal["http", "https"] = "http"
    script_alias: str = "ticketry/"
    home: str = Field(default_factory=os.getcwd)
    assets_dir: str = "assets"
    database_dsn: Optional[str] = None
    support_data: SupportDataConfig = Field(default_factory=SupportDataConfig)

    @field_validator('script_alias')
    @classmethod
    def normalize_script_alias(cls, v: str) -> str:
        # public 端点路径 = "/" + script_alias + "public.pl"，因此别名要么为空，要么以 "/" 结尾
        v = v.strip().strip('/')
        return f"{v}/" if v else ""

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = None) -> "AppConfig":
        env = os.environ if environ is None else environ
        get: Callable[[str], Optional[str]] = lambda name: env.get(f"{ENV_PREFIX}{name}") or None

        support_data_fields = {
            "disabled_plugins": _split_list(get("SUPPORT_DATA_DISABLE_PLUGINS")),
            "identifier_filter_blacklist": _split_list(get("SUPPORT_DATA_IDENTIFIER_FILTER_BLACKLIST")),
            "http_hostname": get("SUPPORT_DATA_HTTP_HOSTNAME"),
            "web_timeout": get("SUPPORT_DATA_WEB_TIMEOUT"),
            "cache_ttl": get("SUPPORT_DATA_CACHE_TTL"),
        }
        app_fields = {
            "fqdn": get("FQDN"),
            "http_type": get("HTTP_TYPE"),
            "script_alias": env.get(f"{ENV_PREFIX}SCRIPT_ALIAS"),
            "home": get("HOME"),
            "assets_dir": get("ASSETS_DIR"),
            "database_dsn": get("DATABASE_DSN"),
        }

        # 未设置的字段交给模型默认值
        return cls(
            **{k: v for k, v in app_fields.items() if v is not None},
            support_data=SupportDataConfig(**{k: v for k, v in support_data_fields.items() if v is not None}),
        )
