# src/maliang_i18n/config.py
"""
maliang-i18n 配置（Pydantic v2）

- 所有配置项都可通过 `MALIANG_` 前缀的环境变量覆盖，嵌套字段用 `__` 分隔，
  例如 `MALIANG_OPENAI__MODEL`、`MALIANG_CACHE__TTL`。
- 翻译服务凭据在未显式配置时回退到 `TRANSLATION_API_KEY`、
  `TRANSLATION_API_BASE_URL`、`TRANSLATION_MODEL`。
"""

from __future__ import annotations

import os
from typing import Literal, Optional

from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine.url import make_url

from maliang_i18n.domain.languages import SupportedLanguage
from maliang_i18n.infrastructure.cache.memory import CacheConfig
from maliang_i18n.infrastructure.engines.openai import DEFAULT_BASE_URL, DEFAULT_MODEL

# ===================== 子模型 =====================


class OpenAISettings(BaseModel):
    """OpenAI 兼容翻译服务（默认 ModelScope）。"""

    api_key: Optional[SecretStr] = Field(default=None)
    base_url: Optional[str] = Field(default=None)
    model: Optional[str] = Field(default=None)
    temperature: float = Field(default=0.3, ge=0, le=2)
    max_tokens: int = Field(default=4000, gt=0)
    timeout: float = Field(default=30.0, gt=0)
    connect_timeout: float = Field(default=5.0, gt=0)
    rpm: Optional[int] = Field(default=None, gt=0)
    max_concurrency: Optional[int] = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _apply_legacy_env(self) -> OpenAISettings:
        if self.api_key is None and os.environ.get("TRANSLATION_API_KEY"):
            self.api_key = SecretStr(os.environ["TRANSLATION_API_KEY"])
        if not self.base_url:
            self.base_url = os.environ.get("TRANSLATION_API_BASE_URL") or DEFAULT_BASE_URL
        if not self.model:
            self.model = os.environ.get("TRANSLATION_MODEL") or DEFAULT_MODEL
        # 兼容直接填写完整 chat/completions 地址的旧配置
        self.base_url = self.base_url.rstrip("/").removesuffix("/chat/completions")
        return self


class DebugEngineSettings(BaseModel):
    mode: Literal["SUCCESS", "FAIL", "PARTIAL_FAIL"] = Field(default="SUCCESS")
    fail_languages: list[SupportedLanguage] = Field(default_factory=list)
    fail_is_retryable: bool = Field(default=True)
    translation_map: dict[str, str] = Field(default_factory=dict)
    delay: float = Field(default=0.0, ge=0)


class CacheSettings(CacheConfig):
    enabled: bool = Field(default=True)


class OrchestratorSettings(BaseModel):
    auto_save: bool = Field(default=True)
    batch_size: int = Field(default=5, gt=0)
    history_limit: int = Field(default=50, gt=0)


class ClientSettings(BaseModel):
    request_timeout: float = Field(default=30.0, gt=0)


class DatabaseSettings(BaseModel):
    """记录存储数据库（运行期异步驱动）"""

    url: str = Field(
        default="sqlite+aiosqlite:///maliang.db",
        description="异步 DSN（sqlite+aiosqlite / postgresql+asyncpg）",
    )
    echo: bool = Field(default=False, description="SQLAlchemy echo（调试）")

    @field_validator("url")
    @classmethod
    def _validate_async_driver(cls, v: str) -> str:
        allowed = {"sqlite+aiosqlite", "postgresql+asyncpg"}
        try:
            drv = make_url(v).drivername.lower()
        except Exception as e:
            raise ValueError(f"非法数据库 URL：{v!r}（{e}）") from e
        if drv not in allowed:
            raise ValueError(
                f"不支持的运行期数据库驱动：{drv!r}，仅允许 {', '.join(sorted(allowed))}"
            )
        return v


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    format: Literal["console", "json"] = Field(default="console")


# ===================== 顶层配置 =====================
class MaliangI18nConfig(BaseSettings):
    """maliang-i18n 核心配置模型。"""

    active_engine: Literal["openai", "debug"] = "openai"
    record_store: Literal["memory", "sqlalchemy"] = "memory"

    openai: OpenAISettings = Field(default_factory=OpenAISettings)
    debug_engine: DebugEngineSettings = Field(default_factory=DebugEngineSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    orchestrator: OrchestratorSettings = Field(default_factory=OrchestratorSettings)
    client: ClientSettings = Field(default_factory=ClientSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        env_prefix="MALIANG_",
        case_sensitive=False,
        extra="ignore",
        env_file_encoding="utf-8",
    )
