# src/maliang_i18n/bootstrap.py
"""
应用引导程序和 DI 容器的生命周期管理。

本模块是应用的唯一初始化入口，负责：
1. 加载配置（含 .env 文件）。
2. 创建并装配 DI 容器。
3. 管理核心资源（翻译引擎、数据库连接）的启动和关闭。
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Literal

import structlog
from dotenv import load_dotenv

from maliang_i18n.config import MaliangI18nConfig
from maliang_i18n.containers import ApplicationContainer
from maliang_i18n.infrastructure.persistence import SqlAlchemyRecordStore

logger = structlog.get_logger("maliang_i18n.bootstrap")

EnvMode = Literal["prod", "dev", "test"]


def _load_dotenv_files(env_mode: EnvMode, base_dir: Path | None = None) -> list[Path]:
    """
    根据环境模式加载 .env / .env.dev / .env.test。

    优先级：已存在的环境变量 > .env.test > .env.dev > .env。
    """
    root = base_dir or Path.cwd()
    candidates = [root / ".env"]
    if env_mode in ("dev", "test"):
        candidates.append(root / ".env.dev")
    if env_mode == "test":
        candidates.append(root / ".env.test")
    files_to_load = [p for p in candidates if p.is_file()]

    logger.debug("Dotenv files determined for loading", files=[str(p) for p in files_to_load])
    # override=False 时先加载的文件生效，因此从最具体的文件开始
    for file_path in reversed(files_to_load):
        load_dotenv(file_path, override=False, encoding="utf-8")
    return files_to_load


def create_app_config(
    env_mode: EnvMode = "prod", base_dir: Path | None = None
) -> MaliangI18nConfig:
    """加载、验证并返回应用配置对象。"""
    _load_dotenv_files(env_mode, base_dir)
    return MaliangI18nConfig()


def create_container(
    config: MaliangI18nConfig, service_name: str = "maliang-i18n"
) -> ApplicationContainer:
    """创建并装配 DI 容器。"""
    container = ApplicationContainer()
    container.pydantic_config.override(config)
    container.config.from_pydantic(config)
    container.config.service_name.from_value(service_name)
    container.core.init_resources()
    return container


async def start_container(container: ApplicationContainer) -> None:
    """初始化翻译引擎；使用数据库记录存储时确保数据表存在。"""
    engine = container.engines.active_engine()
    if engine is not None:
        await engine.initialize()
    store = container.persistence.record_store()
    if isinstance(store, SqlAlchemyRecordStore):
        await store.create_all()
    logger.info(
        "应用已启动",
        engine=engine.name() if engine is not None else None,
        record_store=type(store).__name__,
    )


async def stop_container(container: ApplicationContainer) -> None:
    """关闭翻译引擎与数据库连接，释放容器资源。"""
    engine = container.engines.active_engine()
    if engine is not None:
        await engine.close()
    store = container.persistence.record_store()
    if isinstance(store, SqlAlchemyRecordStore):
        await store.dispose()
    container.core.shutdown_resources()
    logger.info("应用已关闭")


@asynccontextmanager
async def app_lifespan(
    config: MaliangI18nConfig, service_name: str = "maliang-i18n"
) -> AsyncIterator[ApplicationContainer]:
    """创建容器并管理其生命周期。"""
    container = create_container(config, service_name)
    await start_container(container)
    try:
        yield container
    finally:
        await stop_container(container)
