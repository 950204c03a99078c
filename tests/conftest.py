# tests/conftest.py
"""项目全局共享的测试 Fixtures。"""

from collections.abc import AsyncGenerator, Generator
from typing import Any

import pytest
import pytest_asyncio
from pytest_mock import MockerFixture
from rich.console import Console

from maliang_i18n.application.client import TranslationClient
from maliang_i18n.application.history import TranslationHistory
from maliang_i18n.application.orchestrator import (
    OrchestratorOptions,
    TranslationOrchestrator,
)
from maliang_i18n.infrastructure.cache.memory import TranslationCache
from maliang_i18n.infrastructure.engines.debug import DebugEngine, DebugEngineConfig
from maliang_i18n.infrastructure.persistence.memory import InMemoryRecordStore


@pytest.fixture(scope="session", autouse=True)
def disable_rich_colors_for_tests(
    session_mocker: MockerFixture,
) -> Generator[None, None, None]:
    """全局禁用 rich 库的颜色输出，以确保测试结果的确定性。"""
    original_init = Console.__init__

    def new_init(self: Console, *args: Any, **kwargs: Any) -> None:
        kwargs["force_terminal"] = False
        kwargs["color_system"] = None
        original_init(self, *args, **kwargs)

    session_mocker.patch("rich.console.Console.__init__", new=new_init)
    yield


@pytest.fixture(autouse=True)
def isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """清除可能影响配置加载的环境变量。"""
    monkeypatch.delenv("TRANSLATION_API_KEY", raising=False)
    monkeypatch.delenv("TRANSLATION_API_BASE_URL", raising=False)
    monkeypatch.delenv("TRANSLATION_MODEL", raising=False)
    monkeypatch.delenv("MALIANG_ENV", raising=False)


@pytest_asyncio.fixture
async def debug_engine() -> AsyncGenerator[DebugEngine, None]:
    """提供一个已初始化的 SUCCESS 模式调试引擎。"""
    engine = DebugEngine(DebugEngineConfig())
    await engine.initialize()
    yield engine
    await engine.close()


@pytest.fixture
def client(debug_engine: DebugEngine) -> TranslationClient:
    return TranslationClient(debug_engine, request_timeout=5.0)


@pytest.fixture
def cache() -> TranslationCache:
    return TranslationCache()


@pytest.fixture
def history() -> TranslationHistory:
    return TranslationHistory()


@pytest_asyncio.fixture
async def orchestrator(
    client: TranslationClient,
    cache: TranslationCache,
    history: TranslationHistory,
) -> AsyncGenerator[TranslationOrchestrator, None]:
    """提供一个使用调试引擎的编排器，测试结束时自动释放。"""
    async with TranslationOrchestrator(
        client, cache, history, OrchestratorOptions()
    ) as orch:
        yield orch


@pytest.fixture
def record_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()
