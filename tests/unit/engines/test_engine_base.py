# tests/unit/engines/test_engine_base.py
"""
测试翻译引擎基类与调试引擎：并发控制、异常转换、引擎发现与工厂。
"""

import asyncio
from collections.abc import Sequence

import pytest

from maliang_i18n.config import MaliangI18nConfig
from maliang_i18n.core.exceptions import EngineNotFoundError, ServiceNotInitializedError
from maliang_i18n.core.types import EngineError, EngineResult, EngineSuccess, TextFormat
from maliang_i18n.domain.languages import SupportedLanguage as L
from maliang_i18n.infrastructure.engines import (
    ENGINE_REGISTRY,
    discover_engines,
    register_engine,
)
from maliang_i18n.infrastructure.engines.base import BaseEngineConfig, BaseTranslationEngine
from maliang_i18n.infrastructure.engines.debug import DebugEngine, DebugEngineConfig
from maliang_i18n.infrastructure.engines.factory import (
    create_engine_instance,
    create_engine_or_none,
)


class _CountingEngine(BaseTranslationEngine[BaseEngineConfig]):
    """记录同时进行中的调用数量的测试引擎。"""

    CONFIG_MODEL = BaseEngineConfig

    def __init__(self, config: BaseEngineConfig, fail_with: Exception | None = None):
        super().__init__(config)
        self.active = 0
        self.peak = 0
        self.fail_with = fail_with

    async def _execute_translation(
        self,
        text: str,
        source_lang: L,
        target_langs: Sequence[L],
        text_format: TextFormat,
    ) -> EngineResult:
        if self.fail_with:
            raise self.fail_with
        self.active += 1
        self.peak = max(self.peak, self.active)
        await asyncio.sleep(0.01)
        self.active -= 1
        return EngineSuccess(translations={lang: text for lang in target_langs})


def test_engine_name_is_derived_from_class_name() -> None:
    assert DebugEngine.name() == "debug"
    assert _CountingEngine.name() == "_counting"


@pytest.mark.asyncio
async def test_initialize_and_close_toggle_state() -> None:
    engine = DebugEngine(DebugEngineConfig())
    assert not engine.initialized
    await engine.initialize()
    assert engine.initialized
    await engine.close()
    assert not engine.initialized


@pytest.mark.asyncio
async def test_max_concurrency_is_enforced() -> None:
    engine = _CountingEngine(BaseEngineConfig(max_concurrency=2))
    await asyncio.gather(
        *(engine.atranslate("hi", L.ZH, [L.EN]) for _ in range(6))
    )
    assert engine.peak == 2


@pytest.mark.asyncio
async def test_unexpected_exception_becomes_engine_error() -> None:
    engine = _CountingEngine(BaseEngineConfig(), fail_with=RuntimeError("boom"))
    result = await engine.atranslate("hi", L.ZH, [L.EN])
    assert isinstance(result, EngineError)
    assert "boom" in result.error_message


@pytest.mark.asyncio
async def test_cancelled_error_propagates() -> None:
    engine = _CountingEngine(BaseEngineConfig(), fail_with=asyncio.CancelledError())
    with pytest.raises(asyncio.CancelledError):
        await engine.atranslate("hi", L.ZH, [L.EN])


@pytest.mark.asyncio
async def test_debug_engine_modes() -> None:
    success = await DebugEngine(DebugEngineConfig()).atranslate("你好", L.ZH, [L.EN, L.JA])
    assert isinstance(success, EngineSuccess)
    assert success.translations == {
        L.EN: "Translated(你好) to en",
        L.JA: "Translated(你好) to ja",
    }

    failed = await DebugEngine(
        DebugEngineConfig(mode="FAIL", fail_is_retryable=False)
    ).atranslate("你好", L.ZH, [L.EN])
    assert isinstance(failed, EngineError) and not failed.is_retryable

    partial = await DebugEngine(DebugEngineConfig(mode="PARTIAL_FAIL")).atranslate(
        "你好", L.ZH, [L.EN, L.JA, L.KO]
    )
    assert isinstance(partial, EngineSuccess)
    assert set(partial.translations) == {L.EN, L.JA}

    configured = await DebugEngine(
        DebugEngineConfig(mode="PARTIAL_FAIL", fail_languages=[L.EN])
    ).atranslate("你好", L.ZH, [L.EN, L.JA])
    assert isinstance(configured, EngineSuccess)
    assert set(configured.translations) == {L.JA}


@pytest.mark.asyncio
async def test_debug_engine_translation_map() -> None:
    engine = DebugEngine(DebugEngineConfig(translation_map={"你好": "Hello"}))
    result = await engine.atranslate("你好", L.ZH, [L.EN])
    assert isinstance(result, EngineSuccess)
    assert result.translations == {L.EN: "Hello"}


def test_discover_engines_registers_builtin_engines() -> None:
    discover_engines()
    assert {"debug", "openai"} <= set(ENGINE_REGISTRY)
    assert ENGINE_REGISTRY["debug"] is DebugEngine
    assert "_counting" not in ENGINE_REGISTRY


def test_register_engine_rejects_name_clash(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(ENGINE_REGISTRY, "_counting", _CountingEngine)
    assert register_engine(_CountingEngine) is _CountingEngine

    class _Impostor(_CountingEngine):
        @classmethod
        def name(cls) -> str:
            return "_counting"

    with pytest.raises(ValueError, match="已被"):
        register_engine(_Impostor)


def test_factory_creates_debug_engine() -> None:
    config = MaliangI18nConfig(
        active_engine="debug", debug_engine={"mode": "FAIL", "delay": 0.5}
    )
    engine = create_engine_instance(config)
    assert isinstance(engine, DebugEngine)
    assert engine.config.mode == "FAIL"
    assert engine.config.delay == 0.5


def test_factory_rejects_unknown_engine() -> None:
    with pytest.raises(EngineNotFoundError):
        create_engine_instance(MaliangI18nConfig(), "deepl")


def test_factory_without_api_key() -> None:
    config = MaliangI18nConfig(active_engine="openai")
    with pytest.raises(ServiceNotInitializedError):
        create_engine_instance(config)
    assert create_engine_or_none(config) is None
