# tests/unit/test_logging_config.py
"""日志配置的单元测试。"""

import json
import logging

import pytest
import structlog

from maliang_i18n.core.types import TextFormat
from maliang_i18n.domain.languages import SupportedLanguage as L
from maliang_i18n.observability.logging_config import (
    HybridPanelRenderer,
    plain_enums,
    setup_logging,
)


@pytest.fixture(autouse=True)
def reset_logging():
    """测试结束后恢复为绑定到真实 stderr 的默认日志配置。"""
    yield
    setup_logging(log_level="WARNING", log_format="console")


def test_setup_logging_sets_levels() -> None:
    setup_logging(log_level="DEBUG", log_format="console", service="svc")
    assert logging.getLogger("maliang_i18n").level == logging.DEBUG
    assert logging.getLogger().level == logging.WARNING
    assert logging.getLogger("httpx").level == logging.WARNING


def test_json_format_renders_structured_events(capsys: pytest.CaptureFixture[str]) -> None:
    setup_logging(log_level="INFO", log_format="json", service="maliang-test")
    structlog.get_logger("maliang_i18n.test").info("缓存命中", key="k1")

    line = capsys.readouterr().err.strip().splitlines()[-1]
    payload = json.loads(line)
    assert payload["event"] == "缓存命中"
    assert payload["key"] == "k1"
    assert payload["service"] == "maliang-test"
    assert "T" in payload["timestamp"]


def test_panel_renderer_skips_empty_events() -> None:
    renderer = HybridPanelRenderer()
    assert renderer(None, "info", {"event": ""}) == ""
    rendered = renderer(None, "info", {"event": "hello", "level": "info", "lang": "en"})
    assert "hello" in rendered
    assert "lang" in rendered


def test_plain_enums_processor_flattens_enum_values() -> None:
    event = {
        "event": "x",
        "target_langs": [L.EN, L.JA],
        "text_format": TextFormat.HTML,
        "translations": {L.EN: "Hello"},
    }
    assert plain_enums(None, "info", event) == {
        "event": "x",
        "target_langs": ["en", "ja"],
        "text_format": "html",
        "translations": {"en": "Hello"},
    }
