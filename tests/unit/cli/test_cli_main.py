# tests/unit/cli/test_cli_main.py
"""针对 maliang-i18n CLI 主入口的单元测试。"""

import json

import pytest
from typer.testing import CliRunner

from maliang_i18n.infrastructure.cache.memory import TranslationCache
from maliang_i18n.observability.logging_config import setup_logging
from maliang_i18n.presentation.cli import app

runner = CliRunner()

DEBUG_ENV = {
    "MALIANG_ACTIVE_ENGINE": "debug",
    "MALIANG_LOGGING__LEVEL": "ERROR",
}


@pytest.fixture(autouse=True)
def reset_logging():
    """CliRunner 的输出流在调用结束后关闭，需重新绑定日志输出。"""
    yield
    setup_logging(log_level="WARNING", log_format="console")


def test_help_command() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "多语言内容翻译管理工具" in result.stdout


def test_languages_command_lists_catalog() -> None:
    result = runner.invoke(app, ["languages"])
    assert result.exit_code == 0
    for code in ("zh", "en", "ja", "ko", "ar", "es"):
        assert code in result.stdout
    assert "rtl" in result.stdout
    assert "العربية" in result.stdout


def test_translate_command_with_debug_engine() -> None:
    result = runner.invoke(
        app,
        ["translate", "你好", "--source", "zh", "--target", "en", "--target", "ja"],
        env=DEBUG_ENV,
    )
    assert result.exit_code == 0, result.output
    assert "Translated(你好) to en" in result.stdout
    assert "Translated(你好) to ja" in result.stdout


def test_translate_command_reports_partial_success() -> None:
    env = {**DEBUG_ENV, "MALIANG_DEBUG_ENGINE__MODE": "PARTIAL_FAIL"}
    result = runner.invoke(
        app, ["translate", "你好", "-s", "zh", "-t", "en", "-t", "ja"], env=env
    )
    assert result.exit_code == 0, result.output
    assert "Translated(你好) to en" in result.stdout
    assert "Partial translation: 1/2" in result.stdout


def test_translate_command_failure_exits_non_zero() -> None:
    env = {**DEBUG_ENV, "MALIANG_DEBUG_ENGINE__MODE": "FAIL"}
    result = runner.invoke(app, ["translate", "你好", "-t", "en"], env=env)
    assert result.exit_code == 1
    assert "DebugEngine is in FAIL mode." in result.stdout


def test_completeness_command() -> None:
    content = json.dumps({"zh": "标题", "en": "Title", "ja": "タイトル"}, ensure_ascii=False)
    result = runner.invoke(app, ["completeness", content, "--preview", "ko"])
    assert result.exit_code == 0
    assert "50%" in result.stdout
    assert "ko, ar, es" in result.stdout
    assert "Title" in result.stdout


@pytest.mark.parametrize("payload", ["not json", "[1, 2]"])
def test_completeness_command_rejects_bad_input(payload: str) -> None:
    result = runner.invoke(app, ["completeness", payload])
    assert result.exit_code == 1


def test_cache_key_command() -> None:
    single = runner.invoke(app, ["cache-key", "你好", "-s", "zh", "-t", "en"])
    assert single.exit_code == 0
    assert single.stdout.strip() == TranslationCache.generate_key("你好", "zh", "en", "plain")

    batch = runner.invoke(
        app, ["cache-key", "你好", "-t", "ja", "-t", "en", "--format", "markdown"]
    )
    assert batch.exit_code == 0
    assert batch.stdout.strip() == TranslationCache.generate_key(
        "你好", "zh", ["en", "ja"], "markdown"
    )


def test_unknown_language_is_rejected_by_cli() -> None:
    result = runner.invoke(app, ["cache-key", "你好", "-t", "fr"])
    assert result.exit_code != 0
