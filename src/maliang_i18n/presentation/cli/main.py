# src/maliang_i18n/presentation/cli/main.py
"""
maliang-i18n 命令行工具：查看语言目录、执行翻译、检查翻译完整度、计算缓存键。
"""

from __future__ import annotations

import asyncio
import json
import os
from typing import Annotated, Literal, Optional

import typer
from rich.console import Console
from rich.table import Table

from maliang_i18n.bootstrap import app_lifespan, create_app_config
from maliang_i18n.core.types import TextFormat, TranslationResponse
from maliang_i18n.domain.fallback import (
    completeness_percent,
    direction,
    missing_languages,
    resolve_content,
)
from maliang_i18n.domain.languages import (
    LANGUAGE_CONFIG,
    SUPPORTED_LANGUAGES,
    SupportedLanguage,
)
from maliang_i18n.infrastructure.cache.memory import TranslationCache

from ._state import CLISharedState

app = typer.Typer(
    name="maliang-i18n",
    help="多语言内容翻译管理工具。",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()

SOURCE_OPTION = Annotated[
    SupportedLanguage, typer.Option("--source", "-s", help="源语言。")
]
FORMAT_OPTION = Annotated[
    TextFormat, typer.Option("--format", "-f", help="文本格式。")
]


@app.callback()
def main(ctx: typer.Context) -> None:
    """加载配置并放入上下文，供各子命令使用。"""
    env_mode_str = os.getenv("MALIANG_ENV", "dev").lower()
    if env_mode_str not in ("prod", "dev", "test"):
        env_mode_str = "dev"
    env_mode: Literal["prod", "dev", "test"] = env_mode_str  # type: ignore[assignment]
    try:
        config = create_app_config(env_mode=env_mode)
    except Exception as e:
        console.print(f"[bold red]❌ 启动失败：无法加载配置: {e}[/bold red]")
        raise typer.Exit(code=1) from e
    ctx.obj = CLISharedState(config)


@app.command("languages")
def list_languages() -> None:
    """列出系统支持的语言。"""
    table = Table(title="支持的语言")
    table.add_column("代码", style="cyan")
    table.add_column("名称")
    table.add_column("本地名称")
    table.add_column("方向", justify="center")
    for lang in SUPPORTED_LANGUAGES:
        info = LANGUAGE_CONFIG[lang]
        table.add_row(lang.value, info.name, info.native_name, info.direction)
    console.print(table)


def _print_response(response: TranslationResponse) -> None:
    if not response.success:
        console.print(f"[bold red]❌ 翻译失败: {response.error}[/bold red]")
        return
    table = Table(title="翻译结果")
    table.add_column("语言", style="cyan")
    table.add_column("译文", overflow="fold")
    for lang, text in (response.translations or {}).items():
        table.add_row(lang.value, text)
    console.print(table)
    if response.failed_languages:
        console.print(f"[yellow]⚠️ {response.error}[/yellow]")


@app.command("translate")
def translate(
    ctx: typer.Context,
    text: Annotated[str, typer.Argument(help="要翻译的源文本。")],
    source: SOURCE_OPTION = SupportedLanguage.ZH,
    target: Annotated[
        Optional[list[SupportedLanguage]],
        typer.Option("--target", "-t", help="目标语言，可重复；缺省为除源语言外的全部语言。"),
    ] = None,
    text_format: FORMAT_OPTION = TextFormat.PLAIN,
) -> None:
    """把文本一次性翻译到多个目标语言。"""
    state: CLISharedState = ctx.obj

    async def _run() -> TranslationResponse:
        async with app_lifespan(state.config, service_name="maliang-i18n-cli") as container:
            async with container.services.orchestrator() as orchestrator:
                return await orchestrator.translate_to_all(
                    source, text, text_format, target or None
                )

    response = asyncio.run(_run())
    _print_response(response)
    if not response.success:
        raise typer.Exit(code=1)


@app.command("completeness")
def completeness(
    content_json: Annotated[
        str, typer.Argument(help='多语言文本 JSON，例如 \'{"zh": "标题", "en": "Title"}\'。')
    ],
    preview: Annotated[
        Optional[SupportedLanguage],
        typer.Option("--preview", "-p", help="按回退规则预览某个语言的显示文本。"),
    ] = None,
) -> None:
    """检查一段多语言文本的翻译完整度。"""
    try:
        content = json.loads(content_json)
    except json.JSONDecodeError as e:
        console.print(f"[bold red]❌ JSON 格式错误: {e}[/bold red]")
        raise typer.Exit(code=1) from e
    if not isinstance(content, dict):
        console.print("[bold red]❌ 需要一个以语言代码为键的 JSON 对象。[/bold red]")
        raise typer.Exit(code=1)

    missing = missing_languages(content)
    console.print(f"完整度: [bold]{completeness_percent(content)}%[/bold]")
    console.print(
        "缺失语言: " + (", ".join(lang.value for lang in missing) if missing else "无")
    )
    if preview is not None:
        console.print(
            f"预览 ({preview.value}, {direction(preview)}): {resolve_content(content, preview)}"
        )


@app.command("cache-key")
def cache_key(
    text: Annotated[str, typer.Argument(help="源文本。")],
    source: SOURCE_OPTION = SupportedLanguage.ZH,
    target: Annotated[
        list[SupportedLanguage],
        typer.Option("--target", "-t", help="目标语言；给出多个时生成批量键。"),
    ] = [SupportedLanguage.EN],
    text_format: FORMAT_OPTION = TextFormat.PLAIN,
) -> None:
    """输出翻译请求对应的缓存键，可用于预先检查缓存状态。"""
    key_target = target[0] if len(target) == 1 else target
    console.print(
        TranslationCache.generate_key(text, source, key_target, text_format),
        soft_wrap=True,
    )


if __name__ == "__main__":
    app()
