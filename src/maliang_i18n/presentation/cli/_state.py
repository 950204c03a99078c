# src/maliang_i18n/presentation/cli/_state.py
"""
定义了 CLI 应用中用于上下文传递的共享状态容器。
"""

from maliang_i18n.config import MaliangI18nConfig


class CLISharedState:
    """用于在 Typer 上下文中传递共享对象的容器。"""

    def __init__(self, config: MaliangI18nConfig):
        self.config = config
