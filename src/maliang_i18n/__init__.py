# src/maliang_i18n/__init__.py
"""
maliang-i18n：Maliang CMS 的多语言翻译管理核心。

公共入口：
- `bootstrap.app_lifespan` / `create_app_config`：装配并管理 DI 容器；
- `TranslationOrchestrator`：带缓存、进度与取消的翻译门面；
- `TranslationWorkflowService`：翻译审核与发布状态流转。
"""

__version__ = "1.0.0"
