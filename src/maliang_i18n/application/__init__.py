# src/maliang_i18n/application/__init__.py
"""
应用服务层。

编排器 (TranslationOrchestrator) 面向表单/编辑器提供有状态的翻译入口，
工作流服务 (TranslationWorkflowService) 负责内容记录的审核与发布状态。
"""

from .client import TranslationClient
from .history import TranslationHistory
from .orchestrator import OrchestratorOptions, TranslationOrchestrator
from .workflow import TranslationWorkflowService

__all__ = [
    "OrchestratorOptions",
    "TranslationClient",
    "TranslationHistory",
    "TranslationOrchestrator",
    "TranslationWorkflowService",
]
