# src/maliang_i18n/observability/__init__.py
"""可观测性：结构化日志配置。"""
