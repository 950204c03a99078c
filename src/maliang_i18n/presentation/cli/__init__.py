# src/maliang_i18n/presentation/cli/__init__.py
from .main import app

__all__ = ["app"]
