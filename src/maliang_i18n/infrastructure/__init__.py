# src/maliang_i18n/infrastructure/__init__.py
