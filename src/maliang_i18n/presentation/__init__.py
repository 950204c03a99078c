# src/maliang_i18n/presentation/__init__.py
