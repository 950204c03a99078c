# src/maliang_i18n/core/exceptions.py
"""
本模块定义了 maliang_i18n 项目中所有自定义的、语义化的异常类型。

公共 API 在常规失败路径上返回带标签的结果对象（见 `core.types`），
这里的异常主要在边界内部流转，或用于表示配置/调用方错误。
"""

from __future__ import annotations


class MaliangI18nError(Exception):
    """
    所有 maliang_i18n 自定义异常的通用基类。
    捕获此异常可以处理所有源自本项目的预期错误。
    """


class ConfigurationError(MaliangI18nError):
    """
    表示在加载、解析或验证配置时发生的错误。
    例如，引擎配置缺失关键字段，或配置值格式不正确。
    """


class EngineNotFoundError(MaliangI18nError, KeyError):
    """
    表示尝试访问一个未注册或不可用的翻译引擎时引发的错误。
    继承自 KeyError 是为了保持与字典查找行为的一致性。
    """


class ServiceNotInitializedError(MaliangI18nError):
    """
    翻译服务尚未初始化（例如缺少 API 凭据）。

    编排层会识别此错误的消息，并替换为面向用户的、可操作的提示。
    """


class RecordStoreError(MaliangI18nError):
    """记录存储（外部持久化层）返回的错误，可携带一个错误码。"""

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.code = code
        self.message = message


class RecordNotFoundError(RecordStoreError):
    """请求的记录在存储中不存在。"""

    def __init__(self, table: str, record_id: str):
        super().__init__(f"记录不存在: {table}/{record_id}", code="NOT_FOUND")
        self.table = table
        self.record_id = record_id
