"""
apix 异常模块

各子系统共享的异常基类，子系统异常在各自模块中派生。
"""

from __future__ import annotations

# =============================================================================
# 基础异常类
# =============================================================================


class ApixException(Exception):
    """apix 异常基类"""

    def __init__(self, message: str, error_code: str | None = None):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class ConfigurationError(ApixException):
    """配置错误异常"""

    def __init__(self, message: str):
        super().__init__(message, error_code="CONFIGURATION_ERROR")


class ValidationError(ApixException):
    """验证错误异常"""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message, error_code="VALIDATION_ERROR")
