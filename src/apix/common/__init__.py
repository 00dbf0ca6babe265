"""
Common 模块

通用功能：
- config: 配置管理
- logging: 日志配置
- exceptions: 异常定义
- files: 文件工具
- runtime: CPU 限制
- time: 时间工具
- command_runner: 外部进程
"""

from apix.common.config import settings
from apix.common.exceptions import (
    ApixException,
    ConfigurationError,
    ValidationError,
)
from apix.common.files import (
    ensure_dir,
    file_ext,
    file_name,
    is_accessible,
    is_dir_exist,
    is_exist,
)
from apix.common.logging import setup_logging
from apix.common.runtime import resolve_cpu, set_cpu
from apix.common.time import from_timestamp, now_utc, time_to_millis

__all__ = [
    "settings",
    "ApixException",
    "ConfigurationError",
    "ValidationError",
    "ensure_dir",
    "file_ext",
    "file_name",
    "is_accessible",
    "is_dir_exist",
    "is_exist",
    "setup_logging",
    "resolve_cpu",
    "set_cpu",
    "from_timestamp",
    "now_utc",
    "time_to_millis",
]
