"""日志初始化

全部日志经 loguru 输出，写出前统一脱敏：
COS 的 SecretId/SecretKey、MaxMind license_key、Bearer 令牌、口令。
"""

import os
import re
import sys
from typing import Any

from loguru import logger

from apix.common.config import settings

REDACTED = "***REDACTED***"

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> "
    "<level>{level: <7}</level> "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} {level: <7} {process} {name}:{line} | {message}"

# 凭证类字段，任意长度的值都脱敏
_CREDENTIAL_KEYS = (
    r"secret[_-]?id",
    r"secret[_-]?key",
    r"license[_-]?key",
    r"api[_-]?key",
    r"passw(?:or)?d",
    r"pwd",
)
# 令牌类字段，只处理足够长的值，避免误伤 "token: xxx" 之类的错误描述
_TOKEN_KEYS = (r"access[_-]?token", r"token", r"jwt")

_SEP = r"""["']?\s*[:=]\s*["']?"""

_RULES: list[tuple[re.Pattern, str]] = [
    (
        re.compile(rf"\b({'|'.join(_CREDENTIAL_KEYS)}){_SEP}[^\"'\s,&}}]+", re.IGNORECASE),
        rf"\1={REDACTED}",
    ),
    (
        re.compile(rf"\b({'|'.join(_TOKEN_KEYS)}){_SEP}[\w\-.]{{16,}}", re.IGNORECASE),
        rf"\1={REDACTED}",
    ),
    (re.compile(r"\b(bearer)\s+[\w\-.]+", re.IGNORECASE), rf"\1 {REDACTED}"),
]

# 字典键包含以下任一片段即整体脱敏
SENSITIVE_KEYS = frozenset(
    {
        "password",
        "secret",
        "secretid",
        "secretkey",
        "token",
        "authorization",
        "license_key",
        "licensekey",
        "api_key",
    }
)


def sanitize_log_message(message: str) -> str:
    for pattern, replacement in _RULES:
        message = pattern.sub(replacement, message)
    return message


def _is_sensitive(key: Any, keys: frozenset[str]) -> bool:
    name = str(key).lower()
    return any(k in name for k in keys)


def sanitize_dict(data: Any, sensitive_keys: frozenset[str] | set[str] | None = None) -> Any:
    """递归脱敏字典，非字典原样返回"""
    if not isinstance(data, dict):
        return data

    keys = frozenset(sensitive_keys) if sensitive_keys is not None else SENSITIVE_KEYS

    def clean(key: Any, value: Any) -> Any:
        if _is_sensitive(key, keys):
            return REDACTED
        if isinstance(value, dict):
            return sanitize_dict(value, keys)
        if isinstance(value, str):
            return sanitize_log_message(value)
        return value

    return {key: clean(key, value) for key, value in data.items()}


class SanitizingFilter:
    """loguru filter：就地改写 record 中的 message 与 extra"""

    def __call__(self, record: dict[str, Any]) -> bool:
        message = record.get("message")
        if message:
            record["message"] = sanitize_log_message(message)

        extra = record.get("extra")
        if isinstance(extra, dict) and extra:
            record["extra"] = sanitize_dict(extra)
        return True


def _file_sink_options(level: str, log_filter: SanitizingFilter) -> dict[str, Any]:
    return {
        "format": FILE_FORMAT,
        "level": level,
        "rotation": "500 MB",
        "retention": "30 days",
        "compression": "zip",
        "encoding": "utf-8",
        "enqueue": True,
        "filter": log_filter,
    }


def setup_logging(
    level: str | None = None,
    log_to_file: bool | None = None,
    log_file_path: str | None = None,
) -> None:
    """重置 loguru 输出

    Args:
        level: 日志级别，默认 settings.LOG_LEVEL
        log_to_file: 是否同时写文件，默认 settings.LOG_TO_FILE
        log_file_path: 日志文件，默认 settings.LOG_FILE_PATH
    """
    level = (level or settings.LOG_LEVEL).upper()
    if log_to_file is None:
        log_to_file = settings.LOG_TO_FILE
    log_filter = SanitizingFilter()

    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True, filter=log_filter)

    if log_to_file:
        path = log_file_path or settings.LOG_FILE_PATH
        if os.path.dirname(path):
            os.makedirs(os.path.dirname(path), exist_ok=True)
        logger.add(path, **_file_sink_options(level, log_filter))
        logger.info(f"日志输出: level={level} file={path}")
    else:
        logger.info(f"日志输出: level={level}")
