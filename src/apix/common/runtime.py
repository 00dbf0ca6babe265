"""运行时 CPU 限制

支持数字（如 "3"）或百分比（如 "50%"）两种写法。
"""

import os

import psutil
from loguru import logger

from apix.common.exceptions import ValidationError


def available_cpus() -> int:
    """当前可用的逻辑 CPU 数"""
    return psutil.cpu_count(logical=True) or os.cpu_count() or 1


def resolve_cpu(value: str) -> int:
    """解析 CPU 配置为具体核数

    百分比结果不足 1 时按 1 计，结果不超过可用核数。

    Raises:
        ValidationError: 配置值非法
    """
    avail = available_cpus()
    value = value.strip()

    if value.endswith("%"):
        try:
            percent = int(value[:-1])
        except ValueError:
            percent = 0
        if percent < 1 or percent > 100:
            raise ValidationError("invalid CPU value: percentage must be between 1-100", field="cpu")
        num_cpu = max(int(avail * percent / 100), 1)
    else:
        try:
            num_cpu = int(value)
        except ValueError:
            num_cpu = 0
        if num_cpu < 1:
            raise ValidationError(
                "invalid CPU value: provide a number or percent greater than 0", field="cpu"
            )

    return min(num_cpu, avail)


def set_cpu(value: str) -> int:
    """按配置限制当前进程可使用的 CPU

    通过 CPU 亲和性绑定实现；平台不支持时只返回解析结果。

    Returns:
        生效的核数
    """
    num_cpu = resolve_cpu(value)
    process = psutil.Process()

    if not hasattr(process, "cpu_affinity"):
        logger.warning(f"当前平台不支持 CPU 亲和性设置，忽略 cpu={value}")
        return num_cpu

    current = process.cpu_affinity()
    if len(current) > num_cpu:
        process.cpu_affinity(current[:num_cpu])
    logger.debug(f"CPU 限制已生效: {num_cpu}/{available_cpus()}")
    return num_cpu
