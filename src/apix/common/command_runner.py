"""外部进程工具"""
from __future__ import annotations

import asyncio
import contextlib
import os

from loguru import logger


def _build_env(env_overrides: dict | None = None) -> dict:
    """构建命令执行环境变量。"""
    base = os.environ.copy()
    if env_overrides:
        base.update(env_overrides)
    return base


async def start_process(
    args: list[str],
    cwd: str | None = None,
    env_overrides: dict | None = None,
) -> asyncio.subprocess.Process:
    """启动长驻进程，不等待结束。

    标准输出和错误输出直接继承当前进程。
    """
    logger.debug(f"启动进程: {' '.join(args)} 目录={cwd or os.getcwd()}")
    return await asyncio.create_subprocess_exec(
        *args,
        cwd=cwd,
        env=_build_env(env_overrides),
    )


async def terminate_process(process: asyncio.subprocess.Process, timeout: float = 5.0) -> int | None:
    """先 SIGTERM，超时后 SIGKILL。"""
    if process.returncode is not None:
        return process.returncode

    with contextlib.suppress(ProcessLookupError):
        process.terminate()
    try:
        return await asyncio.wait_for(process.wait(), timeout=timeout)
    except asyncio.TimeoutError:
        with contextlib.suppress(ProcessLookupError):
            process.kill()
        return await process.wait()


__all__ = ["start_process", "terminate_process"]
