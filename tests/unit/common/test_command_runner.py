"""外部进程工具单元测试"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from apix.common.command_runner import start_process, terminate_process


def _process(returncode=None):
    process = MagicMock()
    process.returncode = returncode
    process.pid = 4242
    process.wait = AsyncMock(return_value=0)
    return process


class TestStartProcess:
    """测试进程启动"""

    @pytest.mark.asyncio
    async def test_env_overrides(self):
        """测试环境变量覆盖与参数透传"""
        process = _process()
        with patch(
            "apix.common.command_runner.asyncio.create_subprocess_exec",
            new=AsyncMock(return_value=process),
        ) as mock_exec:
            result = await start_process(["nsqd", "--tcp-address=:4150"], env_overrides={"FOO": "bar"})

        assert result is process
        args, kwargs = mock_exec.call_args
        assert args == ("nsqd", "--tcp-address=:4150")
        assert kwargs["env"]["FOO"] == "bar"
        assert kwargs["cwd"] is None


class TestTerminateProcess:
    """测试进程终止"""

    @pytest.mark.asyncio
    async def test_already_exited(self):
        process = _process(returncode=3)

        assert await terminate_process(process) == 3
        process.terminate.assert_not_called()

    @pytest.mark.asyncio
    async def test_graceful(self):
        process = _process()

        assert await terminate_process(process) == 0
        process.terminate.assert_called_once()
        process.kill.assert_not_called()

    @pytest.mark.asyncio
    async def test_kill_after_timeout(self):
        """测试 SIGTERM 超时后发送 SIGKILL"""
        calls = {"n": 0}

        async def wait():
            calls["n"] += 1
            if calls["n"] == 1:
                await asyncio.sleep(10)
            return -9

        process = _process()
        process.wait = AsyncMock(side_effect=wait)

        assert await terminate_process(process, timeout=0.01) == -9
        process.terminate.assert_called_once()
        process.kill.assert_called_once()

    @pytest.mark.asyncio
    async def test_process_gone(self):
        """测试进程已不存在时不抛出异常"""
        process = _process()
        process.terminate.side_effect = ProcessLookupError

        assert await terminate_process(process) == 0
