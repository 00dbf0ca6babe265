"""NSQ 守护进程启动

以子进程方式运行 nsqlookupd、nsqd、nsqadmin，可执行文件从 NSQ_BIN_DIR 或 PATH 查找。
"""

from __future__ import annotations

import asyncio
import shutil
import signal
import tempfile
from dataclasses import dataclass, field

from loguru import logger

from apix.common.command_runner import start_process, terminate_process
from apix.common.config import settings
from apix.common.logging import setup_logging
from apix.nsq.errors import NSQError

# =============================================================================
# 启动参数
# =============================================================================


@dataclass
class LookupdOptions:
    tcp_address: str = "0.0.0.0:4160"
    http_address: str = "0.0.0.0:4161"
    broadcast_address: str = ""
    log_level: str = "info"
    extra_args: list[str] = field(default_factory=list)

    def to_args(self) -> list[str]:
        args = [
            f"--tcp-address={self.tcp_address}",
            f"--http-address={self.http_address}",
            f"--log-level={self.log_level}",
        ]
        if self.broadcast_address:
            args.append(f"--broadcast-address={self.broadcast_address}")
        return args + self.extra_args


@dataclass
class NsqdOptions:
    tcp_address: str = "0.0.0.0:4150"
    http_address: str = "0.0.0.0:4151"
    data_path: str = ""
    broadcast_address: str = ""
    nsqlookupd_tcp_addresses: list[str] = field(default_factory=list)
    log_level: str = "info"
    extra_args: list[str] = field(default_factory=list)

    def to_args(self) -> list[str]:
        args = [
            f"--tcp-address={self.tcp_address}",
            f"--http-address={self.http_address}",
            f"--log-level={self.log_level}",
        ]
        if self.data_path:
            args.append(f"--data-path={self.data_path}")
        if self.broadcast_address:
            args.append(f"--broadcast-address={self.broadcast_address}")
        args.extend(f"--lookupd-tcp-address={addr}" for addr in self.nsqlookupd_tcp_addresses)
        return args + self.extra_args


@dataclass
class NsqadminOptions:
    http_address: str = "0.0.0.0:4171"
    nsqlookupd_http_addresses: list[str] = field(default_factory=list)
    nsqd_http_addresses: list[str] = field(default_factory=list)
    log_level: str = "info"
    extra_args: list[str] = field(default_factory=list)

    def to_args(self) -> list[str]:
        args = [
            f"--http-address={self.http_address}",
            f"--log-level={self.log_level}",
        ]
        args.extend(f"--lookupd-http-address={addr}" for addr in self.nsqlookupd_http_addresses)
        args.extend(f"--nsqd-http-address={addr}" for addr in self.nsqd_http_addresses)
        return args + self.extra_args


def new_lookupd_options() -> LookupdOptions:
    return LookupdOptions()


def new_nsqd_options() -> NsqdOptions:
    return NsqdOptions()


def new_nsqadmin_options() -> NsqadminOptions:
    return NsqadminOptions()


def local_address(address: str) -> str:
    """监听地址转为本机可连接地址"""
    host, _, port = address.rpartition(":")
    if host in ("", "0.0.0.0", "[::]"):
        host = "127.0.0.1"
    return f"{host}:{port}"


# =============================================================================
# 进程管理
# =============================================================================


@dataclass
class Daemon:
    """已启动的守护进程"""

    name: str
    process: asyncio.subprocess.Process
    options: LookupdOptions | NsqdOptions | NsqadminOptions
    temp_dir: str | None = None

    @property
    def pid(self) -> int:
        return self.process.pid

    async def stop(self, timeout: float = 5.0) -> int | None:
        code = await terminate_process(self.process, timeout=timeout)
        if self.temp_dir:
            shutil.rmtree(self.temp_dir, ignore_errors=True)
        logger.info(f"{self.name} 已停止 pid={self.pid} code={code}")
        return code


def find_binary(name: str) -> str:
    path = shutil.which(name, path=settings.NSQ_BIN_DIR or None)
    if path is None:
        raise NSQError(f"{name} not found, install NSQ or set NSQ_BIN_DIR")
    return path


async def _spawn(name: str, options, temp_dir: str | None = None) -> Daemon:
    args = [find_binary(name), *options.to_args()]
    process = await start_process(args)

    try:
        code = await asyncio.wait_for(process.wait(), timeout=settings.NSQ_STARTUP_GRACE)
    except asyncio.TimeoutError:
        logger.info(f"{name} 已启动 pid={process.pid}")
        return Daemon(name=name, process=process, options=options, temp_dir=temp_dir)

    if temp_dir:
        shutil.rmtree(temp_dir, ignore_errors=True)
    raise NSQError(f"{name} exited with code {code}", exit_code=code)


async def start_nsqlookupd(opts: LookupdOptions | None = None) -> Daemon:
    if opts is None:
        opts = new_lookupd_options()
        opts.log_level = "warn"
    return await _spawn("nsqlookupd", opts)


async def start_nsqd(opts: NsqdOptions | None = None) -> Daemon:
    """启动 nsqd，未指定数据目录时使用临时目录"""
    if opts is None:
        opts = new_nsqd_options()

    temp_dir = None
    if not opts.data_path:
        temp_dir = tempfile.mkdtemp(prefix="nsq-test-")
        opts.data_path = temp_dir
    return await _spawn("nsqd", opts, temp_dir=temp_dir)


async def start_nsqadmin(opts: NsqadminOptions | None = None) -> Daemon:
    if opts is None:
        opts = new_nsqadmin_options()
        opts.log_level = "warn"
    return await _spawn("nsqadmin", opts)


async def run_cluster() -> None:
    """启动本地 nsqlookupd + nsqd + nsqadmin，收到 SIGINT/SIGTERM 后依次停止"""
    daemons: list[Daemon] = []
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    try:
        lookupd = await start_nsqlookupd()
        daemons.append(lookupd)

        nsqd_opts = new_nsqd_options()
        nsqd_opts.nsqlookupd_tcp_addresses = [local_address(lookupd.options.tcp_address)]
        daemons.append(await start_nsqd(nsqd_opts))

        admin_opts = new_nsqadmin_options()
        admin_opts.nsqlookupd_http_addresses = [local_address(lookupd.options.http_address)]
        daemons.append(await start_nsqadmin(admin_opts))

        await stop_event.wait()
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)
        for daemon in reversed(daemons):
            await daemon.stop()


def main() -> None:
    setup_logging()
    asyncio.run(run_cluster())


if __name__ == "__main__":
    main()
