"""服务入口

基于 uvicorn 运行 ASGI 应用：
- start 时立即绑定监听地址，地址错误直接抛出
- SIGINT/SIGTERM 触发优雅关闭，忽略 SIGUSR1
- stop 等待在途请求完成，超时后强制关闭
"""

from __future__ import annotations

import asyncio
import contextlib
import signal
import socket
from typing import Any

import uvicorn
from fastapi import FastAPI
from loguru import logger
from starlette.middleware import Middleware
from starlette.types import ASGIApp

from apix.common.config import settings
from apix.common.files import is_exist
from apix.http.errors import NoRouterError, TLSConfigError
from apix.http.server.configuration import Configuration, TLSConfiguration, parse_address


class _Server(uvicorn.Server):
    """信号由 Entrypoint 统一处理"""

    def install_signal_handlers(self) -> None:
        pass

    @contextlib.contextmanager
    def capture_signals(self):
        yield


def bind_socket(host: str, port: int) -> socket.socket:
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError:
        sock.close()
        raise
    sock.set_inheritable(True)
    return sock


class Entrypoint:
    """HTTP 服务入口"""

    def __init__(self, configuration: Configuration | None = None, tls: TLSConfiguration | None = None):
        self.configuration = configuration or Configuration()
        self.tls = tls
        self.middlewares: list[Middleware] = []
        self._server: _Server | None = None
        self._serve_task: asyncio.Task | None = None
        self._socket: socket.socket | None = None
        self._stopped = asyncio.Event()
        self._signals: list[int] = []
        self._signal_task: asyncio.Task | None = None

    def attach_middleware(self, middleware: Any, **options) -> None:
        """添加中间件，先添加的在外层"""
        if isinstance(middleware, Middleware):
            self.middlewares.append(middleware)
        else:
            self.middlewares.append(Middleware(middleware, **options))

    def build_app(self, router: ASGIApp) -> FastAPI:
        app = FastAPI(
            title=settings.APP_NAME,
            version=settings.APP_VERSION,
            middleware=list(self.middlewares),
            openapi_url=None,
            docs_url=None,
            redoc_url=None,
        )
        app.mount("/", router)
        return app

    def _tls_options(self) -> dict:
        if self.tls is None:
            return {}
        if not is_exist(self.tls.cert) or not is_exist(self.tls.key):
            raise TLSConfigError()
        return {"ssl_certfile": self.tls.cert, "ssl_keyfile": self.tls.key}

    @property
    def address(self) -> str | None:
        """实际监听地址，端口为 0 时返回系统分配的端口"""
        if self._socket is None:
            return None
        host, port = self._socket.getsockname()[:2]
        return f"{host}:{port}"

    @property
    def running(self) -> bool:
        return self._serve_task is not None and not self._serve_task.done()

    async def start(self, router: ASGIApp | None) -> None:
        """绑定地址并在后台开始服务

        Raises:
            NoRouterError: 未提供路由
            TLSConfigError: 证书或私钥文件不存在
            OSError: 地址无法绑定
        """
        if router is None:
            raise NoRouterError()

        tls_options = self._tls_options()
        host, port = parse_address(self.configuration.address)
        self._socket = bind_socket(host, port)

        config = uvicorn.Config(
            self.build_app(router),
            log_level="warning",
            access_log=False,
            **tls_options,
        )
        self._server = _Server(config)
        self._stopped.clear()
        self._serve_task = asyncio.create_task(self._server.serve(sockets=[self._socket]))
        self._serve_task.add_done_callback(lambda _: self._stopped.set())

        self._configure_signals()
        logger.info(f"Serving on: {self.address}")

    def _configure_signals(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self._handle_signal, sig)
            except (NotImplementedError, RuntimeError) as e:
                logger.debug(f"无法注册信号处理 {sig}: {e}")
                continue
            self._signals.append(sig)

        if hasattr(signal, "SIGUSR1"):
            try:
                signal.signal(signal.SIGUSR1, signal.SIG_IGN)
            except ValueError as e:
                logger.debug(f"无法忽略 SIGUSR1: {e}")

    def _remove_signals(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in self._signals:
            loop.remove_signal_handler(sig)
        self._signals.clear()

    def _handle_signal(self, sig: int) -> None:
        # 重复信号复用同一个关闭任务
        if self._signal_task is None or self._signal_task.done():
            self._signal_task = asyncio.create_task(self._on_signal(sig))

    async def _on_signal(self, sig: int) -> None:
        logger.info(f"收到信号 {signal.Signals(sig).name}，正在关闭服务")
        await self.stop()

    async def run(self) -> None:
        """阻塞直到服务停止"""
        await self._stopped.wait()

    async def wait(self) -> None:
        await self.run()

    async def stop(self) -> None:
        """优雅关闭，超时后强制关闭"""
        if self._server is None or self._serve_task is None:
            self._stopped.set()
            return

        self._server.should_exit = True
        try:
            await asyncio.wait_for(
                asyncio.shield(self._serve_task),
                timeout=settings.SERVER_SHUTDOWN_TIMEOUT,
            )
        except asyncio.TimeoutError:
            logger.warning("优雅关闭超时，强制关闭服务")
            self._server.force_exit = True
            await self._serve_task
        finally:
            self._remove_signals()
            if self._socket is not None:
                self._socket.close()
                self._socket = None
            self._stopped.set()

        logger.info("服务已停止")
