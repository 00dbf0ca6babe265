"""路由

同一路径的不同方法注册到同一条路由上，方法不匹配时返回 405。
"""

from __future__ import annotations

from typing import Awaitable, Callable, Union

from loguru import logger
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.routing import Route
from starlette.routing import Router as StarletteRouter
from starlette.types import Receive, Scope, Send

from apix.http.errors import FilterNotPassedError
from apix.http.server.constants import DELETE, GET, METHODS, PATCH, POST, PUT
from apix.http.server.context import Context
from apix.http.server.filters import FilterFunc, maybe_await, run_filters

HandlerFunc = Callable[[Context], Union[None, Awaitable[None]]]
ErrorHandler = Callable[[Context], Union[None, Awaitable[None]]]


def _noop_error_handler(_: Context) -> None:
    return None


async def not_found(scope: Scope, receive: Receive, send: Send) -> None:
    response = PlainTextResponse("404 page not found", status_code=404)
    await response(scope, receive, send)


def method_not_allowed() -> Response:
    return PlainTextResponse("405 method not allowed", status_code=405)


class Router:
    """路由注册器，handler() 返回 ASGI 应用"""

    def __init__(self):
        self._routes: dict[str, dict[str, tuple[HandlerFunc, tuple[FilterFunc, ...]]]] = {}
        self._error_handler: ErrorHandler = _noop_error_handler

    def set_error_handler(self, handler: ErrorHandler) -> None:
        """处理函数抛出异常时调用，异常记录在 ctx.last_error"""
        self._error_handler = handler

    def add(self, method: str, pattern: str, handler: HandlerFunc, *filters: FilterFunc) -> None:
        self._routes.setdefault(pattern, {})[method.upper()] = (handler, filters)

    def get(self, pattern: str, handler: HandlerFunc, *filters: FilterFunc) -> None:
        self.add(GET, pattern, handler, *filters)

    def post(self, pattern: str, handler: HandlerFunc, *filters: FilterFunc) -> None:
        self.add(POST, pattern, handler, *filters)

    def put(self, pattern: str, handler: HandlerFunc, *filters: FilterFunc) -> None:
        self.add(PUT, pattern, handler, *filters)

    def patch(self, pattern: str, handler: HandlerFunc, *filters: FilterFunc) -> None:
        self.add(PATCH, pattern, handler, *filters)

    def delete(self, pattern: str, handler: HandlerFunc, *filters: FilterFunc) -> None:
        self.add(DELETE, pattern, handler, *filters)

    async def serve(self, request: Request, handler: HandlerFunc, filters: tuple[FilterFunc, ...]) -> Response:
        ctx = Context(request)

        if not await run_filters(ctx, filters):
            ctx.last_error = FilterNotPassedError()
            logger.debug(f"过滤器未通过: {request.method} {request.url.path}")
            return ctx.build_response()

        try:
            await maybe_await(handler(ctx))
        except Exception as e:
            ctx.last_error = e
            await maybe_await(self._error_handler(ctx))

        return ctx.build_response()

    def _endpoint(self, methods: dict[str, tuple[HandlerFunc, tuple[FilterFunc, ...]]]):
        async def endpoint(request: Request) -> Response:
            entry = methods.get(request.method)
            if entry is None:
                return method_not_allowed()
            handler, filters = entry
            return await self.serve(request, handler, filters)

        return endpoint

    def handler(self) -> StarletteRouter:
        routes = [
            Route(pattern, self._endpoint(methods), methods=list(METHODS))
            for pattern, methods in self._routes.items()
        ]
        return StarletteRouter(routes=routes, default=not_found)
