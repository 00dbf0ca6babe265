"""路由过滤器

过滤器接收 Context，返回 False 时中止请求处理，可为同步或异步函数。
"""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Awaitable, Callable, Union

if TYPE_CHECKING:
    from apix.http.server.context import Context

FilterFunc = Callable[["Context"], Union[bool, Awaitable[bool]]]


async def maybe_await(value):
    if inspect.isawaitable(value):
        return await value
    return value


async def run_filters(ctx: "Context", filters: tuple[FilterFunc, ...]) -> bool:
    """依次执行过滤器，遇到第一个未通过的立即返回 False"""
    for filter_func in filters:
        if not await maybe_await(filter_func(ctx)):
            return False
    return True

