"""异常恢复中间件"""

from loguru import logger
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import PlainTextResponse


class RecoverMiddleware(BaseHTTPMiddleware):
    """捕获下游未处理异常，返回 500"""

    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception(f"HTTP 处理异常已恢复: {request.method} {request.url.path}: {e}")
            return PlainTextResponse("Internal Server Error", status_code=500)


def recover_middleware() -> Middleware:
    return Middleware(RecoverMiddleware)
