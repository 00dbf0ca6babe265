"""请求日志中间件"""

import time
from http import HTTPStatus

from loguru import logger
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware


def _status_text(code: int) -> str:
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return ""


class LoggerMiddleware(BaseHTTPMiddleware):
    """记录请求开始与完成"""

    async def dispatch(self, request, call_next):
        start = time.perf_counter()
        client = request.client.host if request.client else "-"
        logger.info(f"Started {request.method} {request.url.path} from {client}")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"Completed {response.status_code} {_status_text(response.status_code)} "
            f"{request.method} {request.url.path} in {duration_ms:.2f}ms"
        )
        return response


def logger_middleware() -> Middleware:
    return Middleware(LoggerMiddleware)
