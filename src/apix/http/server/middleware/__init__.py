"""HTTP 服务中间件"""

from starlette.middleware import Middleware

from apix.http.server.middleware.cors import cors, cors_allow_all
from apix.http.server.middleware.jwt import JWTMiddleware, extract_token, jwt_middleware
from apix.http.server.middleware.logger import LoggerMiddleware, logger_middleware
from apix.http.server.middleware.recover import RecoverMiddleware, recover_middleware


def make_middlewares() -> list[Middleware]:
    """默认中间件列表：异常恢复、请求日志"""
    return [
        recover_middleware(),
        logger_middleware(),
    ]


__all__ = [
    "JWTMiddleware",
    "LoggerMiddleware",
    "RecoverMiddleware",
    "cors",
    "cors_allow_all",
    "extract_token",
    "jwt_middleware",
    "logger_middleware",
    "make_middlewares",
    "recover_middleware",
]
