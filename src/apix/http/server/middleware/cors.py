"""CORS 中间件"""

from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware

from apix.common.config import settings
from apix.http.server.constants import DELETE, GET, HEAD, PATCH, POST, PUT


def cors_allow_all() -> Middleware:
    """允许任意来源、常用方法与任意请求头，不允许携带凭证"""
    return Middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=[HEAD, GET, POST, PUT, PATCH, DELETE],
        allow_headers=["*"],
        allow_credentials=False,
    )


def cors(**options) -> Middleware:
    """按参数创建 CORS 中间件，未指定的参数取自配置"""
    options.setdefault("allow_origins", settings.CORS_ALLOW_ORIGINS)
    options.setdefault("allow_credentials", settings.CORS_ALLOW_CREDENTIALS)
    options.setdefault("allow_methods", settings.CORS_ALLOW_METHODS)
    options.setdefault("allow_headers", settings.CORS_ALLOW_HEADERS)
    return Middleware(CORSMiddleware, **options)
