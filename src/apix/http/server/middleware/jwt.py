"""JWT 认证中间件

从 Authorization 头读取 Bearer 令牌并校验，校验通过后 claims 存放在 request.state.user。
"""

from __future__ import annotations

import inspect
from typing import Awaitable, Callable, Union

import jwt
from loguru import logger
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from apix.common.config import settings
from apix.common.exceptions import ConfigurationError
from apix.http.server.constants import HEADER_AUTHORIZATION, OPTIONS

Skipper = Callable[[str], bool]
JWTErrorHandler = Callable[[Request, str], Union[Response, Awaitable[Response]]]

ERR_TOKEN_NOT_FOUND = "Required authorization token not found"
ERR_BAD_FORMAT = "Authorization header format must be Bearer {token}"


def default_skipper(_: str) -> bool:
    return False


def default_error_handler(_: Request, message: str) -> Response:
    return PlainTextResponse(message, status_code=401)


def extract_token(request: Request) -> str:
    """解析 Bearer 令牌

    Raises:
        ValueError: 缺少令牌或格式错误
    """
    header = request.headers.get(HEADER_AUTHORIZATION, "")
    if not header:
        raise ValueError(ERR_TOKEN_NOT_FOUND)

    parts = header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise ValueError(ERR_BAD_FORMAT)
    return parts[1]


class JWTMiddleware(BaseHTTPMiddleware):
    """JWT 校验中间件，OPTIONS 请求与 skipper 命中的路径直接放行"""

    def __init__(
        self,
        app,
        key: str,
        skipper: Skipper | None = None,
        algorithm: str = "HS256",
        error_handler: JWTErrorHandler | None = None,
    ):
        if not key:
            raise ConfigurationError("empty JWT key")
        super().__init__(app)
        self.key = key
        self.skipper = skipper or default_skipper
        self.algorithm = algorithm
        self.error_handler = error_handler or default_error_handler

    async def _reject(self, request: Request, message: str) -> Response:
        logger.debug(f"JWT 校验失败: {request.url.path}: {message}")
        response = self.error_handler(request, message)
        if inspect.isawaitable(response):
            response = await response
        return response

    async def dispatch(self, request, call_next):
        if request.method == OPTIONS or self.skipper(request.url.path):
            return await call_next(request)

        try:
            token = extract_token(request)
        except ValueError as e:
            return await self._reject(request, str(e))

        try:
            claims = jwt.decode(token, self.key, algorithms=[self.algorithm])
        except jwt.PyJWTError as e:
            return await self._reject(request, f"Error parsing token: {e}")

        request.state.user = claims
        return await call_next(request)


def jwt_middleware(
    key: str | None = None,
    skipper: Skipper | None = None,
    algorithm: str | None = None,
    error_handler: JWTErrorHandler | None = None,
) -> Middleware:
    """创建 JWT 中间件，未指定 key/algorithm 时取自配置 JWT_SECRET/JWT_ALGORITHM"""
    key = key or settings.JWT_SECRET
    if not key:
        raise ConfigurationError("empty JWT key: pass key or set JWT_SECRET")
    return Middleware(
        JWTMiddleware,
        key=key,
        skipper=skipper,
        algorithm=algorithm or settings.JWT_ALGORITHM,
        error_handler=error_handler,
    )
