"""HTTP 客户端

基于 httpx.AsyncClient，默认带 Cookie 容器、连接池与超时配置。
"""

from __future__ import annotations

from typing import Any
from urllib.parse import urlencode

import httpx
import ujson

from apix.common.config import settings
from apix.http.client.request import AUTH_SCHEME_BEARER, HEADER_AUTHORIZATION, Request, parse_url
from apix.http.client.response import Response

MIME_APPLICATION_JSON = "application/json"
MIME_APPLICATION_FORM = "application/x-www-form-urlencoded"


def default_limits() -> httpx.Limits:
    return httpx.Limits(
        max_connections=settings.HTTP_CLIENT_MAX_CONNECTIONS,
        keepalive_expiry=settings.HTTP_CLIENT_KEEPALIVE_EXPIRY,
    )


class Client:
    """HTTP 客户端，headers 中的请求头会附加到每个请求"""

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport | None = None,
        cookies: httpx.Cookies | None = None,
        timeout: float | None = None,
        proxy: str | None = None,
    ):
        self.headers: dict[str, str] = {}
        self.http_client = httpx.AsyncClient(
            transport=transport,
            cookies=cookies if cookies is not None else httpx.Cookies(),
            timeout=timeout if timeout and timeout > 0 else settings.HTTP_CLIENT_TIMEOUT,
            limits=default_limits(),
            proxy=proxy or None,
            follow_redirects=True,
        )

    @property
    def cookies(self) -> httpx.Cookies:
        return self.http_client.cookies

    def set_token(self, token: str) -> None:
        self.headers[HEADER_AUTHORIZATION] = f"{AUTH_SCHEME_BEARER} {token}"

    async def do(self, request: Request) -> Response:
        request.add_headers(self.headers)
        resp = await self.http_client.send(request.build(self.http_client), stream=True)
        return Response(resp)

    async def get(self, url: str) -> Response:
        return await self.do(Request("GET", url))

    async def get_file(self, url: str, directory: str) -> int:
        """下载文件到目录，返回写入字节数"""
        resp = await self.get(url)
        return await resp.save_as_file(directory)

    async def post(self, url: str, content_type: str, body: bytes | str | None) -> Response:
        req = Request("POST", url, body)
        req.set_header("Content-Type", content_type)
        return await self.do(req)

    async def post_form(self, url: str, data: dict[str, Any]) -> Response:
        return await self.post(url, MIME_APPLICATION_FORM, urlencode(data, doseq=True))

    async def post_json(self, url: str, body: Any) -> Response:
        return await self.post(url, MIME_APPLICATION_JSON, ujson.dumps(body, ensure_ascii=False))

    async def aclose(self) -> None:
        await self.http_client.aclose()

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


def new_client_with_proxy(proxy: str | None) -> Client:
    """创建使用代理的客户端，proxy 为空时等同于默认客户端"""
    if not proxy:
        return Client()
    parse_url(proxy)
    return Client(proxy=proxy)
