"""请求上下文

包装当前请求与待构建的响应，处理函数通过 Context 读取请求、写入响应。
"""

from __future__ import annotations

from typing import Any, TypeVar

import ujson
from pydantic import BaseModel
from starlette.datastructures import FormData
from starlette.requests import Request
from starlette.responses import Response

from apix.http.errors import (
    EmptyResponseError,
    InvalidRedirectCodeError,
    NoBodyError,
    NotJSONBodyError,
)
from apix.http.server.constants import (
    HEADER_CONTENT_TYPE,
    HEADER_LOCATION,
    MIME_APPLICATION_JSON,
    MIME_APPLICATION_JSON_CHARSET_UTF8,
)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _normalize(value: str) -> str:
    return value.replace(" ", "").upper()


def is_json(content_type: str | None) -> bool:
    """Content-Type 是否为 JSON，忽略大小写与空格"""
    if not content_type:
        return False
    value = _normalize(content_type)
    return value in (_normalize(MIME_APPLICATION_JSON), _normalize(MIME_APPLICATION_JSON_CHARSET_UTF8))


class Context:
    """请求上下文"""

    def __init__(self, request: Request | None = None):
        self.reset(request)

    def reset(self, request: Request | None) -> None:
        self._request = request
        self._store: dict[str, Any] = {}
        self.last_error: BaseException | None = None
        self.status_code = 200
        self.headers: dict[str, str] = {}
        self._cookies: list[tuple[str, str, dict]] = []
        self._body = bytearray()

    # =========================================================================
    # 请求
    # =========================================================================

    @property
    def request(self) -> Request:
        return self._request

    def set_request(self, request: Request) -> None:
        self._request = request

    @property
    def path_params(self) -> dict[str, Any]:
        return self._request.path_params

    def param(self, name: str, default: Any = None) -> Any:
        """路由路径参数"""
        return self._request.path_params.get(name, default)

    def get_header(self, key: str) -> str:
        return self._request.headers.get(key, "")

    async def body(self) -> bytes:
        return await self._request.body()

    async def json_body(self, model: type[ModelT] | None = None) -> ModelT | Any:
        """解析 JSON 请求体，指定 model 时返回校验后的模型

        Raises:
            NoBodyError: 请求体为空
            NotJSONBodyError: Content-Type 不是 JSON
        """
        body = await self._request.body()
        if not body:
            raise NoBodyError()
        if not is_json(self.get_header(HEADER_CONTENT_TYPE)):
            raise NotJSONBodyError()

        data = ujson.loads(body)
        if model is not None:
            return model.model_validate(data)
        return data

    def cookies(self) -> dict[str, str]:
        return dict(self._request.cookies)

    def get_cookie(self, key: str) -> str | None:
        return self._request.cookies.get(key)

    async def form_params(self) -> FormData:
        """表单参数，支持 multipart 与 urlencoded"""
        return await self._request.form()

    async def form_value(self, name: str) -> str:
        """表单字段值，查询参数优先"""
        if name in self._request.query_params:
            return self._request.query_params[name]
        form = await self._request.form()
        value = form.get(name)
        return value if isinstance(value, str) else ""

    def validate(self, value: Any, model: type[ModelT] | None = None) -> ModelT:
        """用 pydantic 模型校验数据

        value 为模型实例时按其类型重新校验。
        """
        if model is None:
            if not isinstance(value, BaseModel):
                raise TypeError("model is required when value is not a pydantic model")
            model = type(value)
            value = value.model_dump()
        return model.model_validate(value)

    # =========================================================================
    # 请求级存储
    # =========================================================================

    def set(self, key: str, value: Any) -> None:
        self._store[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self._store.get(key, default)

    # =========================================================================
    # 响应
    # =========================================================================

    def set_header(self, key: str, value: str) -> None:
        self.headers[key] = value

    def write_header(self, code: int) -> None:
        self.status_code = code

    def write(self, data: bytes | str) -> int:
        if isinstance(data, str):
            data = data.encode()
        self._body.extend(data)
        return len(data)

    def set_cookie(self, name: str, value: str, **options) -> None:
        self._cookies.append((name, value, options))

    def serve_json(self, value: Any) -> None:
        """以 JSON 写入响应体

        Raises:
            EmptyResponseError: value 为 None
        """
        if value is None:
            raise EmptyResponseError()
        if isinstance(value, BaseModel):
            value = value.model_dump(by_alias=True, mode="json")
        self.set_header(HEADER_CONTENT_TYPE, MIME_APPLICATION_JSON_CHARSET_UTF8)
        self.write(ujson.dumps(value, ensure_ascii=False))

    def redirect(self, status: int, url: str) -> None:
        if status < 300 or status > 308:
            raise InvalidRedirectCodeError()
        self.set_header(HEADER_LOCATION, url)
        self.write_header(status)

    @property
    def written(self) -> bytes:
        return bytes(self._body)

    def build_response(self) -> Response:
        response = Response(
            content=bytes(self._body),
            status_code=self.status_code,
            headers=self.headers,
        )
        for name, value, options in self._cookies:
            response.set_cookie(name, value, **options)
        return response
