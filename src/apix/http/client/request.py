"""HTTP 请求"""

from __future__ import annotations

import httpx

HEADER_AUTHORIZATION = "Authorization"
AUTH_SCHEME_BEARER = "Bearer"


def parse_url(url: str) -> httpx.URL:
    """解析绝对地址，缺少协议或主机时抛出 httpx.InvalidURL"""
    parsed = httpx.URL(url)
    if not parsed.scheme or not parsed.host:
        raise httpx.InvalidURL(f"invalid url: {url!r}")
    return parsed


class Request:
    """待发送的请求，请求头允许重复"""

    def __init__(self, method: str, url: str, body: bytes | str | None = None):
        self.method = method.upper()
        self.url = str(parse_url(url))
        self.body = body
        self._headers: list[tuple[str, str]] = []

    @property
    def headers(self) -> list[tuple[str, str]]:
        return list(self._headers)

    def add_header(self, key: str, value: str) -> None:
        self._headers.append((key, value))

    def add_headers(self, headers: dict[str, str]) -> None:
        for key, value in headers.items():
            self.add_header(key, value)

    def del_header(self, key: str) -> None:
        lowered = key.lower()
        self._headers = [(k, v) for k, v in self._headers if k.lower() != lowered]

    def get_header(self, key: str) -> str:
        lowered = key.lower()
        for k, v in self._headers:
            if k.lower() == lowered:
                return v
        return ""

    def set_header(self, key: str, value: str) -> None:
        self.del_header(key)
        self.add_header(key, value)

    def set_token(self, token: str) -> None:
        self.set_header(HEADER_AUTHORIZATION, f"{AUTH_SCHEME_BEARER} {token}")

    def build(self, client: httpx.AsyncClient) -> httpx.Request:
        return client.build_request(
            self.method,
            self.url,
            content=self.body,
            headers=self._headers,
        )
