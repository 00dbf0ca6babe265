"""
HTTP 服务工具

- Entrypoint: 服务入口
- Router: 路由
- Context: 请求上下文
"""

from apix.http.server.configuration import Configuration, TLSConfiguration, parse_address
from apix.http.server.context import Context, is_json
from apix.http.server.entrypoint import Entrypoint
from apix.http.server.filters import FilterFunc
from apix.http.server.router import HandlerFunc, Router

__all__ = [
    "Configuration",
    "Context",
    "Entrypoint",
    "FilterFunc",
    "HandlerFunc",
    "Router",
    "TLSConfiguration",
    "is_json",
    "parse_address",
]
