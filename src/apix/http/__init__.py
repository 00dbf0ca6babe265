"""
HTTP 模块

- client: 客户端
- server: 服务端
"""
