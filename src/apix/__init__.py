"""
apix

API 客户端与轻量服务工具集：
- cos: 腾讯云对象存储
- geoip2: MaxMind GeoIP2 查询
- http: HTTP 客户端与服务端
- nsq: NSQ 消息
- common: 通用工具
"""

__version__ = "0.4.0"
