"""GeoIP 异常定义"""

from __future__ import annotations

from typing import TYPE_CHECKING

from apix.common.exceptions import ApixException

if TYPE_CHECKING:
    from apix.geoip2.models import GeoResult


class GeoIPError(ApixException):
    """GeoIP 异常基类"""


class NoDatabaseError(GeoIPError):
    def __init__(self):
        super().__init__("no database", error_code="NO_DATABASE")


class InvalidIPError(GeoIPError):
    def __init__(self, ip: str = ""):
        self.ip = ip
        super().__init__("invalid ip address", error_code="INVALID_IP")


class LookupBusyError(GeoIPError):
    """并发查询数已达上限"""

    def __init__(self):
        super().__init__("no more lookup operation for now, wait a minute", error_code="LOOKUP_BUSY")


class LookupTimeoutError(GeoIPError):
    """查询超时，result 为超时前已得到的部分结果"""

    def __init__(self, result: "GeoResult | None" = None):
        self.result = result
        super().__init__("lookup timeout", error_code="LOOKUP_TIMEOUT")


class GeoNotFoundError(GeoIPError):
    """未查到行政区划信息，result 为部分结果"""

    def __init__(self, result: "GeoResult | None" = None):
        self.result = result
        super().__init__("not found", error_code="NOT_FOUND")


class DatabaseDownloadError(GeoIPError):
    def __init__(self, message: str):
        super().__init__(message, error_code="DATABASE_DOWNLOAD_ERROR")


class DatabaseVerifyError(GeoIPError):
    def __init__(self, message: str):
        super().__init__(message, error_code="DATABASE_VERIFY_ERROR")
