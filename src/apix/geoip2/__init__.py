"""
GeoIP2 客户端

This product includes GeoLite2 data created by MaxMind, available from http://www.maxmind.com.
"""

from apix.geoip2.client import Client, open_verified
from apix.geoip2.errors import (
    DatabaseDownloadError,
    DatabaseVerifyError,
    GeoIPError,
    GeoNotFoundError,
    InvalidIPError,
    LookupBusyError,
    LookupTimeoutError,
    NoDatabaseError,
)
from apix.geoip2.models import DBMeta, GeoResult

__all__ = [
    "Client",
    "DBMeta",
    "DatabaseDownloadError",
    "DatabaseVerifyError",
    "GeoIPError",
    "GeoNotFoundError",
    "GeoResult",
    "InvalidIPError",
    "LookupBusyError",
    "LookupTimeoutError",
    "NoDatabaseError",
    "open_verified",
]
