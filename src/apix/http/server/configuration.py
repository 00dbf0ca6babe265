"""服务配置"""

from dataclasses import dataclass, field

from apix.common.config import settings
from apix.common.exceptions import ConfigurationError


@dataclass
class Configuration:
    """监听地址，格式为 host:port，host 为空时监听所有地址"""

    address: str = field(default_factory=lambda: settings.SERVER_ADDRESS)


@dataclass
class TLSConfiguration:
    key: str
    cert: str

    @classmethod
    def from_settings(cls) -> "TLSConfiguration | None":
        if not settings.SERVER_TLS_CERT or not settings.SERVER_TLS_KEY:
            return None
        return cls(key=settings.SERVER_TLS_KEY, cert=settings.SERVER_TLS_CERT)


def parse_address(address: str) -> tuple[str, int]:
    """解析监听地址

    >>> parse_address(":3355")
    ('0.0.0.0', 3355)
    >>> parse_address("[::1]:8080")
    ('::1', 8080)
    """
    host, sep, port = address.rpartition(":")
    if not sep:
        raise ConfigurationError(f"invalid address: {address}")
    try:
        port_num = int(port)
    except ValueError:
        raise ConfigurationError(f"invalid port in address: {address}") from None
    if not 0 <= port_num <= 65535:
        raise ConfigurationError(f"invalid port in address: {address}")

    host = host.strip("[]") or "0.0.0.0"
    return host, port_num
