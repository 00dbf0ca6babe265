"""apix 配置

环境变量优先，其次是项目根目录下的 .env 文件。
"""

import os
from functools import cached_property
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _find_project_root() -> Path:
    """离当前工作目录最近的、含 .env 或 pyproject.toml 的目录"""
    cwd = Path.cwd().resolve()
    for directory in (cwd, *cwd.parents):
        if any((directory / marker).is_file() for marker in (".env", "pyproject.toml")):
            return directory
    return cwd


class Settings(BaseSettings):
    """应用配置类"""

    # === 应用信息 ===
    APP_NAME: str = "apix"
    APP_VERSION: str = "0.4.0"

    # === 日志配置 ===
    LOG_LEVEL: str = Field(default="INFO")
    LOG_TO_FILE: bool = Field(default=False)

    # === 路径配置 ===
    BASE_DIR: str = Field(default_factory=lambda: str(_find_project_root()))

    @cached_property
    def data_dir(self) -> str:
        """数据目录"""
        return os.path.join(self.BASE_DIR, "data")

    @cached_property
    def LOG_FILE_PATH(self) -> str:
        return os.path.join(self.data_dir, "logs", "apix.log")

    # === HTTP 客户端配置 ===
    HTTP_CLIENT_TIMEOUT: float = 30.0
    HTTP_CLIENT_MAX_CONNECTIONS: int = 100
    HTTP_CLIENT_KEEPALIVE_EXPIRY: float = 90.0

    # === HTTP 服务配置 ===
    SERVER_ADDRESS: str = Field(default=":3355")
    SERVER_SHUTDOWN_TIMEOUT: float = 3.0
    SERVER_TLS_CERT: str = Field(default="")
    SERVER_TLS_KEY: str = Field(default="")

    # === JWT 配置 ===
    JWT_ALGORITHM: str = "HS256"
    JWT_SECRET: str = Field(default="")

    # === CORS 配置 ===
    CORS_ALLOW_ORIGINS: list[str] = ["*"]
    CORS_ALLOW_CREDENTIALS: bool = False
    CORS_ALLOW_METHODS: list[str] = ["*"]
    CORS_ALLOW_HEADERS: list[str] = ["*"]

    # === 腾讯云 COS 配置 ===
    COS_APP_ID: str = Field(default="")
    COS_SECRET_ID: str = Field(default="")
    COS_SECRET_KEY: str = Field(default="")
    COS_REGION: str = Field(default="ap-guangzhou")
    COS_SCHEME: str = Field(default="https")
    COS_DEFAULT_ACL: str = Field(default="public-read")
    COS_OPERATION_LOG: bool = True

    # === GeoIP 配置 ===
    GEOIP_DB_DIR: str = Field(default="maxminddb")
    GEOIP_TIMEOUT: float = 15.0
    GEOIP_MAX_CONNECT: int = 100
    GEOIP_LICENSE_KEY: str = Field(default="")
    GEOIP_ASN_URL: str = Field(default="")
    GEOIP_CITY_URL: str = Field(default="")
    GEOIP_DOWNLOAD_TIMEOUT: float = 300.0
    GEOIP_UPDATE_CRON: str = Field(default="30 2 * * wed")
    GEOIP_UPDATE_MAX_RETRIES: int = 3
    GEOIP_UPDATE_RETRY_DELAY: float = 60.0
    GEOIP_SERVER_ADDRESS: str = Field(default=":3355")
    SCHEDULER_TIMEZONE: str = "UTC"

    # === NSQ 配置 ===
    NSQ_NSQD_TCP_ADDRESS: str = Field(default="127.0.0.1:4150")
    NSQ_LOOKUPD_HTTP_ADDRESS: str = Field(default="127.0.0.1:4161")
    NSQ_LOOKUPD_POLL_INTERVAL: float = 5.0
    NSQ_BIN_DIR: str = Field(default="")
    NSQ_STARTUP_GRACE: float = 0.5

    model_config = SettingsConfigDict(
        env_file=str(_find_project_root() / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_limits(self) -> "Settings":
        """校验数值配置"""
        if self.GEOIP_MAX_CONNECT < 1:
            raise ValueError("GEOIP_MAX_CONNECT 必须大于 0")
        if self.GEOIP_TIMEOUT <= 0 or self.HTTP_CLIENT_TIMEOUT <= 0:
            raise ValueError("超时时间必须大于 0")
        if self.GEOIP_UPDATE_MAX_RETRIES < 0:
            raise ValueError("GEOIP_UPDATE_MAX_RETRIES 不能为负数")
        return self


# 全局配置实例
settings = Settings()
