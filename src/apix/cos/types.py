"""COS 配置与数据模型"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from apix.common.config import settings
from apix.common.exceptions import ConfigurationError


@dataclass
class AuthorizationConfig:
    """授权配置

    app_id 用于创建存储桶，secret_id/secret_key 用于请求签名。
    密钥在控制台 https://console.cloud.tencent.com/cam/capi 获取。
    """

    app_id: str
    secret_id: str
    secret_key: str
    region: str | None = None

    def check(self) -> None:
        if not self.app_id:
            raise ConfigurationError("empty app ID")
        if not self.secret_id:
            raise ConfigurationError("empty secret ID")
        if not self.secret_key:
            raise ConfigurationError("empty secret Key")

    @classmethod
    def from_settings(cls) -> "AuthorizationConfig":
        return cls(
            app_id=settings.COS_APP_ID,
            secret_id=settings.COS_SECRET_ID,
            secret_key=settings.COS_SECRET_KEY,
            region=settings.COS_REGION,
        )


@dataclass
class BucketConfig:
    """存储桶配置，name 不含 appid 后缀时自动补全"""

    authorization: AuthorizationConfig | None
    name: str
    region: str

    def check(self) -> None:
        if self.authorization is None:
            raise ConfigurationError("missing AuthorizationConfig")
        self.authorization.check()
        if not self.name:
            raise ConfigurationError("bucket name is needed but none exists")
        if not self.region:
            raise ConfigurationError("bucket region is needed but none exists")

    @property
    def bucket_id(self) -> str:
        return bucket_id(self.name, self.authorization.app_id if self.authorization else "")


def bucket_id(name: str, app_id: str) -> str:
    """返回 <name>-<appid> 形式的存储桶标识"""
    suffix = f"-{app_id}"
    if not app_id or name.endswith(suffix):
        return name
    return f"{name}{suffix}"


def bucket_host(bucket: str, region: str) -> str:
    return f"{bucket}.cos.{region}.myqcloud.com"


def website_host(bucket: str, region: str) -> str:
    return f"{bucket}.cos-website.{region}.myqcloud.com"


class Owner(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default="", alias="ID")
    display_name: str = Field(default="", alias="DisplayName")


class Bucket(BaseModel):
    """存储桶信息"""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(alias="Name")
    region: str = Field(default="", alias="Location")
    create_date: datetime | str | None = Field(default=None, alias="CreationDate")


class CosObject(BaseModel):
    """对象信息"""

    model_config = ConfigDict(populate_by_name=True)

    key: str = Field(alias="Key")
    etag: str = Field(default="", alias="ETag")
    size: int = Field(default=0, alias="Size")
    last_modified: datetime | str | None = Field(default=None, alias="LastModified")
    storage_class: str = Field(default="", alias="StorageClass")
    owner: Owner | None = Field(default=None, alias="Owner")


def as_list(value: Any) -> list:
    """SDK 的 XML 转换结果中，单个元素不是列表"""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]
