"""COS 服务级操作

同步 SDK 调用统一通过 asyncio.to_thread 执行，SDK 异常在此处转换为 OpError。
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Callable

from loguru import logger
from qcloud_cos import CosConfig, CosS3Client

from apix.common.config import settings
from apix.common.exceptions import ConfigurationError
from apix.cos.errors import (
    BucketAlreadyExistsError,
    CosError,
    NoBucketError,
    OpError,
    convert_error,
)
from apix.cos.types import AuthorizationConfig, Bucket, BucketConfig, as_list, bucket_id

if TYPE_CHECKING:
    from apix.cos.bucket import BucketClient


async def call_sdk(fn: Callable[..., Any], *args, **kwargs) -> Any:
    """在线程中执行 SDK 调用并转换异常"""
    try:
        return await asyncio.to_thread(fn, *args, **kwargs)
    except Exception as e:
        op_err = convert_error(e)
        if op_err is None or op_err is e:
            raise
        raise op_err from e


def new_sdk_client(auth: AuthorizationConfig, region: str | None = None) -> CosS3Client:
    """创建 SDK 客户端"""
    config = CosConfig(
        Region=region or auth.region or settings.COS_REGION,
        SecretId=auth.secret_id,
        SecretKey=auth.secret_key,
        Scheme=settings.COS_SCHEME,
    )
    return CosS3Client(config)


async def confirm_authorization(client: CosS3Client | None) -> None:
    """确认授权信息可用"""
    if client is None:
        raise CosError("missing client of authorization")
    await call_sdk(client.list_buckets)


class AuthorizationClient:
    """服务级客户端，用于查询账号下的存储桶"""

    def __init__(self, config: AuthorizationConfig, client: CosS3Client | None = None):
        self.config = config
        self.client = client

    @classmethod
    async def create(cls, config: AuthorizationConfig) -> "AuthorizationClient":
        config.check()
        client = new_sdk_client(config)
        await confirm_authorization(client)
        return cls(config, client)

    async def service(self) -> dict:
        """返回服务信息，包含 Owner 和 Buckets"""
        if self.client is None:
            raise CosError("unauthorized client")
        return await call_sdk(self.client.list_buckets)

    async def list_buckets(self) -> list[Bucket]:
        service = await self.service()
        raw = (service.get("Buckets") or {}).get("Bucket")
        buckets = [Bucket.model_validate(item) for item in as_list(raw)]
        if not buckets:
            raise NoBucketError()
        return buckets

    async def create_bucket_client(self, bucket: Bucket) -> "BucketClient":
        """为已存在的存储桶创建客户端

        列表返回的存储桶名称已包含 appid 后缀。
        """
        from apix.cos.bucket import BucketClient

        client = new_sdk_client(self.config, region=bucket.region)
        await call_sdk(client.head_bucket, Bucket=bucket.name)

        config = BucketConfig(
            authorization=self.config,
            name=bucket.name,
            region=bucket.region,
        )
        return BucketClient(config, client)


async def put_bucket(config: BucketConfig, acl: str | None = None) -> None:
    """创建存储桶 <name>-<appid>

    Raises:
        BucketAlreadyExistsError: 存储桶已存在
    """
    if config.authorization is None:
        raise ConfigurationError("missing AuthorizationConfig")
    config.authorization.check()

    client = new_sdk_client(config.authorization, region=config.region)
    name = bucket_id(config.name, config.authorization.app_id)
    try:
        await call_sdk(client.create_bucket, Bucket=name, ACL=acl or settings.COS_DEFAULT_ACL)
    except OpError as e:
        if e.status_code == 409:
            raise BucketAlreadyExistsError() from e
        raise

    logger.info(f"创建存储桶: {name} 区域={config.region}")
