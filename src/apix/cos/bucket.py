"""COS 存储桶客户端"""

from __future__ import annotations

from loguru import logger
from qcloud_cos import CosS3Client

from apix.cos.errors import (
    AccessDeniedError,
    BucketNotEmptyError,
    CosError,
    NoSuchBucketError,
    OpError,
)
from apix.cos.object import ObjectMixin
from apix.cos.service import call_sdk, confirm_authorization, new_sdk_client
from apix.cos.types import BucketConfig, CosObject, as_list


async def confirm_bucket(client: CosS3Client | None, bucket: str) -> None:
    """确认存储桶可访问"""
    if client is None:
        raise CosError("missing client of bucket")
    await call_sdk(client.list_objects, Bucket=bucket, MaxKeys=1)


class BucketClient(ObjectMixin):
    """存储桶客户端，提供存储桶与对象操作"""

    def __init__(self, config: BucketConfig, client: CosS3Client):
        self.config = config
        self.client = client
        self.bucket = config.bucket_id
        self.region = config.region

    @property
    def name(self) -> str:
        return self.config.name

    @classmethod
    async def create(cls, config: BucketConfig) -> "BucketClient":
        config.check()
        client = new_sdk_client(config.authorization, region=config.region)
        await confirm_authorization(client)
        await confirm_bucket(client, config.bucket_id)
        logger.debug(f"存储桶客户端已就绪: {config.bucket_id}")
        return cls(config, client)

    async def list_objects(
        self,
        prefix: str = "",
        delimiter: str = "",
        marker: str = "",
        max_keys: int = 1000,
    ) -> list[CosObject]:
        """列出对象"""
        resp = await call_sdk(
            self.client.list_objects,
            Bucket=self.bucket,
            Prefix=prefix,
            Delimiter=delimiter,
            Marker=marker,
            MaxKeys=max_keys,
        )
        return [CosObject.model_validate(item) for item in as_list(resp.get("Contents"))]

    async def delete(self) -> None:
        """删除存储桶，存储桶必须为空"""
        try:
            await call_sdk(self.client.delete_bucket, Bucket=self.bucket)
        except OpError as e:
            if e.status_code == 409:
                raise BucketNotEmptyError() from e
            if e.status_code == 403:
                raise AccessDeniedError() from e
            if e.status_code == 404:
                raise NoSuchBucketError() from e
            raise
        logger.info(f"删除存储桶: {self.bucket}")
