"""COS 存储桶客户端单元测试"""

from unittest.mock import patch

import pytest

from apix.common.exceptions import ConfigurationError
from apix.cos import (
    AccessDeniedError,
    BucketClient,
    BucketConfig,
    BucketNotEmptyError,
    CosError,
    NoSuchBucketError,
    OpError,
    confirm_bucket,
)

APP_ID = "1250000000"


class TestCreate:
    """测试创建存储桶客户端"""

    @pytest.mark.asyncio
    async def test_create(self, auth_config, sdk_client):
        config = BucketConfig(authorization=auth_config, name="demo", region="ap-guangzhou")

        with patch("apix.cos.bucket.new_sdk_client", return_value=sdk_client):
            client = await BucketClient.create(config)

        assert client.bucket == f"demo-{APP_ID}"
        assert client.name == "demo"
        sdk_client.list_buckets.assert_called_once()
        sdk_client.list_objects.assert_called_once_with(Bucket=f"demo-{APP_ID}", MaxKeys=1)

    @pytest.mark.asyncio
    async def test_create_missing_bucket(self, cos_error, auth_config, sdk_client):
        sdk_client.list_objects.side_effect = cos_error(404, "NoSuchBucket")
        config = BucketConfig(authorization=auth_config, name="demo", region="ap-guangzhou")

        with patch("apix.cos.bucket.new_sdk_client", return_value=sdk_client):
            with pytest.raises(OpError) as exc_info:
                await BucketClient.create(config)

        assert exc_info.value.code == "NoSuchBucket"

    @pytest.mark.asyncio
    async def test_create_invalid_config(self, auth_config):
        with pytest.raises(ConfigurationError):
            await BucketClient.create(BucketConfig(authorization=auth_config, name="", region="ap-guangzhou"))

    @pytest.mark.asyncio
    async def test_confirm_bucket_without_client(self):
        with pytest.raises(CosError, match="missing client of bucket"):
            await confirm_bucket(None, "demo")


class TestListObjects:
    """测试列出对象"""

    @pytest.mark.asyncio
    async def test_single_object(self, bucket_client, sdk_client):
        """测试 SDK 返回单个对象时不是列表"""
        sdk_client.list_objects.return_value = {
            "Name": f"demo-{APP_ID}",
            "Contents": {
                "Key": "a.txt",
                "ETag": '"d41d8cd98f00b204e9800998ecf8427e"',
                "Size": "12",
                "LastModified": "2025-01-01T00:00:00.000Z",
                "StorageClass": "STANDARD",
                "Owner": {"ID": "1250000000", "DisplayName": "1250000000"},
            },
        }

        objects = await bucket_client.list_objects(prefix="a")

        assert len(objects) == 1
        assert objects[0].key == "a.txt"
        assert objects[0].size == 12
        assert objects[0].owner.id == "1250000000"
        sdk_client.list_objects.assert_called_once_with(
            Bucket=f"demo-{APP_ID}", Prefix="a", Delimiter="", Marker="", MaxKeys=1000
        )

    @pytest.mark.asyncio
    async def test_empty(self, bucket_client, sdk_client):
        sdk_client.list_objects.return_value = {"Name": f"demo-{APP_ID}"}

        assert await bucket_client.list_objects() == []


class TestDeleteBucket:
    """测试删除存储桶"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status,code,expected",
        [
            (409, "BucketNotEmpty", BucketNotEmptyError),
            (403, "AccessDenied", AccessDeniedError),
            (404, "NoSuchBucket", NoSuchBucketError),
        ],
    )
    async def test_mapped_errors(self, cos_error, bucket_client, sdk_client, status, code, expected):
        sdk_client.delete_bucket.side_effect = cos_error(status, code)

        with pytest.raises(expected):
            await bucket_client.delete()

    @pytest.mark.asyncio
    async def test_other_error(self, cos_error, bucket_client, sdk_client):
        sdk_client.delete_bucket.side_effect = cos_error(500, "InternalError")

        with pytest.raises(OpError):
            await bucket_client.delete()

    @pytest.mark.asyncio
    async def test_success(self, bucket_client, sdk_client):
        await bucket_client.delete()

        sdk_client.delete_bucket.assert_called_once_with(Bucket=f"demo-{APP_ID}")
