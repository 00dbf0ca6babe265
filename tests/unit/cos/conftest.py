"""COS 测试公共夹具"""

from unittest.mock import MagicMock

import pytest
from qcloud_cos.cos_exception import CosServiceError

from apix.cos import AuthorizationConfig, BucketClient, BucketConfig

APP_ID = "1250000000"


def service_error(status: int, code: str, message: str = "") -> CosServiceError:
    """构造 SDK 服务端异常"""
    digest = {
        "code": code,
        "message": message,
        "resource": "",
        "requestid": "req-1",
        "traceid": "trace-1",
    }
    return CosServiceError("HEAD", digest, status)


@pytest.fixture
def cos_error():
    """SDK 服务端异常工厂"""
    return service_error


@pytest.fixture
def auth_config():
    return AuthorizationConfig(
        app_id=APP_ID,
        secret_id="AKIDtest",
        secret_key="secret",
        region="ap-guangzhou",
    )


@pytest.fixture
def sdk_client():
    """模拟 CosS3Client"""
    client = MagicMock()
    client.object_exists.return_value = False
    client.head_object.return_value = {}
    client.put_object.return_value = {"ETag": '"etag"'}
    client.copy_object.return_value = {"ETag": '"etag"'}
    client.delete_object.return_value = {}
    return client


@pytest.fixture
def bucket_client(auth_config, sdk_client):
    config = BucketConfig(authorization=auth_config, name="demo", region="ap-guangzhou")
    return BucketClient(config, sdk_client)
