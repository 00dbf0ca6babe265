"""
腾讯云 COS 客户端

- service: 授权与存储桶查询
- bucket: 存储桶操作
- object: 对象操作
"""

from apix.cos.bucket import BucketClient, confirm_bucket
from apix.cos.errors import (
    AccessDeniedError,
    BucketAlreadyExistsError,
    BucketNotEmptyError,
    CosError,
    InvalidKeyError,
    NoBucketError,
    NoSuchBucketError,
    ObjectAlreadyExistsError,
    OpError,
    convert_error,
)
from apix.cos.service import AuthorizationClient, confirm_authorization, put_bucket
from apix.cos.types import AuthorizationConfig, Bucket, BucketConfig, CosObject, bucket_id

__all__ = [
    "AccessDeniedError",
    "AuthorizationClient",
    "AuthorizationConfig",
    "Bucket",
    "BucketAlreadyExistsError",
    "BucketClient",
    "BucketConfig",
    "BucketNotEmptyError",
    "CosError",
    "CosObject",
    "InvalidKeyError",
    "NoBucketError",
    "NoSuchBucketError",
    "ObjectAlreadyExistsError",
    "OpError",
    "bucket_id",
    "confirm_authorization",
    "confirm_bucket",
    "convert_error",
    "put_bucket",
]
