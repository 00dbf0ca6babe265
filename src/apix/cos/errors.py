"""COS 异常定义与 SDK 异常转换"""

from __future__ import annotations

from qcloud_cos.cos_exception import CosClientError, CosServiceError

from apix.common.exceptions import ApixException


class CosError(ApixException):
    """COS 操作异常基类"""

    def __init__(self, message: str, error_code: str | None = "COS_ERROR"):
        super().__init__(message, error_code=error_code)


class OpError(CosError):
    """带错误码的操作异常

    code 为空时渲染为 "message: cause"，否则为 "code(message): cause"。
    """

    def __init__(
        self,
        code: str,
        message: str,
        cause: BaseException | None = None,
        status_code: int | None = None,
    ):
        self.code = code
        self.cause = cause
        self.status_code = status_code
        super().__init__(message, error_code=code or "COS_ERROR")

    def __str__(self) -> str:
        if self.code:
            return f"{self.code}({self.message}): {self.cause}"
        return f"{self.message}: {self.cause}"


class BucketAlreadyExistsError(CosError):
    def __init__(self):
        super().__init__("BucketAlreadyExists", error_code="BucketAlreadyExists")


class BucketNotEmptyError(CosError):
    def __init__(self):
        super().__init__("BucketNotEmpty", error_code="BucketNotEmpty")


class AccessDeniedError(CosError):
    def __init__(self):
        super().__init__("AccessDenied", error_code="AccessDenied")


class NoSuchBucketError(CosError):
    def __init__(self):
        super().__init__("NoSuchBucket", error_code="NoSuchBucket")


class NoBucketError(CosError):
    """账号下没有任何存储桶"""

    def __init__(self):
        super().__init__("no bucket exists", error_code="NoBucket")


class ObjectAlreadyExistsError(CosError):
    def __init__(self, message: str):
        super().__init__(message, error_code="ObjectAlreadyExists")


class InvalidKeyError(CosError):
    """对象键或文件名非法"""

    def __init__(self, message: str):
        super().__init__(message, error_code="InvalidKey")


def convert_error(exc: BaseException) -> OpError | None:
    """将 SDK 异常转换为 OpError，无法识别时返回 None

    - 服务端错误: 使用响应中的错误码和错误信息
    - 客户端错误(DNS、连接失败等): 错误码固定为 ClientError
    """
    if isinstance(exc, OpError):
        return exc
    if isinstance(exc, CosServiceError):
        return OpError(
            exc.get_error_code() or "",
            exc.get_error_msg() or "",
            exc,
            status_code=exc.get_status_code(),
        )
    if isinstance(exc, CosClientError):
        return OpError("ClientError", str(exc), exc)
    return None


__all__ = [
    "AccessDeniedError",
    "BucketAlreadyExistsError",
    "BucketNotEmptyError",
    "CosError",
    "InvalidKeyError",
    "NoBucketError",
    "NoSuchBucketError",
    "ObjectAlreadyExistsError",
    "OpError",
    "convert_error",
]
