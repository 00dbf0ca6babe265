"""COS 对象操作"""

from __future__ import annotations

import posixpath
import re
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from pathlib import Path
from typing import IO, Any

import aiofiles
from loguru import logger

from apix.common.config import settings
from apix.common.files import ensure_dir
from apix.cos.errors import CosError, InvalidKeyError, ObjectAlreadyExistsError, OpError
from apix.cos.service import call_sdk
from apix.cos.types import bucket_host, website_host

# 对象键中每一段都不能包含 ^ & | 和空白字符
_INVALID_KEY = re.compile(r"[\^&|\s]")
# 文件名额外不能包含 \ 和 /
_INVALID_FILE_NAME = re.compile(r"[\\\^&/|\s]")

CHUNK_SIZE = 1024 * 1024


def _check_key(key: str) -> None:
    if not key:
        raise CosError("empty objectKey")


def _op_log(message: str) -> None:
    if settings.COS_OPERATION_LOG:
        logger.info(message)


class ObjectMixin:
    """对象相关操作，由 BucketClient 组合使用

    依赖宿主提供 client、bucket、region 属性。
    """

    client: Any
    bucket: str
    region: str

    async def _exists(self, key: str) -> bool:
        return await call_sdk(self.client.object_exists, Bucket=self.bucket, Key=key)

    async def get_object(self, key: str) -> dict:
        """获取对象，返回的 Body 为流式内容"""
        _check_key(key)
        return await call_sdk(self.client.get_object, Bucket=self.bucket, Key=key)

    async def put_object(self, key: str, body: bytes | IO[bytes] | str, force: bool = False, **headers) -> dict:
        """上传对象

        对象已存在且未开启 force 时拒绝覆盖；键包含目录时先写入目录占位对象。
        """
        _check_key(key)
        if any(_INVALID_KEY.search(segment) for segment in key.split("/")):
            raise InvalidKeyError("objectKey cannot contain any ^&| or whitespace")

        if await self._exists(key) and not force:
            raise ObjectAlreadyExistsError("ObjectAlreadyExists(enable force if you want to overwrite)")

        directory, _ = posixpath.split(key)
        if directory:
            await call_sdk(self.client.put_object, Bucket=self.bucket, Body=b"", Key=f"{directory}/")

        resp = await call_sdk(self.client.put_object, Bucket=self.bucket, Body=body, Key=key, **headers)
        _op_log(f"上传对象 \"{key}\" 存储桶=\"{self.bucket}\"")
        return resp

    async def _copy(self, source: str, dest: str, force: bool) -> dict:
        if not source or not dest:
            raise CosError("empty key")

        await self.head_object(source)

        if (
            await self._exists(dest)
            and posixpath.basename(source) == posixpath.basename(dest)
            and not force
        ):
            raise ObjectAlreadyExistsError("ObjectAlreadyExists(enable force if you still want to copy)")

        return await call_sdk(
            self.client.copy_object,
            Bucket=self.bucket,
            Key=dest,
            CopySource={"Bucket": self.bucket, "Key": source, "Region": self.region},
        )

    def copy_source_url(self, key: str) -> str:
        """复制源地址，格式为 <bucket host>/<key>，不含协议"""
        return f"{bucket_host(self.bucket, self.region)}/{key}"

    async def copy(self, source: str, dest: str, force: bool = False) -> dict:
        """复制对象，目标已存在且文件名相同时需开启 force"""
        result = await self._copy(source, dest, force)
        _op_log(f"复制对象 \"{self.copy_source_url(source)}\" -> \"{dest}\" 存储桶=\"{self.bucket}\"")
        return result

    async def move(self, source: str, dest: str, force: bool = False) -> dict:
        result = await self._copy(source, dest, force)
        try:
            await call_sdk(self.client.delete_object, Bucket=self.bucket, Key=source)
        except Exception as e:
            raise OpError("Move with err", "delete sourceKey failed", e) from e

        _op_log(f"移动对象 \"{source}\" -> \"{dest}\" 存储桶=\"{self.bucket}\"")
        return result

    async def rename(self, source: str, file_name: str) -> dict:
        """重命名对象，仅修改文件名部分"""
        if not file_name or _INVALID_FILE_NAME.search(file_name):
            raise InvalidKeyError("filename cannot contain any \\^&/| or whitespace")

        directory, _ = posixpath.split(source)
        dest = posixpath.join(directory, file_name)
        if await self._exists(dest):
            raise ObjectAlreadyExistsError("this action conflicts with other files")

        result = await self._copy(source, dest, False)
        try:
            await call_sdk(self.client.delete_object, Bucket=self.bucket, Key=source)
        except Exception as e:
            raise OpError("Rename with err", "delete sourceKey failed", e) from e

        _op_log(f"重命名对象 \"{source}\" -> \"{dest}\" 存储桶=\"{self.bucket}\"")
        return result

    async def delete_object(self, key: str) -> None:
        """删除对象，对象不存在时同样视为成功"""
        _check_key(key)
        await call_sdk(self.client.delete_object, Bucket=self.bucket, Key=key)
        _op_log(f"删除对象 \"{key}\" 存储桶=\"{self.bucket}\"")

    async def object_download_url(self, key: str) -> str:
        _check_key(key)
        await self.head_object(key)
        return f"https://{bucket_host(self.bucket, self.region)}/{key}"

    async def object_static_url(self, key: str) -> str:
        """静态网站地址，需要存储桶开启静态网站功能"""
        _check_key(key)
        await self.head_object(key)
        return f"https://{website_host(self.bucket, self.region)}/{key}"

    async def head_object(self, key: str, if_modified_since: datetime | None = None) -> dict:
        """获取对象元数据

        Raises:
            OpError: 对象不存在时为 404，指定 if_modified_since 且未修改时为 304
        """
        _check_key(key)
        try:
            headers = await call_sdk(self.client.head_object, Bucket=self.bucket, Key=key)
        except OpError as e:
            if e.status_code == 404:
                raise OpError("404", "NoSuchObject", e.cause, status_code=404) from e
            raise

        if if_modified_since is not None and not _modified_since(headers, if_modified_since):
            raise OpError("304", "NotModified", None, status_code=304)
        return headers

    async def download_object(self, key: str, writer: IO[bytes]) -> int:
        """将对象内容写入二进制流，返回写入字节数"""
        resp = await self.get_object(key)
        return await call_sdk(_copy_body, resp["Body"], writer)

    async def download_to_local(self, key: str, local_path: str | Path, filename: str) -> Path:
        """下载对象到本地目录，目录不存在时自动创建"""
        resp = await self.get_object(key)
        data = await call_sdk(_read_body, resp["Body"])

        target = ensure_dir(local_path) / filename
        async with aiofiles.open(target, "wb") as f:
            await f.write(data)
        return target

    async def presigned_url(self, key: str, method: str = "GET", expires: int = 3600) -> str:
        """生成预签名地址"""
        _check_key(key)
        return await call_sdk(
            self.client.get_presigned_url,
            Bucket=self.bucket,
            Key=key,
            Method=method.upper(),
            Expired=expires,
        )


def _modified_since(headers: dict, since: datetime) -> bool:
    value = headers.get("Last-Modified") or headers.get("last-modified")
    if not value:
        return True
    last_modified = parsedate_to_datetime(value)
    if since.tzinfo is None:
        since = since.replace(tzinfo=UTC)
    return last_modified > since


def _copy_body(body: Any, writer: IO[bytes]) -> int:
    written = 0
    for chunk in body.get_stream(CHUNK_SIZE):
        writer.write(chunk)
        written += len(chunk)
    return written


def _read_body(body: Any) -> bytes:
    return b"".join(body.get_stream(CHUNK_SIZE))
