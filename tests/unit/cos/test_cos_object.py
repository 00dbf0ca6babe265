"""COS 对象操作单元测试"""

import io
from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest
from qcloud_cos.cos_exception import CosClientError

from apix.cos import CosError, InvalidKeyError, ObjectAlreadyExistsError, OpError

APP_ID = "1250000000"

BUCKET = f"demo-{APP_ID}"


class TestPutObject:
    """测试上传对象"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("key", ["a b.txt", "dir/a^b.txt", "a&b", "x|y/z", "dir\t/a"])
    async def test_invalid_key(self, bucket_client, key):
        with pytest.raises(InvalidKeyError):
            await bucket_client.put_object(key, b"data")

    @pytest.mark.asyncio
    async def test_empty_key(self, bucket_client):
        with pytest.raises(CosError, match="empty objectKey"):
            await bucket_client.put_object("", b"data")

    @pytest.mark.asyncio
    async def test_exists_without_force(self, bucket_client, sdk_client):
        sdk_client.object_exists.return_value = True

        with pytest.raises(ObjectAlreadyExistsError, match="enable force if you want to overwrite"):
            await bucket_client.put_object("a.txt", b"data")
        sdk_client.put_object.assert_not_called()

    @pytest.mark.asyncio
    async def test_exists_with_force(self, bucket_client, sdk_client):
        sdk_client.object_exists.return_value = True

        await bucket_client.put_object("a.txt", b"data", force=True)

        sdk_client.put_object.assert_called_once_with(Bucket=BUCKET, Body=b"data", Key="a.txt")

    @pytest.mark.asyncio
    async def test_directory_placeholder(self, bucket_client, sdk_client):
        """测试键含目录时先写入目录占位对象"""
        await bucket_client.put_object("img/2025/a.png", b"png", ContentType="image/png")

        calls = sdk_client.put_object.call_args_list
        assert len(calls) == 2
        assert calls[0].kwargs == {"Bucket": BUCKET, "Body": b"", "Key": "img/2025/"}
        assert calls[1].kwargs == {
            "Bucket": BUCKET,
            "Body": b"png",
            "Key": "img/2025/a.png",
            "ContentType": "image/png",
        }


class TestCopyMove:
    """测试复制、移动与重命名"""

    @pytest.mark.asyncio
    async def test_copy(self, bucket_client, sdk_client):
        await bucket_client.copy("a/x.txt", "b/y.txt")

        sdk_client.copy_object.assert_called_once_with(
            Bucket=BUCKET,
            Key="b/y.txt",
            CopySource={"Bucket": BUCKET, "Key": "a/x.txt", "Region": "ap-guangzhou"},
        )

    @pytest.mark.asyncio
    async def test_copy_requires_keys(self, bucket_client):
        with pytest.raises(CosError, match="empty key"):
            await bucket_client.copy("", "b.txt")

    @pytest.mark.asyncio
    async def test_copy_missing_source(self, cos_error, bucket_client, sdk_client):
        sdk_client.head_object.side_effect = cos_error(404, "NoSuchResource")

        with pytest.raises(OpError) as exc_info:
            await bucket_client.copy("a.txt", "b.txt")

        assert exc_info.value.code == "404"
        assert exc_info.value.message == "NoSuchObject"

    @pytest.mark.asyncio
    async def test_copy_same_name_exists(self, bucket_client, sdk_client):
        """测试目标存在且文件名相同时需要 force"""
        sdk_client.object_exists.return_value = True

        with pytest.raises(ObjectAlreadyExistsError, match="still want to copy"):
            await bucket_client.copy("a/x.txt", "b/x.txt")

        await bucket_client.copy("a/x.txt", "b/x.txt", force=True)
        sdk_client.copy_object.assert_called_once()

    @pytest.mark.asyncio
    async def test_copy_different_name_exists(self, bucket_client, sdk_client):
        sdk_client.object_exists.return_value = True

        await bucket_client.copy("a/x.txt", "b/y.txt")

        sdk_client.copy_object.assert_called_once()

    def test_copy_source_url(self, bucket_client):
        assert bucket_client.copy_source_url("a/x.txt") == f"{BUCKET}.cos.ap-guangzhou.myqcloud.com/a/x.txt"

    @pytest.mark.asyncio
    async def test_move(self, bucket_client, sdk_client):
        await bucket_client.move("a/x.txt", "b/x.txt")

        sdk_client.copy_object.assert_called_once()
        sdk_client.delete_object.assert_called_once_with(Bucket=BUCKET, Key="a/x.txt")

    @pytest.mark.asyncio
    async def test_move_delete_failed(self, bucket_client, sdk_client):
        sdk_client.delete_object.side_effect = CosClientError("timeout")

        with pytest.raises(OpError) as exc_info:
            await bucket_client.move("a/x.txt", "b/x.txt")

        assert exc_info.value.code == "Move with err"
        assert str(exc_info.value).startswith("Move with err(delete sourceKey failed): ")

    @pytest.mark.asyncio
    async def test_rename(self, bucket_client, sdk_client):
        await bucket_client.rename("docs/old.md", "new.md")

        sdk_client.copy_object.assert_called_once()
        assert sdk_client.copy_object.call_args.kwargs["Key"] == "docs/new.md"
        sdk_client.delete_object.assert_called_once_with(Bucket=BUCKET, Key="docs/old.md")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["", "a/b.md", "a\\b.md", "a b.md", "a^b", "a&b", "a|b"])
    async def test_rename_invalid_name(self, bucket_client, name):
        with pytest.raises(InvalidKeyError):
            await bucket_client.rename("docs/old.md", name)

    @pytest.mark.asyncio
    async def test_rename_conflict(self, bucket_client, sdk_client):
        sdk_client.object_exists.return_value = True

        with pytest.raises(ObjectAlreadyExistsError, match="this action conflicts with other files"):
            await bucket_client.rename("docs/old.md", "new.md")

    @pytest.mark.asyncio
    async def test_rename_delete_failed(self, cos_error, bucket_client, sdk_client):
        sdk_client.delete_object.side_effect = cos_error(500, "InternalError")

        with pytest.raises(OpError) as exc_info:
            await bucket_client.rename("docs/old.md", "new.md")

        assert exc_info.value.code == "Rename with err"


class TestHeadAndUrls:
    """测试元数据查询与地址生成"""

    @pytest.mark.asyncio
    async def test_head_not_found(self, cos_error, bucket_client, sdk_client):
        sdk_client.head_object.side_effect = cos_error(404, "NoSuchResource")

        with pytest.raises(OpError) as exc_info:
            await bucket_client.head_object("missing.txt")

        assert exc_info.value.code == "404"
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_head_not_modified(self, bucket_client, sdk_client):
        sdk_client.head_object.return_value = {"Last-Modified": "Wed, 01 Jan 2025 00:00:00 GMT"}

        with pytest.raises(OpError) as exc_info:
            await bucket_client.head_object("a.txt", if_modified_since=datetime(2025, 6, 1, tzinfo=UTC))
        assert exc_info.value.code == "304"
        assert exc_info.value.message == "NotModified"

        headers = await bucket_client.head_object("a.txt", if_modified_since=datetime(2024, 6, 1))
        assert headers["Last-Modified"].startswith("Wed")

    @pytest.mark.asyncio
    async def test_download_url(self, bucket_client):
        url = await bucket_client.object_download_url("a/b.txt")

        assert url == f"https://{BUCKET}.cos.ap-guangzhou.myqcloud.com/a/b.txt"

    @pytest.mark.asyncio
    async def test_static_url(self, bucket_client):
        url = await bucket_client.object_static_url("index.html")

        assert url == f"https://{BUCKET}.cos-website.ap-guangzhou.myqcloud.com/index.html"

    @pytest.mark.asyncio
    async def test_url_requires_object(self, cos_error, bucket_client, sdk_client):
        sdk_client.head_object.side_effect = cos_error(404, "NoSuchResource")

        with pytest.raises(OpError):
            await bucket_client.object_download_url("missing.txt")

    @pytest.mark.asyncio
    async def test_presigned_url(self, bucket_client, sdk_client):
        sdk_client.get_presigned_url.return_value = "https://signed.example.com/a.txt?sign=x"

        url = await bucket_client.presigned_url("a.txt", method="put", expires=60)

        assert url == "https://signed.example.com/a.txt?sign=x"
        sdk_client.get_presigned_url.assert_called_once_with(
            Bucket=BUCKET, Key="a.txt", Method="PUT", Expired=60
        )


class TestDownload:
    """测试下载"""

    @staticmethod
    def _body(*chunks: bytes) -> MagicMock:
        body = MagicMock()
        body.get_stream.return_value = iter(chunks)
        return body

    @pytest.mark.asyncio
    async def test_download_object(self, bucket_client, sdk_client):
        sdk_client.get_object.return_value = {"Body": self._body(b"ab", b"cd")}
        writer = io.BytesIO()

        written = await bucket_client.download_object("a.txt", writer)

        assert written == 4
        assert writer.getvalue() == b"abcd"

    @pytest.mark.asyncio
    async def test_download_to_local(self, bucket_client, sdk_client, tmp_path):
        """测试目录不存在时自动创建"""
        sdk_client.get_object.return_value = {"Body": self._body(b"hello ", b"cos")}
        target_dir = tmp_path / "x" / "y"

        path = await bucket_client.download_to_local("a.txt", target_dir, "b.txt")

        assert path == target_dir / "b.txt"
        assert path.read_bytes() == b"hello cos"

    @pytest.mark.asyncio
    async def test_delete_object(self, bucket_client, sdk_client):
        await bucket_client.delete_object("a.txt")

        sdk_client.delete_object.assert_called_once_with(Bucket=BUCKET, Key="a.txt")
