"""HTTP 响应

响应体以流式读取，任一读取方法结束后都会关闭响应。
"""

from __future__ import annotations

import mimetypes
import os
from typing import Any, TypeVar

import aiofiles
import httpx
import ujson
from lxml import etree
from pydantic import BaseModel

from apix.common.files import file_ext, file_name, is_accessible, is_dir_exist, is_exist
from apix.http.errors import UnsupportedMediaTypeError

ModelT = TypeVar("ModelT", bound=BaseModel)

HEADER_CONTENT_TYPE = "Content-Type"
MIME_APPLICATION_JSON = "application/json"
MIME_APPLICATION_XML = "application/xml"
MIME_TEXT_XML = "text/xml"


def xml_to_dict(element: etree._Element) -> Any:
    """XML 元素转为 dict

    属性以 @ 为前缀；同名子元素合并为列表；叶子节点返回文本。
    """
    children = list(element)
    if not children and not element.attrib:
        return (element.text or "").strip()

    result: dict[str, Any] = {f"@{k}": v for k, v in element.attrib.items()}
    for child in children:
        if not isinstance(child.tag, str):
            continue
        tag = etree.QName(child).localname
        value = xml_to_dict(child)
        if tag in result:
            if not isinstance(result[tag], list):
                result[tag] = [result[tag]]
            result[tag].append(value)
        else:
            result[tag] = value

    text = (element.text or "").strip()
    if text and not children:
        result["#text"] = text
    return result


class Response:
    """响应包装"""

    def __init__(self, response: httpx.Response):
        self.http_response = response

    @property
    def status_code(self) -> int:
        return self.http_response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self.http_response.headers

    @property
    def url(self) -> httpx.URL:
        return self.http_response.request.url

    @property
    def content_type(self) -> str:
        return self.http_response.headers.get(HEADER_CONTENT_TYPE, "")

    async def aclose(self) -> None:
        await self.http_response.aclose()

    async def to_bytes(self) -> bytes:
        try:
            return await self.http_response.aread()
        finally:
            await self.http_response.aclose()

    async def to_string(self) -> str:
        data = await self.to_bytes()
        return data.decode(self.http_response.encoding or "utf-8", errors="replace")

    async def to_object(self, model: type[ModelT] | None = None) -> ModelT | Any:
        """按 Content-Type 解析 JSON 或 XML，指定 model 时返回校验后的模型

        Raises:
            UnsupportedMediaTypeError: 既不是 JSON 也不是 XML
        """
        ctype = self.content_type
        if ctype.startswith(MIME_APPLICATION_JSON):
            data = ujson.loads(await self.to_bytes())
        elif ctype.startswith(MIME_APPLICATION_XML) or ctype.startswith(MIME_TEXT_XML):
            root = etree.fromstring(await self.to_bytes())
            data = xml_to_dict(root)
        else:
            await self.aclose()
            raise UnsupportedMediaTypeError(ctype)

        if model is not None:
            return model.model_validate(data)
        return data

    def _guess_ext(self) -> str:
        ext = file_ext(str(self.url))
        if ext:
            return ext
        ctype = self.content_type.split(";", 1)[0].strip()
        if not ctype:
            return ""
        return mimetypes.guess_extension(ctype) or ""

    async def save_as_file(self, directory: str) -> int:
        """将响应体保存到目录，重名时依次使用 name(1).ext、name(2).ext

        Returns:
            写入的字节数
        """
        try:
            directory = os.path.abspath(directory)
            if not is_dir_exist(directory):
                raise FileNotFoundError(f"target directory ({directory}) can't be found")
            if not is_accessible(directory):
                raise PermissionError(f"target directory ({directory}): permission denied")

            name = file_name(str(self.url))
            ext = self._guess_ext()
            filename = os.path.join(directory, f"{name}{ext}")
            i = 1
            while is_exist(filename):
                filename = os.path.join(directory, f"{name}({i}){ext}")
                i += 1

            written = 0
            async with aiofiles.open(filename, "wb") as f:
                async for chunk in self.http_response.aiter_bytes():
                    await f.write(chunk)
                    written += len(chunk)
            return written
        finally:
            await self.http_response.aclose()
