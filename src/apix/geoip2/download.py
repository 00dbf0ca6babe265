"""MaxMind 数据库下载与解压"""

from __future__ import annotations

import asyncio
import tarfile
from pathlib import Path

import aiofiles
import httpx
from loguru import logger

from apix.common.exceptions import ConfigurationError
from apix.geoip2.errors import DatabaseDownloadError

BASE_URL = "https://download.maxmind.com/app/geoip_download"

ASN_EDITION = "GeoLite2-ASN"
CITY_EDITION = "GeoLite2-City"


def default_url(edition: str, license_key: str | None) -> str:
    """GeoLite2 永久下载链接，需要 license key"""
    if not license_key:
        raise ConfigurationError("MaxMind license key is missing, set GEOIP_LICENSE_KEY")
    return f"{BASE_URL}?edition_id={edition}&license_key={license_key}&suffix=tar.gz"


def _extract_tarball(src: Path, dest: Path) -> None:
    with tarfile.open(src, "r:gz") as tar:
        tar.extractall(path=dest, filter="data")


def _find_mmdb(root: Path, edition: str) -> Path | None:
    for candidate in root.rglob(f"{edition}.mmdb"):
        return candidate
    return None


async def download_mmdb(
    url: str,
    edition: str,
    workspace: Path,
    timeout: float = 300.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Path:
    """下载 tar.gz 数据库包并解压到工作目录

    Returns:
        解压得到的 <edition>.mmdb 路径

    Raises:
        DatabaseDownloadError: 下载失败或压缩包中没有数据库文件
    """
    target_dir = workspace / edition
    await asyncio.to_thread(target_dir.mkdir, parents=True, exist_ok=True)
    tgz_path = workspace / f"{edition}.tar.gz"

    logger.info(f"下载 {edition} ...")
    try:
        async with (
            httpx.AsyncClient(follow_redirects=True, timeout=timeout, transport=transport) as client,
            client.stream("GET", url) as resp,
        ):
            resp.raise_for_status()
            async with aiofiles.open(tgz_path, "wb") as f:
                async for chunk in resp.aiter_bytes():
                    if chunk:
                        await f.write(chunk)
    except httpx.HTTPError as e:
        raise DatabaseDownloadError(f"download {edition} failed: {e}") from e
    logger.info(f"下载 {edition} 完成")

    try:
        await asyncio.to_thread(_extract_tarball, tgz_path, target_dir)
    except (tarfile.TarError, OSError) as e:
        raise DatabaseDownloadError(f"decompress {edition} failed: {e}") from e

    mmdb_path = await asyncio.to_thread(_find_mmdb, target_dir, edition)
    if mmdb_path is None:
        raise DatabaseDownloadError("not found db file")
    return mmdb_path
