"""GeoIP2 查询客户端

同时维护 ASN 与 City 两个数据库：
- init: 本地缺失时下载，打开并校验
- update_db: 后台下载新库，校验通过后在写锁下整体替换
- lookup: 读锁下在线程中查询，带并发上限与超时
"""

from __future__ import annotations

import asyncio
import ipaddress
import os
import shutil
from pathlib import Path

import maxminddb
from loguru import logger

from apix.common.config import settings
from apix.common.files import is_exist
from apix.common.time import now_utc
from apix.geoip2.download import ASN_EDITION, CITY_EDITION, default_url, download_mmdb
from apix.geoip2.errors import (
    DatabaseVerifyError,
    GeoNotFoundError,
    InvalidIPError,
    LookupBusyError,
    LookupTimeoutError,
    NoDatabaseError,
)
from apix.geoip2.models import DBMeta, GeoResult
from apix.geoip2.rwlock import AsyncRWLock


def open_verified(path: str | Path, edition: str) -> maxminddb.Reader:
    """打开数据库并做基本校验，校验失败时关闭并抛出异常"""
    reader = maxminddb.open_database(str(path))
    meta = reader.metadata()
    kind = edition.rsplit("-", 1)[-1]
    if meta.node_count <= 0 or kind not in meta.database_type:
        reader.close()
        raise DatabaseVerifyError(
            f"invalid database {path}: type={meta.database_type} nodes={meta.node_count}"
        )
    return reader


class Client:
    """GeoIP2 客户端"""

    def __init__(
        self,
        db_location_dir: str | Path = "maxminddb",
        max_connect: int = 100,
        timeout: float = 15.0,
        license_key: str | None = None,
        asn_url: str | None = None,
        city_url: str | None = None,
        download_timeout: float = 300.0,
        update_max_retries: int = 3,
        update_retry_delay: float = 60.0,
    ):
        self.db_location_dir = Path(db_location_dir)
        self.max_connect = max_connect
        self.timeout = timeout
        self.license_key = license_key
        self.asn_url = asn_url
        self.city_url = city_url
        self.download_timeout = download_timeout
        self.update_max_retries = update_max_retries
        self.update_retry_delay = update_retry_delay

        self.asn_db: maxminddb.Reader | None = None
        self.city_db: maxminddb.Reader | None = None
        self._lock = AsyncRWLock()
        self._in_flight = 0

    @classmethod
    def from_settings(cls) -> "Client":
        return cls(
            db_location_dir=settings.GEOIP_DB_DIR,
            max_connect=settings.GEOIP_MAX_CONNECT,
            timeout=settings.GEOIP_TIMEOUT,
            license_key=settings.GEOIP_LICENSE_KEY or None,
            asn_url=settings.GEOIP_ASN_URL or None,
            city_url=settings.GEOIP_CITY_URL or None,
            download_timeout=settings.GEOIP_DOWNLOAD_TIMEOUT,
            update_max_retries=settings.GEOIP_UPDATE_MAX_RETRIES,
            update_retry_delay=settings.GEOIP_UPDATE_RETRY_DELAY,
        )

    # =========================================================================
    # 路径
    # =========================================================================

    @property
    def asn_db_location(self) -> Path:
        return self.db_location_dir / f"{ASN_EDITION}.mmdb"

    @property
    def city_db_location(self) -> Path:
        return self.db_location_dir / f"{CITY_EDITION}.mmdb"

    @property
    def workspace(self) -> Path:
        return self.db_location_dir / "download"

    @property
    def in_flight(self) -> int:
        return self._in_flight

    def _url(self, edition: str) -> str:
        custom = self.asn_url if edition == ASN_EDITION else self.city_url
        return custom or default_url(edition, self.license_key)

    async def _remove_workspace(self) -> None:
        try:
            await asyncio.to_thread(shutil.rmtree, self.workspace)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"清理下载目录失败: {e}")

    async def _fetch(self, edition: str) -> Path:
        return await download_mmdb(
            self._url(edition),
            edition,
            self.workspace,
            timeout=self.download_timeout,
        )

    # =========================================================================
    # 生命周期
    # =========================================================================

    async def _init_one(self, edition: str, location: Path) -> maxminddb.Reader:
        if not is_exist(location):
            path = await self._fetch(edition)
            await asyncio.to_thread(location.parent.mkdir, parents=True, exist_ok=True)
            await asyncio.to_thread(os.replace, path, location)

        try:
            return await asyncio.to_thread(open_verified, location, edition)
        except Exception:
            await asyncio.to_thread(location.unlink, missing_ok=True)
            raise

    async def init(self) -> None:
        """初始化数据库，本地不存在时先下载"""
        try:
            results = await asyncio.gather(
                self._init_one(ASN_EDITION, self.asn_db_location),
                self._init_one(CITY_EDITION, self.city_db_location),
                return_exceptions=True,
            )
        finally:
            await self._remove_workspace()

        errors = [r for r in results if isinstance(r, BaseException)]
        if errors:
            for reader in results:
                if not isinstance(reader, BaseException):
                    reader.close()
            logger.error(f"GeoIP 数据库初始化失败: {errors[0]}")
            raise errors[0]

        async with self._lock.write():
            self.asn_db, self.city_db = results
        logger.info("GeoIP 数据库初始化完成")

    async def _fetch_verified(self, edition: str) -> Path:
        path = await self._fetch(edition)
        reader = await asyncio.to_thread(open_verified, path, edition)
        reader.close()
        return path

    async def _update_once(self) -> None:
        try:
            asn_path, city_path = await asyncio.gather(
                self._fetch_verified(ASN_EDITION),
                self._fetch_verified(CITY_EDITION),
            )
            await asyncio.to_thread(self.db_location_dir.mkdir, parents=True, exist_ok=True)
            await asyncio.to_thread(os.replace, asn_path, self.asn_db_location)
            await asyncio.to_thread(os.replace, city_path, self.city_db_location)
        finally:
            await self._remove_workspace()

        asn_db = await asyncio.to_thread(maxminddb.open_database, str(self.asn_db_location))
        try:
            city_db = await asyncio.to_thread(maxminddb.open_database, str(self.city_db_location))
        except Exception:
            asn_db.close()
            raise

        async with self._lock.write():
            old = (self.asn_db, self.city_db)
            self.asn_db, self.city_db = asn_db, city_db

        for reader in old:
            if reader is not None:
                reader.close()

    async def update_db(self) -> bool:
        """下载并替换数据库，失败时按退避重试，旧库在此期间继续提供查询

        Returns:
            是否更新成功
        """
        logger.info(f"更新 GeoIP 数据库: {now_utc().isoformat()}")

        attempts = self.update_max_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                await self._update_once()
            except Exception as e:
                logger.warning(f"GeoIP 数据库更新失败 ({attempt}/{attempts}): {e}")
                if attempt < attempts:
                    await asyncio.sleep(self.update_retry_delay * attempt)
                continue

            logger.info("GeoIP 数据库更新完成")
            return True

        logger.error("GeoIP 数据库更新放弃，继续使用旧数据库")
        return False

    async def close(self) -> None:
        async with self._lock.write():
            if self.asn_db is None or self.city_db is None:
                raise NoDatabaseError()
            self.asn_db.close()
            self.city_db.close()
            self.asn_db = None
            self.city_db = None

    # =========================================================================
    # 查询
    # =========================================================================

    def _meta(self) -> list[DBMeta]:
        if self.asn_db is None or self.city_db is None:
            raise NoDatabaseError()
        return [
            DBMeta.from_metadata(self.asn_db.metadata()),
            DBMeta.from_metadata(self.city_db.metadata()),
        ]

    async def db_meta(self) -> list[DBMeta]:
        async with self._lock.read():
            return self._meta()

    @staticmethod
    def _lookup_sync(asn_db: maxminddb.Reader, city_db: maxminddb.Reader, ip: str, raw: dict) -> None:
        raw["asn"] = asn_db.get(ip)
        raw["city"] = city_db.get(ip)

    def _release_after(self, future: asyncio.Future) -> None:
        self._lock.release_read()
        self._in_flight -= 1
        if not future.cancelled():
            future.exception()

    async def lookup(self, ip: str) -> GeoResult:
        """查询 IP 地理信息

        Raises:
            LookupBusyError: 并发查询数已达上限
            InvalidIPError: IP 地址非法
            NoDatabaseError: 数据库未加载
            LookupTimeoutError: 超时，附带部分结果
            GeoNotFoundError: 没有行政区划信息，附带部分结果
        """
        if self._in_flight >= self.max_connect:
            raise LookupBusyError()

        self._in_flight += 1
        handed_off = False
        try:
            try:
                address = ipaddress.ip_address(ip.strip())
            except ValueError:
                raise InvalidIPError(ip) from None

            await self._lock.acquire_read()
            try:
                asn_db, city_db = self.asn_db, self.city_db
                if asn_db is None or city_db is None:
                    raise NoDatabaseError()

                raw: dict = {}
                future = asyncio.ensure_future(
                    asyncio.to_thread(self._lookup_sync, asn_db, city_db, str(address), raw)
                )
                # 查询名额与读锁随后台查询结束释放，超时后也不会关闭正在使用的库
                future.add_done_callback(self._release_after)
                handed_off = True
            finally:
                if not handed_off:
                    self._lock.release_read()

            try:
                await asyncio.wait_for(asyncio.shield(future), timeout=self.timeout)
            except asyncio.TimeoutError:
                raise LookupTimeoutError(
                    GeoResult.from_records(raw.get("asn"), raw.get("city"))
                ) from None

            result = GeoResult.from_records(raw.get("asn"), raw.get("city"))
            if not result.subdivisions:
                raise GeoNotFoundError(result)
            return result
        finally:
            if not handed_off:
                self._in_flight -= 1
