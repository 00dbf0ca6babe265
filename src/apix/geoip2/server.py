"""GeoIP 查询服务

- GET  /meta  数据库元信息
- POST /geo   {"ip": "..."} 查询地理信息

数据库按 GEOIP_UPDATE_CRON 定时更新。
"""

from __future__ import annotations

import asyncio

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from loguru import logger
from pydantic import BaseModel

from apix.common.config import settings
from apix.common.logging import setup_logging
from apix.geoip2.client import Client
from apix.geoip2.errors import (
    GeoNotFoundError,
    InvalidIPError,
    LookupBusyError,
    LookupTimeoutError,
    NoDatabaseError,
)
from apix.http.errors import NoBodyError, NotJSONBodyError
from apix.http.server import Configuration, Context, Entrypoint, Router
from apix.http.server.middleware import make_middlewares


class Query(BaseModel):
    ip: str


ERROR_STATUS: list[tuple[type[BaseException], int]] = [
    (InvalidIPError, 400),
    (NoBodyError, 400),
    (NotJSONBodyError, 400),
    (ValueError, 400),
    (GeoNotFoundError, 404),
    (LookupBusyError, 429),
    (NoDatabaseError, 503),
    (LookupTimeoutError, 504),
]


def status_for(err: BaseException) -> int:
    for exc_type, status in ERROR_STATUS:
        if isinstance(err, exc_type):
            return status
    return 500


def error_handler(ctx: Context) -> None:
    """将处理异常转换为 JSON 错误响应"""
    err = ctx.last_error
    status = status_for(err)
    if status >= 500:
        logger.error(f"GeoIP 请求失败: {err}")
    else:
        logger.debug(f"GeoIP 请求失败: {err}")

    content = {
        "success": False,
        "code": status,
        "message": str(err),
        "error_code": getattr(err, "error_code", None),
    }
    result = getattr(err, "result", None)
    if result is not None:
        content["data"] = result.to_json()

    ctx.write_header(status)
    ctx.serve_json(content)


def create_router(client: Client) -> Router:
    async def get_meta(ctx: Context) -> None:
        metas = await client.db_meta()
        ctx.write_header(200)
        ctx.serve_json([meta.to_json() for meta in metas])

    async def lookup(ctx: Context) -> None:
        query = await ctx.json_body(Query)
        result = await client.lookup(query.ip)
        ctx.write_header(200)
        ctx.serve_json(result.to_json())

    router = Router()
    router.get("/meta", get_meta)
    router.post("/geo", lookup)
    router.set_error_handler(error_handler)
    return router


def create_scheduler(client: Client) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler(
        timezone=settings.SCHEDULER_TIMEZONE,
        job_defaults={
            "coalesce": True,
            "max_instances": 1,
            "misfire_grace_time": 300,
        },
    )
    scheduler.add_job(
        func=client.update_db,
        trigger=CronTrigger.from_crontab(settings.GEOIP_UPDATE_CRON, timezone=settings.SCHEDULER_TIMEZONE),
        id="geoip_update_db",
        name="GeoIP 数据库更新",
        replace_existing=True,
    )
    return scheduler


async def serve(address: str | None = None) -> None:
    client = Client.from_settings()
    await client.init()

    scheduler = create_scheduler(client)
    scheduler.start()
    logger.info(f"已注册 GeoIP 数据库更新任务: {settings.GEOIP_UPDATE_CRON}")

    ep = Entrypoint(Configuration(address or settings.GEOIP_SERVER_ADDRESS))
    for middleware in make_middlewares():
        ep.attach_middleware(middleware)

    try:
        await ep.start(create_router(client).handler())
        await ep.run()
    finally:
        scheduler.shutdown(wait=False)
        await client.close()


def main() -> None:
    setup_logging()
    asyncio.run(serve())


if __name__ == "__main__":
    main()
