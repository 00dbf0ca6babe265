"""NSQ 客户端

- 生产者: 直连 nsqd 发布消息
- 消费者: 每个 "topic/channel" 一个订阅，通过 lookupd 发现 nsqd
  处理函数正常返回时 FIN，抛出异常时 REQ
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
from typing import Any, Awaitable, Callable, Protocol, Union

import ansq
from loguru import logger

from apix.common.config import settings
from apix.nsq.errors import NSQError


class Handler(Protocol):
    def handle_message(self, message: Any) -> Union[None, Awaitable[None]]: ...


class HandlerFunc:
    """将普通函数适配为 Handler"""

    def __init__(self, func: Callable[[Any], Union[None, Awaitable[None]]]):
        self.func = func

    def handle_message(self, message: Any) -> Union[None, Awaitable[None]]:
        return self.func(message)


def split_address(address: str) -> tuple[str, int]:
    host, _, port = address.rpartition(":")
    return host or "127.0.0.1", int(port)


class Subscription:
    """单个 topic/channel 的订阅

    读取任务把消息放入队列，每个处理函数对应一个工作任务并发消费。
    """

    def __init__(self, topic: str, channel: str, reader: Any):
        self.topic = topic
        self.channel = channel
        self.reader = reader
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=1)
        self.handlers: list[Handler] = []
        self._workers: list[asyncio.Task] = []
        self._pump = asyncio.create_task(self._pump_messages())

    @property
    def key(self) -> str:
        return f"{self.topic}/{self.channel}"

    async def _pump_messages(self) -> None:
        async for message in self.reader.messages():
            await self.queue.put(message)

    async def _work(self, handler: Handler) -> None:
        while True:
            message = await self.queue.get()
            try:
                result = handler.handle_message(message)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.warning(f"消息处理失败 {self.key}: {e}")
                await message.req()
            else:
                await message.fin()
            finally:
                self.queue.task_done()

    def add_handler(self, handler: Handler) -> None:
        self.handlers.append(handler)
        self._workers.append(asyncio.create_task(self._work(handler)))

    async def close(self) -> None:
        tasks = [self._pump, *self._workers]
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        await self.reader.close()


class Client:
    """NSQ 客户端"""

    def __init__(
        self,
        client_id: int,
        addr: str | None = None,
        lookupd_http_address: str | None = None,
        config: dict | None = None,
    ):
        self.id = client_id
        self.addr = addr or settings.NSQ_NSQD_TCP_ADDRESS
        self.lookupd_http_address = lookupd_http_address or settings.NSQ_LOOKUPD_HTTP_ADDRESS
        self.config = config or {}
        self.producer: Any = None
        self.topics: set[str] = set()
        self.subscribes: dict[str, Subscription] = {}

    async def connect(self) -> None:
        """连接 nsqd 作为生产者"""
        host, port = split_address(self.addr)
        self.producer = await ansq.open_connection(host, port, **self.config)
        logger.info(f"NSQ 生产者已连接: {self.addr} client={self.id}")

    async def publish(self, topic: str, message: str | bytes) -> None:
        if not topic or not message:
            raise NSQError("no topic or message")
        if self.producer is None:
            raise NSQError("no producer")

        await self.producer.pub(topic, message)
        self.topics.add(topic)

    async def subscribe(
        self,
        topic: str,
        channel: str,
        handler: Handler | None = None,
        config: dict | None = None,
    ) -> None:
        """订阅 topic/channel，已订阅时等同于 set_handler"""
        key = f"{topic}/{channel}"
        if key in self.subscribes:
            self.set_handler(topic, channel, handler)
            return

        options = dict(config) if config is not None else {
            "lookupd_poll_interval": settings.NSQ_LOOKUPD_POLL_INTERVAL * 1000,
        }
        reader = await ansq.create_reader(
            topic=topic,
            channel=channel,
            lookupd_http_addresses=[self.lookupd_http_address],
            **options,
        )

        subscription = Subscription(topic, channel, reader)
        if handler is not None:
            subscription.add_handler(handler)
        self.subscribes[key] = subscription
        logger.info(f"NSQ 已订阅: {key} lookupd={self.lookupd_http_address}")

    def set_handler(self, topic: str, channel: str, handler: Handler | None) -> None:
        key = f"{topic}/{channel}"
        if key not in self.subscribes:
            raise NSQError('use subscribe instead of set_handler if "topic/channel" is new')
        if handler is None:
            raise NSQError("nil handler")
        self.subscribes[key].add_handler(handler)

    async def unsubscribe(self, topic: str, channel: str) -> None:
        key = f"{topic}/{channel}"
        subscription = self.subscribes.pop(key, None)
        if subscription is None:
            raise NSQError(f"no subscription for {key}")
        await subscription.close()

    async def close(self) -> None:
        for key in list(self.subscribes):
            await self.subscribes.pop(key).close()
        if self.producer is not None:
            await self.producer.close()
            self.producer = None
        logger.info(f"NSQ 客户端已关闭: client={self.id}")
