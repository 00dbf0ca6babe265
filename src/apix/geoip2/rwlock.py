"""asyncio 读写锁

写锁持有期间新的读者等待；写者等待已有读者全部释放。
release_read 为同步方法，可在 Future 回调中调用。
"""

import asyncio
from contextlib import asynccontextmanager


class AsyncRWLock:
    def __init__(self):
        self._writer = asyncio.Lock()
        self._readers = 0
        self._no_readers = asyncio.Event()
        self._no_readers.set()

    @property
    def readers(self) -> int:
        return self._readers

    async def acquire_read(self) -> None:
        async with self._writer:
            self._readers += 1
            self._no_readers.clear()

    def release_read(self) -> None:
        self._readers -= 1
        if self._readers == 0:
            self._no_readers.set()

    async def acquire_write(self) -> None:
        await self._writer.acquire()
        try:
            await self._no_readers.wait()
        except BaseException:
            self._writer.release()
            raise

    def release_write(self) -> None:
        self._writer.release()

    @asynccontextmanager
    async def read(self):
        await self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @asynccontextmanager
    async def write(self):
        await self.acquire_write()
        try:
            yield
        finally:
            self.release_write()
