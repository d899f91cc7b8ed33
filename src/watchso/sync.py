"""Asyncio synchronization primitives."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Generic, TypeVar

T = TypeVar("T")


class RWLock:
    """Read/write lock for read heavy state shared between tasks.

    Any number of readers may hold the lock at once. A waiting writer blocks
    new readers, so writers are not starved by a steady stream of reads.
    """

    def __init__(self) -> None:
        self._cond = asyncio.Condition()
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @asynccontextmanager
    async def read(self) -> AsyncIterator[None]:
        async with self._cond:
            await self._cond.wait_for(lambda: not self._writer and not self._waiting_writers)
            self._readers += 1
        try:
            yield
        finally:
            async with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @asynccontextmanager
    async def write(self) -> AsyncIterator[None]:
        async with self._cond:
            self._waiting_writers += 1
            try:
                await self._cond.wait_for(lambda: not self._writer and not self._readers)
            except BaseException:
                # Let readers blocked behind this writer proceed
                self._waiting_writers -= 1
                self._cond.notify_all()
                raise
            self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            async with self._cond:
                self._writer = False
                self._cond.notify_all()


class LockedValue(Generic[T]):
    """A value written rarely and read often, guarded by an `RWLock`."""

    def __init__(self, value: T):
        self._value = value
        self._lock = RWLock()

    async def get(self) -> T:
        async with self._lock.read():
            return self._value

    async def set(self, value: T) -> None:
        async with self._lock.write():
            self._value = value
