"""
Admission control for browser sessions.

ConcurrencyGate caps how many pages are open at once across the whole
process; KeyedLocks keeps two requests for the same content hash from
writing into the same folder at the same time.
"""
from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

from archive_hub.errors import GateTimeoutError


class ConcurrencyGate:
    def __init__(self, capacity: int = 5, timeout: float | None = None):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self.timeout = timeout or None
        # asyncio.Semaphore wakes waiters in arrival order
        self._sem = asyncio.Semaphore(capacity)
        self._in_use = 0

    @property
    def in_use(self) -> int:
        return self._in_use

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        if self.timeout is None:
            await self._sem.acquire()
        else:
            try:
                await asyncio.wait_for(self._sem.acquire(), self.timeout)
            except asyncio.TimeoutError:
                raise GateTimeoutError(
                    f"No archive slot became free within {self.timeout:g}s."
                ) from None

        self._in_use += 1
        try:
            yield
        finally:
            self._in_use -= 1
            self._sem.release()


class KeyedLocks:
    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if not self._waiters[key]:
                del self._waiters[key]
                del self._locks[key]
