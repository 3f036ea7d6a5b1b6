"""In-process implementation of IUserLock.

Serializes mutations on the same user within one worker process. Writers in
other processes are caught by the version check on the users table instead.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from accounts.domain.value_objects import UserId
from accounts.ports.locking import IUserLock


class KeyedUserLock(IUserLock):
    """One asyncio.Lock per user id, dropped once nobody holds or waits on it."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._holders: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, user_id: UserId) -> AsyncIterator[None]:
        key = user_id.value
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._holders[key] = self._holders.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[key] -= 1
            if self._holders[key] == 0:
                del self._holders[key]
                del self._locks[key]

    def __len__(self) -> int:
        """Number of users with a live lock."""
        return len(self._locks)
