"""Aggregate-scoped mutual exclusion port.

Workflows that load, check, mutate and persist a user must not interleave
with another workflow on the same user. The lock is a capability the
application services depend on; they never implement it themselves.
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Protocol, runtime_checkable

from accounts.domain.value_objects import UserId


@runtime_checkable
class IUserLock(Protocol):
    """Serializes workflows touching the same user.

    Workflows on different users must never block each other.
    """

    def hold(self, user_id: UserId) -> AbstractAsyncContextManager[None]:
        """Acquire exclusive access to one user for the enclosed block.

        Usage:
            async with lock.hold(user_id):
                user = await repository.get_by_id(user_id)
                ...
                await repository.save(user)
        """
        ...
