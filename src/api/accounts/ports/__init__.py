"""Ports (interfaces) for the accounts bounded context.

Ports define the contracts for repositories, remote gateways and the
aggregate lock without specifying implementation details. This allows for
dependency inversion and keeps the application layer testable without
a database or the remote services.
"""

from accounts.ports.gateways import IAuctionGateway, IValuationGateway
from accounts.ports.locking import IUserLock
from accounts.ports.repositories import IUserRepository

__all__ = [
    "IAuctionGateway",
    "IUserLock",
    "IUserRepository",
    "IValuationGateway",
]
