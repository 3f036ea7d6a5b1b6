"""Domain-Oriented Observability for accounts infrastructure.

Probes for repository and remote gateway operations following
Domain-Oriented Observability patterns.
"""

from accounts.infrastructure.observability.gateway_probe import (
    DefaultRemoteGatewayProbe,
    RemoteGatewayProbe,
)
from accounts.infrastructure.observability.repository_probe import (
    DefaultUserRepositoryProbe,
    UserRepositoryProbe,
)

__all__ = [
    "RemoteGatewayProbe",
    "DefaultRemoteGatewayProbe",
    "UserRepositoryProbe",
    "DefaultUserRepositoryProbe",
]
