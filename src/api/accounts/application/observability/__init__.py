"""Domain-Oriented Observability for the accounts application layer.

Probes for application service operations following Domain-Oriented Observability patterns.
"""

from accounts.application.observability.account_service_probe import (
    AccountServiceProbe,
    DefaultAccountServiceProbe,
)
from accounts.application.observability.bidding_service_probe import (
    BiddingServiceProbe,
    DefaultBiddingServiceProbe,
)

__all__ = [
    "AccountServiceProbe",
    "DefaultAccountServiceProbe",
    "BiddingServiceProbe",
    "DefaultBiddingServiceProbe",
]
