"""HTTP implementation of IValuationGateway.

Reads an item's market value from the Item service, which reports it in
the valeurReelle field of the item resource.
"""

from __future__ import annotations

import math
import time

import httpx

from accounts.domain.value_objects import ItemId
from accounts.infrastructure.observability import (
    DefaultRemoteGatewayProbe,
    RemoteGatewayProbe,
)
from accounts.ports.exceptions import ItemUnknownError, RemoteUnavailableError
from accounts.ports.gateway_models import ItemValuation
from accounts.ports.gateways import IValuationGateway

_SERVICE = "Item"
_VALUE_FIELD = "valeurReelle"


class HttpValuationGateway(IValuationGateway):
    """httpx-backed gateway to the Item service."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
        probe: RemoteGatewayProbe | None = None,
    ):
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"), timeout=timeout
        )
        self._probe = probe or DefaultRemoteGatewayProbe()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def fetch_value(self, item_id: ItemId) -> ItemValuation:
        path = f"/pokemons/{item_id.value}"
        self._probe.call_started(_SERVICE, "fetch_value", path)
        started = time.perf_counter()
        try:
            response = await self._client.get(path)
        except httpx.TimeoutException as e:
            self._probe.service_unavailable(_SERVICE, "fetch_value", reason="timeout")
            raise RemoteUnavailableError(_SERVICE, "timeout") from e
        except httpx.HTTPError as e:
            self._probe.service_unavailable(_SERVICE, "fetch_value", reason=repr(e))
            raise RemoteUnavailableError(_SERVICE, str(e) or type(e).__name__) from e

        if response.status_code == 404:
            self._probe.call_rejected(_SERVICE, "fetch_value", 404, response.text)
            raise ItemUnknownError(f"Item {item_id.value} not found")

        if response.status_code != 200:
            self._probe.service_unavailable(
                _SERVICE,
                "fetch_value",
                reason="HTTP error",
                status_code=response.status_code,
            )
            raise RemoteUnavailableError(_SERVICE, f"HTTP {response.status_code}")

        try:
            value = float(response.json()[_VALUE_FIELD])
        except (ValueError, TypeError, KeyError) as e:
            self._probe.service_unavailable(
                _SERVICE, "fetch_value", reason=f"missing {_VALUE_FIELD}"
            )
            raise RemoteUnavailableError(_SERVICE, f"missing {_VALUE_FIELD}") from e

        if not math.isfinite(value):
            self._probe.service_unavailable(
                _SERVICE, "fetch_value", reason=f"non-finite {_VALUE_FIELD}"
            )
            raise RemoteUnavailableError(_SERVICE, f"non-finite {_VALUE_FIELD}")

        self._probe.call_succeeded(
            _SERVICE,
            "fetch_value",
            status_code=response.status_code,
            elapsed_ms=(time.perf_counter() - started) * 1000,
        )
        return ItemValuation(item_id=item_id.value, value=value)
