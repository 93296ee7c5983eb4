# Provider interfaces.
# fleetcache/providers/base.py
from __future__ import annotations

from typing import Dict, List, Protocol

# One provider record, column name -> cell text. Shape is provider-defined.
RawTelemetryRow = Dict[str, str]


class TelemetryProvider(Protocol):
    provider_name: str

    async def fetch_all(self) -> List[RawTelemetryRow]:
        """
        Returns every row the provider currently reports for the whole fleet.
        Raises ProviderError when the bulk fetch fails.
        """
        ...
