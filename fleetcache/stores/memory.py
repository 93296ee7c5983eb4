from __future__ import annotations

import threading
from typing import Dict, List, Optional, Sequence

from .base import VehiclePosition, VehiclePositionLogEntry


class InMemoryPositionStore:
    """
    Process-local store for tests and local runs.
    Each batch is applied under a lock and replaces whole records, so readers
    never observe a half-applied batch or a record mixing old and new fields.
    """

    store_name = "memory"

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._positions: Dict[str, VehiclePosition] = {}
        self._history: List[VehiclePositionLogEntry] = []

    async def upsert_positions(self, positions: Sequence[VehiclePosition]) -> None:
        with self._lock:
            for p in positions:
                self._positions[p.vehicle_key] = p

    async def append_history(self, entries: Sequence[VehiclePositionLogEntry]) -> None:
        with self._lock:
            self._history.extend(entries)

    async def get_position(self, vehicle_key: str) -> Optional[VehiclePosition]:
        with self._lock:
            return self._positions.get(vehicle_key)

    async def find_position_containing(self, fragment: str) -> Optional[VehiclePosition]:
        needle = fragment.casefold()
        with self._lock:
            matches = sorted(k for k in self._positions if needle in k.casefold())
            return self._positions[matches[0]] if matches else None

    # Inspection helpers

    def positions(self) -> Dict[str, VehiclePosition]:
        with self._lock:
            return dict(self._positions)

    def history(self) -> List[VehiclePositionLogEntry]:
        with self._lock:
            return list(self._history)
