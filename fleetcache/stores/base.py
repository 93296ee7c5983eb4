# Store interfaces and position records.
# fleetcache/stores/base.py
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Sequence


@dataclass(frozen=True)
class VehiclePosition:
    """
    Latest known position of one vehicle, keyed by its canonical `vehicle_key`.
    `raw` keeps the provider row for diagnostics. `collected_at` is stamped by the
    cache writer and is None until the record has been written.
    """
    vehicle_key: str
    lat: float
    lng: float
    speed_kph: Optional[float] = None
    heading: Optional[float] = None
    pos_time: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False)
    collected_at: Optional[datetime] = None

    def stamped(self, collected_at: datetime) -> "VehiclePosition":
        return replace(self, collected_at=collected_at)

    def log_entry(self) -> "VehiclePositionLogEntry":
        return VehiclePositionLogEntry(
            vehicle_key=self.vehicle_key,
            lat=self.lat,
            lng=self.lng,
            speed_kph=self.speed_kph,
            heading=self.heading,
            pos_time=self.pos_time,
        )


@dataclass(frozen=True)
class VehiclePositionLogEntry:
    """One history observation. Append-only, no uniqueness."""
    vehicle_key: str
    lat: float
    lng: float
    speed_kph: Optional[float]
    heading: Optional[float]
    pos_time: Optional[str]


class PositionStore(Protocol):
    store_name: str

    async def upsert_positions(self, positions: Sequence[VehiclePosition]) -> None:
        """
        Replaces or inserts every record by vehicle_key as one batch.
        Raises CacheWriteError on failure.
        """
        ...

    async def append_history(self, entries: Sequence[VehiclePositionLogEntry]) -> None:
        """Appends entries to the history log. Raises HistoryWriteError on failure."""
        ...

    async def get_position(self, vehicle_key: str) -> Optional[VehiclePosition]:
        ...

    async def find_position_containing(self, fragment: str) -> Optional[VehiclePosition]:
        """
        Returns the record with the lexicographically smallest key that contains
        `fragment` (case-insensitive), or None.
        """
        ...


def history_entries(positions: Sequence[VehiclePosition]) -> List[VehiclePositionLogEntry]:
    return [p.log_entry() for p in positions]
