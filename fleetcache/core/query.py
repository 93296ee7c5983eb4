from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional

from ..stores.base import VehiclePosition
from .errors import InvalidQueryError, NotFoundError, StoreReadError
from .normalize import normalize_vehicle_key

logger = logging.getLogger(__name__)

MatchKind = Literal["exact", "fuzzy"]


@dataclass(frozen=True)
class VehicleLookup:
    vehicle: str
    lat: float
    lng: float
    speed_kph: Optional[float]
    heading: Optional[float]
    # Provider observation time when known, else the cache write time.
    timestamp: Optional[str]
    cached_at: Optional[datetime]
    match: MatchKind

    @classmethod
    def from_position(cls, p: VehiclePosition, match: MatchKind) -> "VehicleLookup":
        timestamp = p.pos_time or (p.collected_at.isoformat() if p.collected_at else None)
        return cls(
            vehicle=p.vehicle_key,
            lat=p.lat,
            lng=p.lng,
            speed_kph=p.speed_kph,
            heading=p.heading,
            timestamp=timestamp,
            cached_at=p.collected_at,
            match=match,
        )


class VehicleQueryService:
    """Reads cached positions. Never calls the telemetry provider."""

    def __init__(self, store):
        self.store = store

    async def lookup(self, query: str) -> VehicleLookup:
        normalized = normalize_vehicle_key(query)
        if not normalized:
            raise InvalidQueryError("Missing ?vehicle= parameter")

        try:
            found = await self.store.get_position(normalized)
            if found is not None:
                return VehicleLookup.from_position(found, "exact")

            fuzzy = await self.store.find_position_containing(normalized)
        except StoreReadError:
            raise
        except Exception as e:
            raise StoreReadError(str(e)) from e

        if fuzzy is not None:
            logger.debug("Fuzzy match for %s -> %s", normalized, fuzzy.vehicle_key)
            return VehicleLookup.from_position(fuzzy, "fuzzy")

        raise NotFoundError(
            "No cached position found for this vehicle. The collector may not have run yet.",
            query=normalized,
        )
