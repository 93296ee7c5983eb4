from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

EARTH_RADIUS_M = 6371000.0


@dataclass(frozen=True)
class LngLat:
    lng: float
    lat: float


def haversine_meters(a: LngLat, b: LngLat) -> float:
    """Great-circle distance between two points, in metres."""
    d_lat = math.radians(b.lat - a.lat)
    d_lng = math.radians(b.lng - a.lng)
    la1 = math.radians(a.lat)
    la2 = math.radians(b.lat)

    x = math.sin(d_lat / 2) ** 2 + math.sin(d_lng / 2) ** 2 * math.cos(la1) * math.cos(la2)
    c = 2 * math.atan2(math.sqrt(x), math.sqrt(1 - x))
    return EARTH_RADIUS_M * c


def haversine_km(a: LngLat, b: LngLat) -> float:
    return haversine_meters(a, b) / 1000.0


def next_stop_index(stops: Sequence[str], completed: Iterable[int]) -> Optional[int]:
    done = set(completed)
    for i in range(len(stops)):
        if i not in done:
            return i
    return None


def is_valid_coordinate(lat: float, lng: float) -> bool:
    return (
        math.isfinite(lat)
        and math.isfinite(lng)
        and -90.0 <= lat <= 90.0
        and -180.0 <= lng <= 180.0
    )
