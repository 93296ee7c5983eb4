"""Row normalization.

Turns one raw provider row into a canonical VehiclePosition, or a Rejected
value when the row has no usable identifier or coordinates. Never raises.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple, Union

from ..stores.base import VehiclePosition
from .geo_utils import is_valid_coordinate

MISSING_IDENTIFIER = "missing_identifier"
INVALID_COORDINATES = "invalid_coordinates"

_DMS = re.compile(
    r"(\d+(?:\.\d+)?)\s*°\s*(\d+(?:\.\d+)?)\s*'\s*(\d+(?:\.\d+)?)\s*\"\s*([NSEW])",
    re.IGNORECASE,
)
_WHITESPACE = re.compile(r"\s+")


def strip_quotes(s: Optional[str]) -> str:
    t = (s or "").strip()
    if len(t) >= 2 and t.startswith('"') and t.endswith('"'):
        return t[1:-1]
    return t


@dataclass(frozen=True)
class Accepted:
    position: VehiclePosition


@dataclass(frozen=True)
class Rejected:
    reason: str


NormalizeResult = Union[Accepted, Rejected]


def normalize_vehicle_key(value: Any) -> str:
    """Canonical vehicle key: quotes stripped, all whitespace removed, upper-cased."""
    return _WHITESPACE.sub("", strip_quotes("" if value is None else str(value))).upper()


def to_float_safe(value: Any) -> Optional[float]:
    if value is None:
        return None
    text = str(value).strip()
    # float() accepts digit separators ("1_000"); feed cells never carry them.
    if not text or "_" in text:
        return None
    try:
        result = float(text)
    except ValueError:
        return None
    return result if math.isfinite(result) else None


def dms_to_decimal(value: Any) -> Optional[float]:
    """Parses 51°30'26.4"N style coordinates. South and west are negative."""
    s = strip_quotes("" if value is None else str(value))
    if not s:
        return None
    m = _DMS.search(s)
    if not m:
        return None
    deg, minutes, sec = float(m.group(1)), float(m.group(2)), float(m.group(3))
    dec = deg + minutes / 60 + sec / 3600
    if m.group(4).upper() in ("S", "W"):
        dec = -dec
    return dec


def extract_lat_lng(row: Mapping[str, Any]) -> Optional[Tuple[float, float]]:
    lat_mdeg = to_float_safe(row.get("latitude_mdeg"))
    lng_mdeg = to_float_safe(row.get("longitude_mdeg"))
    if lat_mdeg is not None and lng_mdeg is not None:
        return lat_mdeg / 1_000_000, lng_mdeg / 1_000_000

    lat = dms_to_decimal(row.get("latitude"))
    lng = dms_to_decimal(row.get("longitude"))
    if lat is not None and lng is not None:
        return lat, lng
    return None


def normalize_row(row: Mapping[str, Any]) -> NormalizeResult:
    name = normalize_vehicle_key(row.get("objectname") or row.get("objectno") or "")
    if not name:
        return Rejected(MISSING_IDENTIFIER)

    ll = extract_lat_lng(row)
    if ll is None or not is_valid_coordinate(*ll):
        return Rejected(INVALID_COORDINATES)

    speed = to_float_safe(row.get("speed"))
    if speed is not None and speed < 0:
        speed = None
    pos_time = str(row.get("pos_time") or row.get("msgtime") or "").strip()

    return Accepted(
        VehiclePosition(
            vehicle_key=name,
            lat=ll[0],
            lng=ll[1],
            speed_kph=speed,
            heading=to_float_safe(row.get("course")),
            pos_time=pos_time or None,
            raw=dict(row),
        )
    )
