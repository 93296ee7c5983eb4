from __future__ import annotations

import re
import time
from datetime import date, datetime, timezone
from typing import Optional

_HHMM = re.compile(r"^(\d{2}):(\d{2})$")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def today_iso() -> str:
    return date.today().isoformat()


def format_time(iso: str) -> str:
    """Renders an ISO timestamp as HH:MM, or an em dash when it cannot be parsed."""
    try:
        return datetime.fromisoformat(iso).strftime("%H:%M")
    except (TypeError, ValueError):
        return "—"


def time_to_minutes(hhmm: Optional[str]) -> Optional[int]:
    if not hhmm:
        return None
    m = _HHMM.match(hhmm)
    if not m:
        return None
    hh, mm = int(m.group(1)), int(m.group(2))
    if hh > 23 or mm > 59:
        return None
    return hh * 60 + mm


def minutes_to_time(mins_from_midnight: int) -> str:
    hh = (mins_from_midnight // 60) % 24
    mm = mins_from_midnight % 60
    return f"{hh:02d}:{mm:02d}"


def minutes_between(a_ms: float, b_ms: float) -> int:
    return max(0, round((b_ms - a_ms) / 60000))


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


def elapsed_ms(start_ms: float) -> int:
    return int(round(monotonic_ms() - start_ms))
