# Supabase (PostgREST) position store.
# fleetcache/stores/supabase_rest.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

import httpx

from ..core.errors import CacheWriteError, ConfigError, HistoryWriteError, StoreReadError
from .base import VehiclePosition, VehiclePositionLogEntry

logger = logging.getLogger(__name__)

_SELECT_COLUMNS = "vehicle,lat,lng,speed_kph,heading,pos_time,collected_at"


def _quote_filter_value(value: str) -> str:
    # PostgREST reserves ,.:() in filter values; a double-quoted value may hold them.
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _like_escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        logger.warning("Unparsable collected_at from store: %r", value)
        return None


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


@dataclass(frozen=True)
class SupabaseRestConfig:
    url: str
    service_key: str
    positions_table: str = "vehicle_positions"
    history_table: str = "vehicle_position_log"
    timeout_s: float = 15.0


class SupabaseRestStore:
    """
    Talks to Supabase through its PostgREST endpoint:
      - POST {url}/rest/v1/vehicle_positions?on_conflict=vehicle   (upsert)
      - POST {url}/rest/v1/vehicle_position_log                    (append)
      - GET  {url}/rest/v1/vehicle_positions?vehicle=eq.<key>       (exact)
      - GET  {url}/rest/v1/vehicle_positions?vehicle=ilike.*<q>*&order=vehicle.asc&limit=1

    The upsert relies on the unique index on `vehicle`; PostgREST applies the
    whole batch in a single statement.
    """

    store_name = "supabase"

    def __init__(self, cfg: SupabaseRestConfig, client: Optional[httpx.AsyncClient] = None):
        if not cfg.url or not cfg.service_key:
            raise ConfigError("SupabaseRestConfig requires url and service_key")
        self.cfg = cfg
        self._client = client

    async def __aenter__(self):
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.cfg.timeout_s)
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if self._client is not None:
            await self._client.aclose()
        self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("SupabaseRestStore must be used with 'async with' or provide a client.")
        return self._client

    def _table_url(self, table: str) -> str:
        return f"{self.cfg.url.rstrip('/')}/rest/v1/{table}"

    def _headers(self, prefer: Optional[str] = None) -> Dict[str, str]:
        h = {
            "apikey": self.cfg.service_key,
            "Authorization": f"Bearer {self.cfg.service_key}",
            "Content-Type": "application/json",
        }
        if prefer:
            h["Prefer"] = prefer
        return h

    async def upsert_positions(self, positions: Sequence[VehiclePosition]) -> None:
        body = [
            {
                "vehicle": p.vehicle_key,
                "lat": p.lat,
                "lng": p.lng,
                "speed_kph": p.speed_kph,
                "heading": p.heading,
                "pos_time": p.pos_time,
                "raw": p.raw,
                "collected_at": p.collected_at.isoformat() if p.collected_at else None,
            }
            for p in positions
        ]
        try:
            resp = await self.client.post(
                self._table_url(self.cfg.positions_table),
                params={"on_conflict": "vehicle"},
                headers=self._headers("resolution=merge-duplicates,return=minimal"),
                json=body,
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise CacheWriteError(f"upsert failed: HTTP {e.response.status_code}: {e.response.text[:500]}") from e
        except httpx.HTTPError as e:
            raise CacheWriteError(f"upsert failed: {e}") from e

    async def append_history(self, entries: Sequence[VehiclePositionLogEntry]) -> None:
        body = [
            {
                "vehicle": e.vehicle_key,
                "lat": e.lat,
                "lng": e.lng,
                "speed_kph": e.speed_kph,
                "heading": e.heading,
                "pos_time": e.pos_time,
            }
            for e in entries
        ]
        try:
            resp = await self.client.post(
                self._table_url(self.cfg.history_table),
                headers=self._headers("return=minimal"),
                json=body,
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise HistoryWriteError(f"history insert failed: HTTP {e.response.status_code}: {e.response.text[:500]}") from e
        except httpx.HTTPError as e:
            raise HistoryWriteError(f"history insert failed: {e}") from e

    async def _select_one(self, params: Dict[str, str]) -> Optional[VehiclePosition]:
        try:
            resp = await self.client.get(
                self._table_url(self.cfg.positions_table),
                params={"select": _SELECT_COLUMNS, **params},
                headers=self._headers(),
            )
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            raise StoreReadError(f"read failed: HTTP {e.response.status_code}: {e.response.text[:500]}") from e
        except (httpx.HTTPError, ValueError) as e:
            raise StoreReadError(f"read failed: {e}") from e

        if not isinstance(data, list):
            raise StoreReadError("Expected JSON array response")
        if not data:
            return None
        return self._row_to_position(data[0])

    @staticmethod
    def _row_to_position(row: Dict[str, Any]) -> VehiclePosition:
        return VehiclePosition(
            vehicle_key=str(row["vehicle"]),
            lat=float(row["lat"]),
            lng=float(row["lng"]),
            speed_kph=_optional_float(row.get("speed_kph")),
            heading=_optional_float(row.get("heading")),
            pos_time=row.get("pos_time") or None,
            collected_at=_parse_timestamp(row.get("collected_at")),
        )

    async def get_position(self, vehicle_key: str) -> Optional[VehiclePosition]:
        return await self._select_one({"vehicle": f"eq.{_quote_filter_value(vehicle_key)}", "limit": "1"})

    async def find_position_containing(self, fragment: str) -> Optional[VehiclePosition]:
        pattern = f"*{_like_escape(fragment)}*"
        return await self._select_one(
            {
                "vehicle": f"ilike.{_quote_filter_value(pattern)}",
                "order": "vehicle.asc",
                "limit": "1",
            }
        )
