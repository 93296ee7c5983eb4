# Webfleet CSV provider.
# fleetcache/providers/webfleet.py
from __future__ import annotations

import asyncio
import csv
import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Optional

import httpx

from ..core.errors import ConfigError, ProviderError
from ..core.normalize import strip_quotes
from .base import RawTelemetryRow

logger = logging.getLogger(__name__)


def parse_csv(text: str) -> List[RawTelemetryRow]:
    """
    Decodes a Webfleet CSV export into one dict per data line, keyed by header.
    The delimiter is ';' when the header line contains one, else ','.
    Blank lines are skipped; missing trailing cells become "".
    Each line is decoded on its own, so an unbalanced quote only spoils its own row.
    """
    lines = [line for line in text.replace("\r\n", "\n").replace("\r", "\n").split("\n") if line.strip()]
    if not lines:
        return []

    delimiter = ";" if ";" in lines[0] else ","
    records = [
        [cell.strip() for cell in next(csv.reader([line], delimiter=delimiter, quotechar='"'), [])]
        for line in lines
    ]

    headers = [strip_quotes(h) for h in records[0]]
    rows: List[RawTelemetryRow] = []
    for rec in records[1:]:
        row: RawTelemetryRow = {}
        for i, header in enumerate(headers):
            row[header] = strip_quotes(rec[i] if i < len(rec) else "")
        rows.append(row)
    return rows


@dataclass(frozen=True)
class WebfleetConfig:
    account: str
    username: str
    password: str
    api_key: str
    base_url: str = "https://csv.webfleet.com/extern"
    language: str = "en"

    # Hard caps / safety
    timeout_s: float = 20.0
    max_retries: int = 2
    base_backoff_s: float = 0.6


class WebfleetProvider:
    """
    Webfleet.connect CSV provider:
      - GET <base_url>?action=showObjectReportExtern&outputformat=csv

    One call returns the last known report for every object (vehicle) in the account.
    Credentials travel as query parameters (account, username, password, apikey).
    """

    provider_name = "webfleet"

    def __init__(self, cfg: WebfleetConfig, client: Optional[httpx.AsyncClient] = None):
        missing = [
            name
            for name, value in (
                ("account", cfg.account),
                ("username", cfg.username),
                ("password", cfg.password),
                ("api_key", cfg.api_key),
            )
            if not value
        ]
        if missing:
            raise ConfigError(f"WebfleetConfig is missing: {', '.join(missing)}")
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
            raise RuntimeError("WebfleetProvider must be used with 'async with' or provide a client.")
        return self._client

    def _params(self) -> Dict[str, str]:
        return {
            "lang": self.cfg.language,
            "account": self.cfg.account,
            "username": self.cfg.username,
            "password": self.cfg.password,
            "apikey": self.cfg.api_key,
            "action": "showObjectReportExtern",
            "outputformat": "csv",
        }

    async def _get_with_retries(self) -> str:
        """
        Retries on transient failures (429/5xx/timeouts) with exponential backoff + jitter.
        Other non-2xx answers fail immediately.
        """
        last_err: Optional[Exception] = None
        last_status: Optional[int] = None
        for attempt in range(self.cfg.max_retries + 1):
            try:
                resp = await self.client.get(self.cfg.base_url, params=self._params())
            except (httpx.TimeoutException, httpx.NetworkError) as e:
                last_err = e
            else:
                if resp.status_code in (429, 500, 502, 503, 504):
                    last_status = resp.status_code
                    last_err = ProviderError(
                        f"Webfleet HTTP {resp.status_code}: {resp.text[:500]}",
                        status_code=resp.status_code,
                    )
                elif resp.is_error:
                    raise ProviderError(
                        f"Webfleet HTTP {resp.status_code}: {resp.text[:500]}",
                        status_code=resp.status_code,
                    )
                else:
                    return resp.text

            if attempt >= self.cfg.max_retries:
                break
            backoff = self.cfg.base_backoff_s * (2 ** attempt)
            jitter = random.random() * 0.25
            logger.debug("Webfleet attempt %d failed (%s); retrying in %.2fs", attempt + 1, last_err, backoff)
            await asyncio.sleep(backoff + jitter)

        if isinstance(last_err, ProviderError):
            raise last_err
        raise ProviderError(f"Webfleet request failed after retries: {last_err}", status_code=last_status) from last_err

    async def fetch_all(self) -> List[RawTelemetryRow]:
        text = await self._get_with_retries()
        rows = parse_csv(text)
        logger.debug("Webfleet returned %d rows", len(rows))
        return rows
