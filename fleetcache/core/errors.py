"""Exception hierarchy for fleetcache."""

from __future__ import annotations

from typing import Optional


class FleetCacheError(Exception):
    """Base exception for all fleetcache errors."""


class ConfigError(FleetCacheError):
    """Required configuration is missing or invalid."""


class AuthorizationError(FleetCacheError):
    """Trigger credential missing or wrong."""


class ProviderError(FleetCacheError):
    """Bulk fetch from the telemetry provider failed."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class StoreError(FleetCacheError):
    """Position store failure."""


class CacheWriteError(StoreError):
    """Current-state upsert failed. Fatal for a collection cycle."""


class HistoryWriteError(StoreError):
    """History log append failed. Never fails a collection cycle."""


class StoreReadError(StoreError):
    """Reading from the current-state store failed."""


class InvalidQueryError(FleetCacheError):
    """Vehicle query is missing or blank."""


class NotFoundError(FleetCacheError):
    """No cached position matched the query, exactly or by substring."""

    def __init__(self, message: str, *, query: str) -> None:
        self.query = query
        super().__init__(message)
