from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from ..providers.base import RawTelemetryRow
from ..stores.base import VehiclePosition


@dataclass
class CollectionContext:
    """Working set of one collection cycle. Discarded when the cycle returns."""
    started_ms: float

    raw_rows: List[RawTelemetryRow] = field(default_factory=list)
    positions: List[VehiclePosition] = field(default_factory=list)
    rejected: int = 0
    deduped: Dict[str, VehiclePosition] = field(default_factory=dict)

    written_keys: List[str] = field(default_factory=list)
    collected_at: Optional[datetime] = None
    history_warning: Optional[str] = None

    # Set by a node that ends the cycle early with a successful zero-count result.
    stop_message: Optional[str] = None
