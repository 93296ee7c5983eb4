from __future__ import annotations

from typing import Dict, Iterable

from ...stores.base import VehiclePosition
from ..workflow_types import CollectionContext


def dedupe_last_wins(positions: Iterable[VehiclePosition]) -> Dict[str, VehiclePosition]:
    """
    One record per vehicle_key; a later position replaces an earlier one for the
    same key. Keys keep the order of their first appearance.
    """
    unique: Dict[str, VehiclePosition] = {}
    for p in positions:
        unique[p.vehicle_key] = p
    return unique


class DedupePositionsNode:
    name = "dedupe_positions"

    async def run(self, ctx: CollectionContext) -> CollectionContext:
        ctx.deduped = dedupe_last_wins(ctx.positions)
        return ctx
