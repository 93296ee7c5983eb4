from __future__ import annotations

import logging

from ..normalize import Accepted, normalize_row
from ..workflow_types import CollectionContext

logger = logging.getLogger(__name__)


class NormalizeRowsNode:
    name = "normalize_rows"

    async def run(self, ctx: CollectionContext) -> CollectionContext:
        positions = []
        rejected = 0
        for row in ctx.raw_rows:
            result = normalize_row(row)
            if isinstance(result, Accepted):
                positions.append(result.position)
            else:
                rejected += 1

        ctx.positions = positions
        ctx.rejected = rejected
        if rejected:
            logger.debug("Dropped %d of %d rows during normalization", rejected, len(ctx.raw_rows))
        if not positions:
            ctx.stop_message = "No vehicles with valid positions"
        return ctx
