from __future__ import annotations

import logging
from typing import Callable, Optional

from ...stores.base import history_entries
from ..errors import CacheWriteError
from ..time_utils import utc_now
from ..workflow_types import CollectionContext

logger = logging.getLogger(__name__)


class WritePositionsNode:
    """
    Upserts the deduplicated batch into the current-state store, then appends it
    to the history log. An upsert failure fails the cycle; a history failure is
    only recorded as a warning and leaves the upsert in place.
    """

    name = "write_positions"

    def __init__(self, store, clock: Optional[Callable] = None):
        self.store = store
        self.clock = clock or utc_now

    async def run(self, ctx: CollectionContext) -> CollectionContext:
        collected_at = self.clock()
        batch = [p.stamped(collected_at) for p in ctx.deduped.values()]

        try:
            await self.store.upsert_positions(batch)
        except CacheWriteError:
            raise
        except Exception as e:
            raise CacheWriteError(str(e)) from e

        ctx.collected_at = collected_at
        ctx.written_keys = [p.vehicle_key for p in batch]

        try:
            await self.store.append_history(history_entries(batch))
        except Exception as e:
            logger.warning("History log insert error: %s", e)
            ctx.history_warning = str(e)
        return ctx
