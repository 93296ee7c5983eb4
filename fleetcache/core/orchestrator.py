import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .errors import CacheWriteError, ProviderError
from .nodes.dedupe import DedupePositionsNode
from .nodes.fetch import FetchTelemetryNode
from .nodes.normalize import NormalizeRowsNode
from .nodes.write import WritePositionsNode
from .time_utils import elapsed_ms, monotonic_ms
from .workflow import WorkflowRunner
from .workflow_types import CollectionContext

logger = logging.getLogger(__name__)

# NOTE: Collection cycles are not coordinated with each other. Two overlapping
# runs (a slow provider call overlapping the next scheduled trigger) both upsert;
# the last completed upsert for a key is what readers see.


@dataclass
class CollectionResult:
    ok: bool
    upserted: int = 0
    vehicle_names: List[str] = field(default_factory=list)
    duration_ms: int = 0
    message: Optional[str] = None
    error: Optional[str] = None
    history_warning: Optional[str] = None


def build_runner(provider, store, clock=None) -> WorkflowRunner:
    return WorkflowRunner(
        nodes=[
            FetchTelemetryNode(provider),
            NormalizeRowsNode(),
            DedupePositionsNode(),
            WritePositionsNode(store, clock=clock),
        ]
    )


async def collect_positions(provider, store, clock=None) -> CollectionResult:
    """Runs one collection cycle. Every failure comes back as ok=False."""
    ctx = CollectionContext(started_ms=monotonic_ms())
    runner = build_runner(provider, store, clock=clock)

    try:
        ctx = await runner.run(ctx)
    except ProviderError as e:
        logger.error("Provider error: %s", e)
        return CollectionResult(ok=False, error=str(e), duration_ms=elapsed_ms(ctx.started_ms))
    except CacheWriteError as e:
        logger.error("Cache upsert error: %s", e)
        return CollectionResult(ok=False, error=str(e), duration_ms=elapsed_ms(ctx.started_ms))
    except Exception as e:
        logger.exception("Unexpected collection error")
        return CollectionResult(ok=False, error=str(e) or type(e).__name__, duration_ms=elapsed_ms(ctx.started_ms))

    duration = elapsed_ms(ctx.started_ms)
    if ctx.stop_message is not None:
        logger.info("Collection finished with nothing to write: %s", ctx.stop_message)
        return CollectionResult(ok=True, upserted=0, message=ctx.stop_message, duration_ms=duration)

    logger.info(
        "Collected %d vehicles from %d rows (%d rejected) in %dms",
        len(ctx.written_keys),
        len(ctx.raw_rows),
        ctx.rejected,
        duration,
    )
    return CollectionResult(
        ok=True,
        upserted=len(ctx.written_keys),
        vehicle_names=list(ctx.written_keys),
        duration_ms=duration,
        history_warning=ctx.history_warning,
    )
