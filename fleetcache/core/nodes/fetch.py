from __future__ import annotations

from ..workflow_types import CollectionContext


class FetchTelemetryNode:
    name = "fetch_telemetry"

    def __init__(self, provider):
        self.provider = provider

    async def run(self, ctx: CollectionContext) -> CollectionContext:
        # ProviderError propagates to the orchestrator before any store mutation.
        ctx.raw_rows = list(await self.provider.fetch_all())
        if not ctx.raw_rows:
            ctx.stop_message = "No vehicles returned from provider"
        return ctx
