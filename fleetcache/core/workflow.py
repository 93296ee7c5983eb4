from __future__ import annotations

from typing import List

from .workflow_types import CollectionContext


class WorkflowRunner:
    def __init__(self, nodes: List):
        self.nodes = nodes

    async def run(self, ctx: CollectionContext) -> CollectionContext:
        for node in self.nodes:
            ctx = await node.run(ctx)
            if ctx.stop_message is not None:
                break
        return ctx
