from __future__ import annotations

import asyncio
import json
import logging
from contextlib import AsyncExitStack
from dataclasses import asdict
from pathlib import Path
from dotenv import load_dotenv

from fleetcache.core.config import Settings
from fleetcache.core.orchestrator import collect_positions
from fleetcache.core.services import build_services, open_services


async def main():
    repo_root = Path(__file__).resolve().parents[2]
    load_dotenv(repo_root / ".env", override=False)

    settings = Settings()
    logging.basicConfig(level=settings.log_level.upper())

    async with AsyncExitStack() as stack:
        services = await open_services(build_services(settings), stack)
        result = await collect_positions(services.provider, services.store)

    print(json.dumps(asdict(result), indent=2))
    return 0 if result.ok else 1


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
