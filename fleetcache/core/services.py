from __future__ import annotations

from contextlib import AsyncExitStack
from dataclasses import dataclass

from ..providers.webfleet import WebfleetConfig, WebfleetProvider
from ..stores.memory import InMemoryPositionStore
from ..stores.supabase_rest import SupabaseRestConfig, SupabaseRestStore
from .config import Settings


@dataclass
class Services:
    """The process-wide provider and store handles, built once at startup."""
    provider: object
    store: object


def build_services(settings: Settings) -> Services:
    """
    Constructs the handles from settings. Raises ConfigError when connection
    settings are missing, so a misconfigured process fails at startup.
    """
    provider = WebfleetProvider(
        WebfleetConfig(
            account=settings.webfleet_account,
            username=settings.webfleet_username,
            password=settings.webfleet_password,
            api_key=settings.webfleet_api_key,
            base_url=settings.webfleet_base_url,
        )
    )
    if settings.store_backend == "memory":
        store = InMemoryPositionStore()
    else:
        store = SupabaseRestStore(
            SupabaseRestConfig(url=settings.supabase_url, service_key=settings.supabase_service_key)
        )
    return Services(provider=provider, store=store)


async def open_services(services: Services, stack: AsyncExitStack) -> Services:
    """Enters the async context of every handle that has one (HTTP clients)."""
    for handle in (services.provider, services.store):
        if hasattr(handle, "__aenter__"):
            await stack.enter_async_context(handle)
    return services
