from pydantic import BaseModel, Field
from typing import Literal
import os


def env_any(*keys: str) -> str:
    """First non-blank value among the given environment variables."""
    for k in keys:
        v = os.getenv(k)
        if v and v.strip():
            return v.strip()
    return ""


class Settings(BaseModel):
    cron_secret: str = Field(default_factory=lambda: env_any("CRON_SECRET"))

    webfleet_base_url: str = Field(
        default_factory=lambda: env_any("WEBFLEET_BASE_URL") or "https://csv.webfleet.com/extern"
    )
    webfleet_account: str = Field(default_factory=lambda: env_any("WEBFLEET_ACCOUNT"))
    webfleet_username: str = Field(default_factory=lambda: env_any("WEBFLEET_USERNAME"))
    webfleet_password: str = Field(default_factory=lambda: env_any("WEBFLEET_PASSWORD"))
    webfleet_api_key: str = Field(default_factory=lambda: env_any("WEBFLEET_API_KEY", "WEBFLEET_APIKEY"))

    store_backend: Literal["supabase", "memory"] = Field(
        default_factory=lambda: env_any("STORE_BACKEND") or "supabase"
    )
    supabase_url: str = Field(default_factory=lambda: env_any("SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL"))
    supabase_service_key: str = Field(default_factory=lambda: env_any("SUPABASE_SERVICE_ROLE_KEY"))

    log_level: str = Field(default_factory=lambda: env_any("LOG_LEVEL") or "INFO")
