import hmac
from fastapi import Header, Request

from .errors import AuthorizationError


def check_bearer(authorization: str, secret: str) -> None:
    """No-op when no secret is configured; otherwise the header must be 'Bearer <secret>'."""
    if not secret:
        return
    if not hmac.compare_digest((authorization or "").encode(), f"Bearer {secret}".encode()):
        raise AuthorizationError("Unauthorized")


async def require_cron_secret(request: Request, authorization: str = Header(default="")):
    check_bearer(authorization, request.app.state.settings.cron_secret)
