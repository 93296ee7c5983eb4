import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .routes import router
from .schemas import ErrorResponse
from ..core.config import Settings
from ..core.errors import AuthorizationError, FleetCacheError, InvalidQueryError, NotFoundError
from ..core.services import Services, build_services, open_services

logger = logging.getLogger(__name__)


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AuthorizationError)
    async def _unauthorized(request: Request, exc: AuthorizationError):
        return JSONResponse({"error": "Unauthorized"}, status_code=401)

    @app.exception_handler(InvalidQueryError)
    async def _bad_query(request: Request, exc: InvalidQueryError):
        return JSONResponse(ErrorResponse(ok=False, error=str(exc)).payload(), status_code=400)

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError):
        return JSONResponse(ErrorResponse(ok=False, error=str(exc), query=exc.query).payload(), status_code=404)

    @app.exception_handler(FleetCacheError)
    async def _server_error(request: Request, exc: FleetCacheError):
        logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc)
        return JSONResponse(ErrorResponse(ok=False, error=str(exc)).payload(), status_code=500)


def create_app(services: Optional[Services] = None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Builds the API. Injected services are used as-is; otherwise the provider and
    store handles are built from settings at startup and closed at shutdown.
    """
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        async with AsyncExitStack() as stack:
            if app.state.services is None:
                app.state.services = await open_services(build_services(settings), stack)
            yield

    app = FastAPI(title="Fleet Position Cache", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.services = services
    app.include_router(router, prefix="/api")
    _install_error_handlers(app)
    return app


def build_default_app() -> FastAPI:
    load_dotenv(override=False)
    settings = Settings()
    logging.basicConfig(level=settings.log_level.upper())
    return create_app(settings=settings)
