import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from .schemas import CollectResponse, ErrorResponse, VehiclePositionResponse
from ..core.auth import require_cron_secret
from ..core.errors import FleetCacheError
from ..core.orchestrator import collect_positions
from ..core.query import VehicleQueryService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/cron/collect-vehicles", dependencies=[Depends(require_cron_secret)])
async def collect_vehicles(request: Request):
    services = request.app.state.services
    result = await collect_positions(services.provider, services.store)

    if not result.ok:
        return JSONResponse(CollectResponse(ok=False, error=result.error).payload(), status_code=500)
    if result.message is not None:
        return CollectResponse(ok=True, message=result.message, upserted=0).payload()
    return CollectResponse(
        ok=True,
        upserted=result.upserted,
        vehicle_names=result.vehicle_names,
        duration_ms=result.duration_ms,
    ).payload()


@router.get("/webfleet/vehicle")
async def read_vehicle(request: Request, vehicle: str = ""):
    service = VehicleQueryService(request.app.state.services.store)
    try:
        found = await service.lookup(vehicle)
    except FleetCacheError:
        raise
    except Exception as e:
        logger.exception("Unexpected error reading vehicle %r", vehicle)
        return JSONResponse(ErrorResponse(ok=False, error=str(e) or type(e).__name__).payload(), status_code=500)

    return VehiclePositionResponse(
        vehicle=found.vehicle,
        lat=found.lat,
        lng=found.lng,
        speed_kph=found.speed_kph,
        heading=found.heading,
        timestamp=found.timestamp,
        cached_at=found.cached_at.isoformat() if found.cached_at else None,
    ).payload()
