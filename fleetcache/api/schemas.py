from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class CollectResponse(_CamelModel):
    ok: bool
    upserted: Optional[int] = None
    vehicle_names: Optional[List[str]] = Field(default=None, alias="vehicleNames")
    duration_ms: Optional[int] = Field(default=None, alias="durationMs")
    message: Optional[str] = None
    error: Optional[str] = None


class VehiclePositionResponse(_CamelModel):
    vehicle: str
    lat: float
    lng: float
    speed_kph: Optional[float] = Field(default=None, alias="speedKph")
    heading: Optional[float] = None
    timestamp: Optional[str] = None
    cached_at: Optional[str] = Field(default=None, alias="cachedAt")


class ErrorResponse(_CamelModel):
    ok: Optional[bool] = None
    error: str
    query: Optional[str] = None
