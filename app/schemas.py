"""Pydantic schemas for persisted records and the HTTP API layer."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.records import Station


class StationRecord(BaseModel):
    """A station as first persisted, stamped with the pass that found it."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    lat: float
    lon: float
    capacity: int = Field(..., ge=0)
    bikes: int = Field(..., ge=0)
    terminal_name: str = Field(..., alias="terminalName")
    install_date: int = Field(..., alias="installDate")
    found: int = Field(..., description="Epoch seconds of the pass that registered the station.")

    @classmethod
    def from_station(cls, station: Station, found: int) -> "StationRecord":
        return cls(
            id=station.id,
            name=station.name,
            lat=station.lat,
            lon=station.lon,
            capacity=station.capacity,
            bikes=station.bikes,
            terminal_name=station.terminal_name,
            install_date=station.install_date,
            found=found,
        )


class ChangeRecord(BaseModel):
    """Occupancy of every station of one snapshot, stored as ``<timestamp>-<changes>``."""

    data: str


class RegistrationFailure(BaseModel):
    station_id: int
    reason: str


class TriggerResponse(BaseModel):
    """In-band outcome of a reconciliation trigger."""

    success: bool
    error: Optional[str] = None
    timestamp: Optional[int] = None
    missing_ids: Optional[List[int]] = None
    registered_ids: Optional[List[int]] = None
    failures: Optional[List[RegistrationFailure]] = None
    registry_updated: Optional[bool] = None
    change_written: Optional[bool] = None
    processing_ms: Optional[int] = None
