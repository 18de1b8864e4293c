"""HTTP route definitions for the service."""

from __future__ import annotations

import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import PlainTextResponse

from app.schemas import RegistrationFailure, StationRecord, TriggerResponse
from services.errors import TrackerError
from services.tracker import TrackerService, build_default_tracker
from settings import Settings, get_settings

logger = logging.getLogger(__name__)

NOT_FOUND_DETAIL = "Not found."
NOT_PERMITTED_DETAIL = "Not permitted access."

router = APIRouter()


def get_tracker() -> TrackerService:
    return build_default_tracker()


def get_app_settings() -> Settings:
    return get_settings()


def _is_access_approved(secret: Optional[str], settings: Settings) -> bool:
    return secret is not None and secret == settings.trigger_secret


@router.get(
    "/",
    response_model=TriggerResponse,
    response_model_exclude_none=True,
    summary="Run one reconciliation pass against the live feed.",
)
def trigger_pass(
    fetch: Optional[str] = Query(None, description="Shared secret enabling the trigger."),
    tracker: TrackerService = Depends(get_tracker),
    settings: Settings = Depends(get_app_settings),
) -> TriggerResponse:
    timestamp = int(time.time())
    if not _is_access_approved(fetch, settings):
        logger.info("Not permitted reconciliation attempt.", extra={"timestamp": timestamp})
        return TriggerResponse(success=False, error=NOT_PERMITTED_DETAIL)

    try:
        report = tracker.run_pass(timestamp)
    except TrackerError as exc:
        logger.error(
            "Reconciliation pass failed.",
            extra={"timestamp": timestamp, "reason": str(exc)},
        )
        return TriggerResponse(success=False, error=str(exc), timestamp=timestamp)
    except Exception as exc:  # noqa: BLE001 - errors are reported in-band
        logger.exception("Reconciliation pass crashed.", extra={"timestamp": timestamp})
        return TriggerResponse(success=False, error=repr(exc), timestamp=timestamp)

    return TriggerResponse(
        success=True,
        timestamp=report.timestamp,
        missing_ids=report.missing_ids,
        registered_ids=report.registered_ids,
        failures=[
            RegistrationFailure(station_id=station_id, reason=reason)
            for station_id, reason in report.failures
        ],
        registry_updated=report.registry_updated,
        change_written=report.change_written,
        processing_ms=report.processing_ms,
    )


@router.get(
    "/station/{station_id}",
    response_model=StationRecord,
    summary="Fetch the record persisted when a station was first found.",
)
def get_station(
    station_id: int,
    fetch: Optional[str] = Query(None),
    tracker: TrackerService = Depends(get_tracker),
    settings: Settings = Depends(get_app_settings),
) -> StationRecord:
    if not _is_access_approved(fetch, settings):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_DETAIL)
    try:
        return tracker.fetch_station(station_id)
    except (KeyError, TrackerError) as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=NOT_FOUND_DETAIL,
        ) from exc


@router.get(
    "/change/{timestamp}",
    response_class=PlainTextResponse,
    summary="Fetch the occupancy change record stored for a pass timestamp.",
)
def get_change(
    timestamp: int,
    fetch: Optional[str] = Query(None),
    tracker: TrackerService = Depends(get_tracker),
    settings: Settings = Depends(get_app_settings),
) -> PlainTextResponse:
    if not _is_access_approved(fetch, settings):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_DETAIL)
    try:
        record = tracker.fetch_change(timestamp)
    except (KeyError, TrackerError) as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=NOT_FOUND_DETAIL,
        ) from exc
    return PlainTextResponse(record.data)


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}
