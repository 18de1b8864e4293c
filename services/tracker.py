"""Orchestration of reconciliation passes against the feed and the registry."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional, Tuple

import httpx
from pydantic import ValidationError

from app.schemas import ChangeRecord, StationRecord
from datastore.registry_store import RegistryStore, build_default_store
from feed.client import FeedClient, build_http_client
from feed.locator import FeedLocator
from services.errors import (
    ChangeWriteError,
    RegistryUpdateError,
    RegistryWriteError,
)
from services.normalizer import normalize_records
from services.reconciler import PassPlan, ReconciliationPass, extend_known_ids
from settings import get_settings

logger = logging.getLogger(__name__)


@dataclass
class PassReport:
    """Outcome of a pass whose feed and registry reads succeeded."""

    timestamp: int
    missing_ids: List[int] = field(default_factory=list)
    registered_ids: List[int] = field(default_factory=list)
    failures: List[Tuple[int, str]] = field(default_factory=list)
    registry_updated: bool = False
    change_written: bool = False
    change_string: str = ""
    processing_ms: int = 0


class TrackerService:
    """Runs reconciliation passes and serves persisted lookups."""

    def __init__(
        self,
        locator: FeedLocator,
        feed: FeedClient,
        store: RegistryStore,
        reconciler: Optional[ReconciliationPass] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self.locator = locator
        self.feed = feed
        self.store = store
        self.reconciler = reconciler or ReconciliationPass()
        self._http_client = http_client

    def run_pass(self, timestamp: int) -> PassReport:
        """Fetch, normalize, diff, register and record one snapshot.

        Feed, normalization and registry read failures propagate as
        :class:`~services.errors.PassAbortedError` before anything is written.
        Registration, registry update and change write failures are logged and
        reflected in the returned report.
        """
        start_time = time.perf_counter()
        logger.info("Starting reconciliation pass.", extra={"timestamp": timestamp})

        url = self.locator.resolve_url()
        stations = normalize_records(self.feed.fetch_raw_stations(url))
        known_ids = self.store.read_known_ids()

        plan = self.reconciler.run(stations, known_ids, timestamp)
        report = PassReport(
            timestamp=timestamp,
            missing_ids=list(plan.missing_ids),
            change_string=plan.change_string,
        )

        if plan.missing_ids:
            logger.warning(
                "Known stations are absent from the feed.",
                extra={
                    "timestamp": timestamp,
                    "missing_count": len(plan.missing_ids),
                    "station_id": plan.missing_ids,
                },
            )

        self._register_new_stations(plan, report)
        if report.registered_ids:
            report.registry_updated = self._update_known_ids(
                known_ids, report.registered_ids, timestamp
            )
        report.change_written = self._write_changes(plan)

        report.processing_ms = int((time.perf_counter() - start_time) * 1000)
        logger.info(
            "Reconciliation pass finished.",
            extra={
                "timestamp": timestamp,
                "station_count": len(plan.stations),
                "new_count": len(plan.new_stations),
                "registered_count": len(report.registered_ids),
                "failed_count": len(report.failures),
                "processing_ms": report.processing_ms,
            },
        )
        return report

    def fetch_station(self, station_id: int) -> StationRecord:
        record = self.store.read_station_record(station_id)
        if record is None:
            raise KeyError(f"Station {station_id} not found.")
        return record

    def fetch_change(self, timestamp: int) -> ChangeRecord:
        record = self.store.read_change_record(timestamp)
        if record is None:
            raise KeyError(f"Change record {timestamp} not found.")
        return record

    def shutdown(self) -> None:
        """Release the HTTP connection pool during application shutdown."""
        if self._http_client is not None:
            self._http_client.close()

    def _register_new_stations(self, plan: PassPlan, report: PassReport) -> None:
        for station in plan.new_stations:
            try:
                record = StationRecord.from_station(station, found=plan.timestamp)
                self.store.write_station_record(station.id, record)
            except (RegistryWriteError, ValidationError) as exc:
                reason = exc.reason if isinstance(exc, RegistryWriteError) else str(exc)
                logger.error(
                    "Saving new station failed.",
                    extra={
                        "timestamp": plan.timestamp,
                        "station_id": station.id,
                        "reason": reason,
                    },
                )
                report.failures.append((station.id, reason))
                continue
            report.registered_ids.append(station.id)

        if report.registered_ids:
            logger.info(
                "New stations have been registered.",
                extra={"timestamp": plan.timestamp, "station_id": report.registered_ids},
            )

    def _update_known_ids(
        self, known_ids: List[int], registered: List[int], timestamp: int
    ) -> bool:
        try:
            self.store.write_known_ids(extend_known_ids(known_ids, registered))
        except RegistryUpdateError as exc:
            logger.error(
                "Saving known stations failed.",
                extra={"timestamp": timestamp, "reason": str(exc)},
            )
            return False
        return True

    def _write_changes(self, plan: PassPlan) -> bool:
        try:
            self.store.write_change_record(plan.timestamp, plan.change_string)
        except ChangeWriteError as exc:
            logger.error(
                "Saving changes failed.",
                extra={"timestamp": plan.timestamp, "reason": str(exc)},
            )
            return False
        return True


@lru_cache
def build_default_tracker() -> TrackerService:
    """Factory that wires the tracker with the configured feed and registry."""
    settings = get_settings()
    http_client = build_http_client()
    locator = FeedLocator(
        http_client,
        homepage_url=settings.feed_homepage_url,
        feed_path=settings.feed_path,
    )
    return TrackerService(
        locator=locator,
        feed=FeedClient(http_client),
        store=build_default_store(),
        http_client=http_client,
    )
