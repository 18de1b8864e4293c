"""Comparison of a live snapshot against the known-station registry."""

from __future__ import annotations

from typing import Iterable, Sequence

from models.records import DiffResult, Station


class RegistryDiffer:
    """Pure component classifying stations as new and known IDs as missing."""

    def diff(self, live_stations: Sequence[Station], known_ids: Iterable[int]) -> DiffResult:
        known = list(known_ids)
        known_lookup = set(known)
        live_lookup = {station.id for station in live_stations}

        result = DiffResult()
        for station_id in known:
            if station_id not in live_lookup:
                result.missing.append(station_id)

        for station in live_stations:
            if station.id not in known_lookup:
                result.new.append(station)

        return result
