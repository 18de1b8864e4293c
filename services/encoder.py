"""Compact ``id:bikes;`` encoding of station occupancy."""

from __future__ import annotations

from typing import Iterable, List, Union

from models.records import Occupancy, Station

RECORD_SEPARATOR = ";"
FIELD_SEPARATOR = ":"

Place = Union[Station, Occupancy]


class ChangeEncoder:
    """Encodes snapshots in input order; no sorting and no deduplication."""

    def project(self, places: Iterable[Place]) -> List[Occupancy]:
        return [Occupancy(id=place.id, bikes=place.bikes) for place in places]

    def encode(self, places: Iterable[Place]) -> str:
        return "".join(
            f"{place.id}{FIELD_SEPARATOR}{place.bikes}{RECORD_SEPARATOR}"
            for place in places
        )

    def decode(self, text: str) -> List[Occupancy]:
        """Parse an encoded change string back into occupancy pairs.

        Raises ``ValueError`` when a segment is not an ``id:bikes`` pair of integers.
        """
        decoded: List[Occupancy] = []
        for segment in text.split(RECORD_SEPARATOR):
            if not segment:
                continue
            station_id, sep, bikes = segment.partition(FIELD_SEPARATOR)
            if not sep:
                raise ValueError(f"Invalid change segment {segment!r}.")
            decoded.append(Occupancy(id=int(station_id), bikes=int(bikes)))
        return decoded


def format_change_record(timestamp: int, changes: str) -> str:
    """Payload stored for one pass: the timestamp, a dash, then the changes."""
    return f"{timestamp}-{changes}"


def split_change_record(payload: str) -> tuple[int, str]:
    timestamp, sep, changes = payload.partition("-")
    if not sep:
        raise ValueError(f"Invalid change record {payload!r}.")
    return int(timestamp), changes
