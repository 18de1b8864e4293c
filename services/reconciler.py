"""Pure reconciliation of one feed snapshot against the known registry."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from models.records import Station
from services.differ import RegistryDiffer
from services.encoder import ChangeEncoder


@dataclass
class PassPlan:
    """Decisions of a pass, before anything is written to the registry."""

    timestamp: int
    stations: List[Station] = field(default_factory=list)
    missing_ids: List[int] = field(default_factory=list)
    new_stations: List[Station] = field(default_factory=list)
    change_string: str = ""


class ReconciliationPass:
    """Sorts a snapshot, diffs it against known IDs and encodes its occupancy."""

    def __init__(
        self,
        differ: Optional[RegistryDiffer] = None,
        encoder: Optional[ChangeEncoder] = None,
    ) -> None:
        self.differ = differ or RegistryDiffer()
        self.encoder = encoder or ChangeEncoder()

    def run(
        self,
        live_stations: Iterable[Station],
        known_ids: Sequence[int],
        timestamp: int,
    ) -> PassPlan:
        stations = sorted(live_stations, key=lambda station: station.id)
        diff = self.differ.diff(stations, known_ids)
        changes = self.encoder.encode(self.encoder.project(stations))
        return PassPlan(
            timestamp=timestamp,
            stations=stations,
            missing_ids=diff.missing,
            new_stations=diff.new,
            change_string=changes,
        )


def extend_known_ids(known_ids: Sequence[int], registered: Iterable[int]) -> List[int]:
    """Append newly registered IDs, keeping discovery order and dropping duplicates."""
    return list(dict.fromkeys([*known_ids, *registered]))
