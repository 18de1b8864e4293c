"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True, slots=True)
class Station:
    """One docking station as observed in a single feed snapshot."""

    id: int
    name: str
    lat: float
    lon: float
    capacity: int
    bikes: int
    terminal_name: str
    install_date: int


@dataclass(frozen=True, slots=True)
class Occupancy:
    """The part of a station tracked over time."""

    id: int
    bikes: int


@dataclass(slots=True)
class DiffResult:
    missing: List[int] = field(default_factory=list)
    new: List[Station] = field(default_factory=list)
