from __future__ import annotations

import copy
import json
import logging
import os
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from app.schemas import ChangeRecord, StationRecord
from services.encoder import format_change_record
from services.errors import (
    ChangeWriteError,
    RegistryReadError,
    RegistryUpdateError,
    RegistryWriteError,
)
from settings import get_settings

logger = logging.getLogger(__name__)

KNOWN_STATIONS_KEY = "knownStations"
STATIONS_KEY = "stations"
CHANGES_KEY = "changes"
KNOWN_IDS_SEPARATOR = ";"


def _empty_tree() -> Dict[str, Any]:
    return {KNOWN_STATIONS_KEY: "", STATIONS_KEY: {}, CHANGES_KEY: {}}


def parse_known_ids(raw: Any) -> List[int]:
    if raw is None or raw == "":
        return []
    if not isinstance(raw, str):
        raise RegistryReadError(f"Known station list is not a string: {raw!r}")
    try:
        return [int(token) for token in raw.split(KNOWN_IDS_SEPARATOR) if token.strip()]
    except ValueError as exc:
        raise RegistryReadError(f"Known station list is corrupt: {raw!r}") from exc


def format_known_ids(ids: Iterable[int]) -> str:
    return KNOWN_IDS_SEPARATOR.join(str(station_id) for station_id in ids)


class RegistryStore:
    """Document tree of known IDs, station records and change records.

    The tree mirrors a realtime-database layout (``knownStations``,
    ``stations/<id>``, ``changes/<timestamp>``) and is optionally mirrored to a
    JSON file. A write is applied in memory only after it reached the disk.
    """

    def __init__(self, persistence_path: Optional[Path] = None) -> None:
        self.persistence_path = persistence_path
        self._tree: Optional[Dict[str, Any]] = None
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
        else:
            self._tree = _empty_tree()

    def read_known_ids(self) -> List[int]:
        with self._lock:
            tree = self._loaded_tree()
            return parse_known_ids(tree.get(KNOWN_STATIONS_KEY))

    def write_known_ids(self, ids: Iterable[int]) -> None:
        value = format_known_ids(ids)
        try:
            self._set(KNOWN_STATIONS_KEY, None, value)
        except (OSError, RegistryReadError) as exc:
            raise RegistryUpdateError(f"Known station list could not be saved: {exc}") from exc

    def read_station_record(self, station_id: int) -> Optional[StationRecord]:
        with self._lock:
            payload = self._loaded_tree()[STATIONS_KEY].get(str(station_id))
        if payload is None:
            return None
        try:
            return StationRecord.model_validate(payload)
        except ValidationError as exc:
            raise RegistryReadError(f"Station {station_id} record is corrupt.") from exc

    def write_station_record(self, station_id: int, record: StationRecord) -> None:
        payload = record.model_dump(mode="json", by_alias=True)
        try:
            self._set(STATIONS_KEY, str(station_id), payload)
        except (OSError, RegistryReadError) as exc:
            raise RegistryWriteError(station_id, str(exc)) from exc

    def read_change_record(self, timestamp: int) -> Optional[ChangeRecord]:
        with self._lock:
            payload = self._loaded_tree()[CHANGES_KEY].get(str(timestamp))
        if payload is None:
            return None
        try:
            return ChangeRecord.model_validate(payload)
        except ValidationError as exc:
            raise RegistryReadError(f"Change record {timestamp} is corrupt.") from exc

    def write_change_record(self, timestamp: int, changes: str) -> None:
        record = ChangeRecord(data=format_change_record(timestamp, changes))
        try:
            self._set(CHANGES_KEY, str(timestamp), record.model_dump(mode="json"))
        except (OSError, RegistryReadError) as exc:
            raise ChangeWriteError(f"Change record {timestamp} could not be saved: {exc}") from exc

    def _set(self, branch: str, key: Optional[str], value: Any) -> None:
        with self._lock:
            updated = copy.deepcopy(self._loaded_tree())
            if key is None:
                updated[branch] = value
            else:
                updated[branch][key] = value
            self._persist(updated)
            self._tree = updated

    def _loaded_tree(self) -> Dict[str, Any]:
        if self._tree is None:
            self._tree = self._load_from_disk()
        return self._tree

    def _persist(self, tree: Dict[str, Any]) -> None:
        if not self.persistence_path:
            return
        staging = self.persistence_path.with_suffix(self.persistence_path.suffix + ".tmp")
        staging.write_text(json.dumps(tree, indent=2, sort_keys=True))
        os.replace(staging, self.persistence_path)

    def _load_from_disk(self) -> Dict[str, Any]:
        assert self.persistence_path is not None
        if not self.persistence_path.exists():
            return _empty_tree()

        try:
            raw = self.persistence_path.read_text() or "{}"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError) as exc:
            logger.error(
                "Registry file could not be loaded.",
                extra={"reason": str(exc)},
            )
            raise RegistryReadError(f"Registry file {self.persistence_path} is unreadable.") from exc

        if not isinstance(data, dict):
            raise RegistryReadError(f"Registry file {self.persistence_path} is not a document.")

        tree = _empty_tree()
        tree.update({key: value for key, value in data.items() if value is not None})
        for branch in (STATIONS_KEY, CHANGES_KEY):
            if not isinstance(tree[branch], dict):
                raise RegistryReadError(
                    f"Registry file {self.persistence_path} has a malformed {branch!r} branch."
                )
        return tree


@lru_cache
def build_default_store(path: Optional[str] = None) -> RegistryStore:
    settings = get_settings()
    store_path = settings.registry_persistence_path if path is None else path
    persistence = Path(store_path) if store_path else None
    return RegistryStore(persistence_path=persistence)
