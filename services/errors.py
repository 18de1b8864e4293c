"""Exception hierarchy for feed polling and registry reconciliation."""

from __future__ import annotations

from typing import Any


class TrackerError(Exception):
    """Base class for every failure raised by the station tracker."""


class PassAbortedError(TrackerError):
    """A failure that aborts the whole reconciliation pass."""


class FeedDiscoveryError(PassAbortedError):
    """The upstream page was unreachable or did not embed the feed URL."""


class FeedFetchError(PassAbortedError):
    """The live feed could not be downloaded or decoded."""


class MalformedRecordError(PassAbortedError):
    """A raw feed record could not be turned into a station."""

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"Malformed station record: {field!r} {reason}.")
        self.field = field
        self.reason = reason


class MissingPropertyError(MalformedRecordError):
    def __init__(self, key: str) -> None:
        super().__init__(key, "is missing")
        self.key = key


class InvalidNumericValueError(MalformedRecordError):
    def __init__(self, key: str, value: Any) -> None:
        super().__init__(key, f"has non-numeric value {value!r}")
        self.key = key
        self.value = value


class RegistryReadError(PassAbortedError):
    """The known-station registry could not be read."""


class RegistryWriteError(TrackerError):
    """A single station record could not be persisted."""

    def __init__(self, station_id: int, reason: str) -> None:
        super().__init__(f"Station {station_id} could not be saved: {reason}")
        self.station_id = station_id
        self.reason = reason


class RegistryUpdateError(TrackerError):
    """The known-station ID list could not be written back."""


class ChangeWriteError(TrackerError):
    """The change record of a pass could not be written."""
