from __future__ import annotations

import pytest

from models.records import Occupancy
from services.encoder import ChangeEncoder, format_change_record, split_change_record


def test_encode_empty_snapshot_returns_empty_string() -> None:
    assert ChangeEncoder().encode([]) == ""


def test_encode_concatenates_pairs_in_input_order() -> None:
    places = [Occupancy(id=1, bikes=5), Occupancy(id=2, bikes=0)]

    assert ChangeEncoder().encode(places) == "1:5;2:0;"


def test_encode_neither_sorts_nor_deduplicates() -> None:
    places = [Occupancy(id=9, bikes=1), Occupancy(id=3, bikes=2), Occupancy(id=9, bikes=1)]

    assert ChangeEncoder().encode(places) == "9:1;3:2;9:1;"


def test_decode_recovers_pairs_in_order() -> None:
    encoder = ChangeEncoder()
    places = [Occupancy(id=300, bikes=7), Occupancy(id=200, bikes=3), Occupancy(id=1, bikes=0)]

    assert encoder.decode(encoder.encode(places)) == places


def test_decode_rejects_malformed_segments() -> None:
    with pytest.raises(ValueError):
        ChangeEncoder().decode("1:5;oops;")


def test_change_record_payload_prefixes_timestamp() -> None:
    payload = format_change_record(1700000000, "1:5;2:0;")

    assert payload == "1700000000-1:5;2:0;"
    assert split_change_record(payload) == (1700000000, "1:5;2:0;")


def test_change_record_payload_with_empty_snapshot() -> None:
    assert split_change_record(format_change_record(5, "")) == (5, "")
