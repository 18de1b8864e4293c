from __future__ import annotations

from models.records import Station
from services.reconciler import ReconciliationPass, extend_known_ids


def _station(station_id: int, bikes: int) -> Station:
    return Station(
        id=station_id,
        name=f"Station {station_id}",
        lat=51.5,
        lon=-0.1,
        capacity=20,
        bikes=bikes,
        terminal_name=str(station_id),
        install_date=0,
    )


def test_pass_reports_missing_new_and_changes() -> None:
    live = [_station(300, bikes=7), _station(200, bikes=3)]

    plan = ReconciliationPass().run(live, [100, 200], timestamp=1700000000)

    assert plan.timestamp == 1700000000
    assert plan.missing_ids == [100]
    assert [station.id for station in plan.new_stations] == [300]
    assert plan.change_string == "200:3;300:7;"


def test_pass_sorts_snapshot_by_identifier() -> None:
    live = [_station(5, 1), _station(1, 2), _station(3, 0)]

    plan = ReconciliationPass().run(live, [], timestamp=1)

    assert [station.id for station in plan.stations] == [1, 3, 5]
    assert [station.id for station in plan.new_stations] == [1, 3, 5]
    assert plan.change_string == "1:2;3:0;5:1;"


def test_pass_records_changes_for_known_stations_too() -> None:
    live = [_station(1, 4), _station(2, 6)]

    plan = ReconciliationPass().run(live, [1, 2], timestamp=10)

    assert plan.new_stations == []
    assert plan.missing_ids == []
    assert plan.change_string == "1:4;2:6;"


def test_pass_over_empty_snapshot() -> None:
    plan = ReconciliationPass().run([], [8, 9], timestamp=10)

    assert plan.missing_ids == [8, 9]
    assert plan.change_string == ""


def test_extend_known_ids_appends_without_duplicates() -> None:
    assert extend_known_ids([100, 200], [300, 200, 400]) == [100, 200, 300, 400]
    assert extend_known_ids([], [5]) == [5]
