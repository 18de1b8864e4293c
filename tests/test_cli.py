from __future__ import annotations

from typing import Any, Dict, List

import pytest
from typer.testing import CliRunner

from cli.app import app
from cli.config import load_config


class StubClient:
    def __init__(self, config) -> None:
        self.config = config
        self.trigger_payload: Dict[str, Any] = {
            "success": True,
            "timestamp": 1700000000,
            "missing_ids": [100],
            "registered_ids": [300],
            "failures": [{"station_id": 301, "reason": "permission denied"}],
            "registry_updated": True,
            "change_written": True,
            "processing_ms": 12,
        }
        self.station_calls: List[int] = []
        self.closed = False

    def trigger(self) -> Dict[str, Any]:
        return self.trigger_payload

    def get_station(self, station_id: int) -> Dict[str, Any]:
        self.station_calls.append(station_id)
        return {
            "id": station_id,
            "name": "Tanner Street, Bermondsey",
            "lat": 51.5,
            "lon": -0.08,
            "capacity": 41,
            "bikes": 9,
            "terminalName": "1024",
            "installDate": 1278240360000,
            "found": 1700000000,
        }

    def get_change(self, timestamp: int) -> str:
        return f"{timestamp}-200:3;300:7;"

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


def _install_stub(monkeypatch, stub: StubClient) -> None:
    def factory(config):
        stub.config = config
        return stub

    monkeypatch.setattr("cli.app.ApiClient", factory)


def test_trigger_renders_report(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(config=None)
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["--secret", "abc", "trigger"])

    assert result.exit_code == 0
    assert "missing: 100" in result.stdout
    assert "registered: 300" in result.stdout
    assert "station 301: permission denied" in result.stdout
    assert stub.config.secret == "abc"
    assert stub.closed is True


def test_trigger_failure_exits_non_zero(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(config=None)
    stub.trigger_payload = {"success": False, "error": "Not permitted access."}
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["trigger"])

    assert result.exit_code == 1
    assert "Not permitted access." in result.stdout


def test_station_command(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(config=None)
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["station", "85"])

    assert result.exit_code == 0
    assert stub.station_calls == [85]
    assert "Station 85" in result.stdout
    assert "terminalName: 1024" in result.stdout


def test_change_command_raw_and_decoded(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(config=None)
    _install_stub(monkeypatch, stub)

    raw = runner.invoke(app, ["change", "1700000000"])
    decoded = runner.invoke(app, ["change", "1700000000", "--decode"])

    assert raw.exit_code == 0
    assert "1700000000-200:3;300:7;" in raw.stdout
    assert decoded.exit_code == 0
    assert "station 200: 3 bikes" in decoded.stdout
    assert "station 300: 7 bikes" in decoded.stdout


def test_load_config_prefers_arguments_over_environment(monkeypatch) -> None:
    monkeypatch.setenv("API_BASE_URL", "http://tracker.internal:9000/")
    monkeypatch.setenv("TRIGGER_SECRET", "from-env")
    monkeypatch.setenv("CLI_REQUEST_TIMEOUT", "not-a-number")

    from_env = load_config()
    explicit = load_config(base_url="http://localhost:8001", secret="cli", timeout=5.0)

    assert from_env.base_url == "http://tracker.internal:9000"
    assert from_env.secret == "from-env"
    assert from_env.timeout == 120.0
    assert explicit.base_url == "http://localhost:8001"
    assert explicit.secret == "cli"
    assert explicit.timeout == 5.0
