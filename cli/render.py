from __future__ import annotations

from typing import Any, Dict, Iterable

import typer

from services.encoder import ChangeEncoder, split_change_record


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _join(ids: Iterable[Any]) -> str:
    joined = ", ".join(str(item) for item in ids)
    return joined or "-"


def render_trigger(payload: Dict[str, Any]) -> None:
    echo_heading("Reconciliation Pass")
    if not payload.get("success"):
        typer.secho(f"failed: {payload.get('error')}", fg=typer.colors.RED)
        return

    echo_key_values(
        [
            ("timestamp", payload.get("timestamp")),
            ("missing", _join(payload.get("missing_ids") or [])),
            ("registered", _join(payload.get("registered_ids") or [])),
            ("registry_updated", payload.get("registry_updated")),
            ("change_written", payload.get("change_written")),
            ("processing_ms", payload.get("processing_ms")),
        ]
    )

    failures = payload.get("failures") or []
    if failures:
        typer.echo()
        echo_heading("Registration Failures")
        for failure in failures:
            typer.echo(f"  - station {failure.get('station_id')}: {failure.get('reason')}")


def render_station(payload: Dict[str, Any]) -> None:
    echo_heading(f"Station {payload.get('id')}")
    echo_key_values(
        [
            ("name", payload.get("name")),
            ("location", f"{payload.get('lat')}, {payload.get('lon')}"),
            ("capacity", payload.get("capacity")),
            ("bikes", payload.get("bikes")),
            ("terminalName", payload.get("terminalName")),
            ("installDate", payload.get("installDate")),
            ("found", payload.get("found")),
        ]
    )


def render_change(payload: str, decode: bool = False) -> None:
    if not decode:
        typer.echo(payload)
        return

    timestamp, changes = split_change_record(payload)
    echo_heading(f"Changes at {timestamp}")
    for place in ChangeEncoder().decode(changes):
        typer.echo(f"  - station {place.id}: {place.bikes} bikes")
