from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_change, render_station, render_trigger


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the docking station tracker service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Tracker API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    secret: Optional[str] = typer.Option(
        None,
        "--secret",
        "-s",
        help="Shared secret sent as the fetch query parameter (defaults to TRIGGER_SECRET env).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for a response.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, secret=secret, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("trigger")
def trigger_command(ctx: typer.Context) -> None:
    """Run one reconciliation pass on the server and show its report."""
    state = _get_state(ctx)
    typer.echo(f"Triggering reconciliation at {state.config.base_url} ...")
    payload = state.client.trigger()
    render_trigger(payload)
    if not payload.get("success"):
        raise typer.Exit(code=1)


@app.command("station")
def station_command(
    ctx: typer.Context,
    station_id: int = typer.Argument(..., help="Numeric station identifier."),
) -> None:
    """Show the record stored when a station was first found."""
    state = _get_state(ctx)
    render_station(state.client.get_station(station_id))


@app.command("change")
def change_command(
    ctx: typer.Context,
    timestamp: int = typer.Argument(..., help="Epoch seconds of the pass."),
    decode: bool = typer.Option(
        False,
        "--decode/--raw",
        help="List bikes per station instead of the raw change string.",
    ),
) -> None:
    """Show the occupancy change record of a pass."""
    state = _get_state(ctx)
    render_change(state.client.get_change(timestamp), decode=decode)
