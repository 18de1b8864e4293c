from __future__ import annotations

from typing import Any, Dict

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the tracker service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def trigger(self) -> Dict[str, Any]:
        try:
            response = self._client.get("/", params=self._params())
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        payload = response.json()
        if not isinstance(payload, dict) or "success" not in payload:
            raise typer.BadParameter("Unexpected response payload when triggering a pass.")
        return payload

    def get_station(self, station_id: int) -> Dict[str, Any]:
        try:
            response = self._client.get(f"/station/{station_id}", params=self._params())
            if response.status_code == 404:
                raise typer.BadParameter(f"Station {station_id} was not found.")
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.json()

    def get_change(self, timestamp: int) -> str:
        try:
            response = self._client.get(f"/change/{timestamp}", params=self._params())
            if response.status_code == 404:
                raise typer.BadParameter(f"Change record {timestamp} was not found.")
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.text

    def _params(self) -> Dict[str, str]:
        return {"fetch": self._config.secret}

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
