from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from services.errors import FeedFetchError
from settings import get_settings


class FeedClient:
    """Downloads the raw BikePoint records from the live feed."""

    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    def fetch_raw_stations(self, url: str) -> List[Dict[str, Any]]:
        try:
            response = self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise FeedFetchError(f"Feed {url} could not be fetched: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise FeedFetchError(f"Feed {url} did not return JSON.") from exc

        if not isinstance(payload, list):
            raise FeedFetchError(
                f"Feed {url} returned {type(payload).__name__}, expected a list of stations."
            )
        return payload


def build_http_client(timeout: Optional[float] = None) -> httpx.Client:
    settings = get_settings()
    return httpx.Client(
        timeout=settings.feed_timeout if timeout is None else timeout,
        follow_redirects=True,
        headers={"Accept": "application/json, text/html"},
    )
