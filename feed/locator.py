from __future__ import annotations

import logging
import re

import httpx

from services.errors import FeedDiscoveryError

logger = logging.getLogger(__name__)

API_URL_PATTERN = re.compile(r'tfl.apiUrl[ ]?=[ ]?"([\w:/.-]*)";')


def extract_api_url(page: str) -> str:
    match = API_URL_PATTERN.search(page)
    if match is None:
        raise FeedDiscoveryError("Feed URL was not found on the docking station page.")
    return match.group(1)


class FeedLocator:
    """Finds the live feed endpoint advertised by the operator's docking station page."""

    def __init__(self, client: httpx.Client, homepage_url: str, feed_path: str) -> None:
        self._client = client
        self.homepage_url = homepage_url
        self.feed_path = feed_path

    def resolve_url(self) -> str:
        try:
            response = self._client.get(self.homepage_url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error(
                "Docking station page could not be fetched.",
                extra={"url": self.homepage_url, "reason": str(exc)},
            )
            raise FeedDiscoveryError(
                f"Docking station page {self.homepage_url} is unreachable: {exc}"
            ) from exc

        url = extract_api_url(response.text) + self.feed_path
        logger.debug("Resolved feed URL.", extra={"url": url})
        return url
