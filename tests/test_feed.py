from __future__ import annotations

import httpx
import pytest

from feed.client import FeedClient
from feed.locator import FeedLocator, extract_api_url
from services.errors import FeedDiscoveryError, FeedFetchError

HOMEPAGE = "https://tfl.example/find-a-docking-station"
PAGE = '<script>var tfl = tfl || {}; tfl.apiUrl = "https://api.tfl.example/";</script>'


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_extract_api_url_accepts_optional_spaces() -> None:
    assert extract_api_url(PAGE) == "https://api.tfl.example/"
    assert extract_api_url('tfl.apiUrl="https://a.example/v1/";') == "https://a.example/v1/"


def test_extract_api_url_fails_without_marker() -> None:
    with pytest.raises(FeedDiscoveryError):
        extract_api_url("<html>nothing to see</html>")


def test_resolve_url_appends_feed_path() -> None:
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(200, text=PAGE)

    locator = FeedLocator(_client(handler), homepage_url=HOMEPAGE, feed_path="BikePoint")

    assert locator.resolve_url() == "https://api.tfl.example/BikePoint"
    assert requested == [HOMEPAGE]


def test_resolve_url_wraps_http_failures() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="maintenance")

    locator = FeedLocator(_client(handler), homepage_url=HOMEPAGE, feed_path="BikePoint")

    with pytest.raises(FeedDiscoveryError) as exc_info:
        locator.resolve_url()

    assert isinstance(exc_info.value.__cause__, httpx.HTTPStatusError)


def test_resolve_url_wraps_transport_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    locator = FeedLocator(_client(handler), homepage_url=HOMEPAGE, feed_path="BikePoint")

    with pytest.raises(FeedDiscoveryError):
        locator.resolve_url()


def test_fetch_raw_stations_returns_records() -> None:
    records = [{"id": "BikePoints_1"}, {"id": "BikePoints_2"}]

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=records)

    feed = FeedClient(_client(handler))

    assert feed.fetch_raw_stations("https://api.tfl.example/BikePoint") == records


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"message": "boom"}),
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json={"stations": []}),
    ],
)
def test_fetch_raw_stations_failures(response: httpx.Response) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return response

    feed = FeedClient(_client(handler))

    with pytest.raises(FeedFetchError):
        feed.fetch_raw_stations("https://api.tfl.example/BikePoint")
