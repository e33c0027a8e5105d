import asyncio

import httpx
import pytest

from conftest import IMAGE_1, LISTING_HTML, LISTING_URL
from dealcheck.core.errors import ExtractionError, FetchError
from dealcheck.core.fetcher import BROWSER_HEADERS, ListingFetcher


def fetch(web, url=LISTING_URL):
    async def _run():
        async with web.client() as client:
            return await ListingFetcher(client, timeout=5).fetch(url)

    return asyncio.run(_run())


def test_fetch_extracts_listing(web):
    web.add(LISTING_URL, text=LISTING_HTML, headers={"content-type": "text/html"})

    listing = fetch(web)

    assert listing.title == "Max Mara Wool Coat"
    assert listing.price == "€45.00"
    assert listing.images[0] == IMAGE_1

    sent = web.requests[0]
    assert sent.method == "GET"
    assert sent.headers["user-agent"] == BROWSER_HEADERS["User-Agent"]
    assert sent.headers["accept-language"] == "en-US,en;q=0.5"


def test_non_success_status_is_fetch_error(web):
    web.add(LISTING_URL, status=404, text="gone")

    with pytest.raises(FetchError) as e:
        fetch(web)
    assert e.value.message == "Failed to fetch listing"


def test_unreachable_host_is_fetch_error(web):
    web.add_error(LISTING_URL, httpx.ConnectError("connection refused"))

    with pytest.raises(FetchError):
        fetch(web)


def test_redirect_is_followed(web):
    moved = "https://www.vinted.fr/items/4242-wool-coat-new"
    web.add(moved, text='<meta property="og:title" content="Wool Coat">')
    web.add(LISTING_URL, status=301, headers={"location": moved})

    assert fetch(web).title == "Wool Coat"


def test_title_only_passes_gate(web):
    web.add(LISTING_URL, text='<meta property="og:title" content="Wool Coat">')

    listing = fetch(web)
    assert listing.title == "Wool Coat"
    assert listing.price is None


def test_price_only_passes_gate(web):
    web.add(LISTING_URL, text='<script>window.item = {"price": "12.0"}</script>')

    listing = fetch(web)
    assert listing.title is None
    assert listing.price == "€12.0"


def test_no_title_and_no_price_is_extraction_error(web):
    web.add(LISTING_URL, text="<html><body>Listing removed</body></html>")

    with pytest.raises(ExtractionError) as e:
        fetch(web)
    assert e.value.message.startswith("Could not extract listing data")


def test_malformed_structured_data_does_not_abort(web):
    web.add(
        LISTING_URL,
        text='<script type="application/ld+json">{broken</script>'
        '<meta property="og:title" content="Wool Coat">',
    )

    assert fetch(web).title == "Wool Coat"
