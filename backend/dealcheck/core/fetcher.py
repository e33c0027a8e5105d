import logging

import httpx

from dealcheck.core.errors import ExtractionError, FetchError
from dealcheck.core.extractor import extract_listing, find_structured_data
from dealcheck.schemas.listing import ListingData

logger = logging.getLogger(__name__)

# Desktop browser headers; enough to get past trivial bot filtering, nothing more
BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


class ListingFetcher:
    """
    Downloads a listing page and turns it into ListingData.
    """

    def __init__(self, client: httpx.AsyncClient, timeout: float = 20.0):
        self._client = client
        self._timeout = timeout

    async def fetch(self, url: str) -> ListingData:
        try:
            r = await self._client.get(
                url,
                headers=BROWSER_HEADERS,
                timeout=self._timeout,
                follow_redirects=True,
            )
        except httpx.HTTPError as e:
            logger.warning("[FETCH] %s unreachable: %s", url, e)
            raise FetchError() from e

        if not r.is_success:
            logger.warning("[FETCH] %s returned %s", url, r.status_code)
            raise FetchError()

        page_html = r.text
        hint = find_structured_data(page_html)
        listing = extract_listing(page_html, url, hint)

        # Minimum-viable-data gate: only fail when BOTH are missing
        if not listing.title and not listing.price:
            logger.info("[FETCH] %s: no title or price found", url)
            raise ExtractionError()

        logger.info(
            "[FETCH] %s: title=%r price=%r images=%d structured=%s",
            url,
            listing.title,
            listing.price,
            len(listing.images),
            hint is not None,
        )
        return listing
