import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from dealcheck.api.deps import get_http_client
from dealcheck.core.config import Settings, get_settings
from dealcheck.core.errors import DealCheckError, ValidationError
from dealcheck.core.fetcher import ListingFetcher
from dealcheck.core.llm import ModelClient
from dealcheck.core.parser import parse_analysis
from dealcheck.schemas.analyze import AnalyzeRequest, AnalyzeResponse, ErrorResponse, ItemSummary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["analyze"])


def _validate_url(payload: Optional[AnalyzeRequest]) -> str:
    url = ((payload.url if payload else None) or "").strip()
    if not url:
        raise ValidationError("URL is required")
    if not url.lower().startswith(("http://", "https://")):
        raise ValidationError("URL must start with http:// or https://")
    return url


@router.post(
    "/analyze",
    response_model=AnalyzeResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def analyze(
    payload: Optional[AnalyzeRequest] = Body(None),
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """
    Fetch -> build prompt -> call model -> parse -> respond.
    Any stage failure short-circuits to {"error": ...}; no partial results.
    """
    try:
        url = _validate_url(payload)

        # Built first so a missing API key fails before any outbound request
        model = ModelClient(settings, client)
        fetcher = ListingFetcher(client, timeout=settings.FETCH_TIMEOUT_SECONDS)

        listing = await fetcher.fetch(url)
        raw_text = await model.analyze(listing)
        analysis = parse_analysis(raw_text)

        logger.info("[ANALYZE] %s -> rating %d", url, analysis.rating)
        return AnalyzeResponse(
            rating=analysis.rating,
            assessment=analysis.assessment,
            item=ItemSummary(
                title=listing.title,
                brand=listing.brand,
                price=listing.price,
                image=listing.images[0] if listing.images else None,
            ),
        )

    except DealCheckError as e:
        log = logger.info if e.status_code < 500 else logger.error
        log("[ANALYZE] %s: %s", type(e).__name__, e.message)
        return JSONResponse(status_code=e.status_code, content=e.to_dict())

    except Exception as e:
        logger.exception("[ANALYZE] Unexpected error")
        return JSONResponse(
            status_code=500,
            content={"error": str(e) or "Failed to analyze listing"},
        )
