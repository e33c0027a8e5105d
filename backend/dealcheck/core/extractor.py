"""
Listing field extraction from raw listing HTML.

Each field is resolved by an ordered chain of strategies: the JSON-LD
(schema.org Product) block first, regex patterns over the raw HTML second.
The first strategy returning a non-empty value wins. Everything here is pure:
same HTML in, same ListingData out.
"""

import html as html_lib
import json
import logging
import re
from typing import Any, Callable, Dict, List, Optional, Sequence

from dealcheck.schemas.listing import ListingData

logger = logging.getLogger(__name__)

StructuredHint = Optional[Dict[str, Any]]
Strategy = Callable[[str, StructuredHint], Optional[str]]

MAX_IMAGES = 5
SCHEMA_ORG_PREFIX = "https://schema.org/"
CURRENCY_SYMBOLS = {"EUR": "€"}
DEFAULT_CURRENCY_SYMBOL = "€"

_LD_JSON_RE = re.compile(r'<script type="application/ld\+json">(.*?)</script>', re.DOTALL)
_OG_TITLE_RE = re.compile(r'<meta property="og:title" content="([^"]+)"')
_OG_DESCRIPTION_RE = re.compile(r'<meta property="og:description" content="([^"]+)"')
_BRAND_RE = re.compile(r'"brand":\s*\{\s*"name":\s*"([^"]+)"')
_PRICE_RE = re.compile(r'"price":\s*"?(\d+(?:\.\d+)?)"?')
_IMAGE_RE = re.compile(r"https://images1\.vinted\.net/t/[^\"'\s]+")


def _text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    s = str(value).strip()
    return s or None


def _amount(value: Any) -> Optional[str]:
    # JSON numbers like 45.0 should read "45", like the page shows them
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return _text(value)


def _iter_json_objects(obj: Any) -> List[dict]:
    """
    Flatten nested JSON-LD objects (lists, @graph) into a list of dicts.
    """
    out: List[dict] = []
    if isinstance(obj, dict):
        out.append(obj)
        for v in obj.values():
            out.extend(_iter_json_objects(v))
    elif isinstance(obj, list):
        for item in obj:
            out.extend(_iter_json_objects(item))
    return out


def find_structured_data(page_html: str) -> StructuredHint:
    """
    Locate and parse the embedded JSON-LD block.

    Returns the Product object when there is one (or the top-level object),
    None when the block is missing or malformed. Parse failures are logged,
    never raised.
    """
    m = _LD_JSON_RE.search(page_html or "")
    if not m:
        return None

    try:
        data = json.loads(m.group(1))
    except ValueError as e:
        logger.warning("[EXTRACT] Failed to parse JSON-LD: %s", e)
        return None

    objects = _iter_json_objects(data)
    if not objects:
        logger.warning("[EXTRACT] JSON-LD block is not an object; ignoring it")
        return None

    for obj in objects:
        if obj.get("@type") == "Product":
            return obj
    return objects[0]


# ============================================
# STRATEGIES
# ============================================

def _hint_name(page_html: str, hint: StructuredHint) -> Optional[str]:
    return _text(hint["name"])


def _og_title(page_html: str, hint: StructuredHint) -> Optional[str]:
    m = _OG_TITLE_RE.search(page_html)
    return html_lib.unescape(m.group(1)) if m else None


def _hint_brand(page_html: str, hint: StructuredHint) -> Optional[str]:
    return _text(hint["brand"]["name"])


def _brand_pattern(page_html: str, hint: StructuredHint) -> Optional[str]:
    m = _BRAND_RE.search(page_html)
    return m.group(1) if m else None


def _hint_price(page_html: str, hint: StructuredHint) -> Optional[str]:
    offers = hint["offers"]
    if isinstance(offers, list):
        offers = offers[0]
    amount = offers.get("price")
    if not amount:
        return None
    currency = _text(offers.get("priceCurrency")) or DEFAULT_CURRENCY_SYMBOL
    symbol = CURRENCY_SYMBOLS.get(currency, currency)
    amount = _amount(amount)
    return f"{symbol}{amount}" if amount else None


def _price_pattern(page_html: str, hint: StructuredHint) -> Optional[str]:
    m = _PRICE_RE.search(page_html)
    return f"{DEFAULT_CURRENCY_SYMBOL}{m.group(1)}" if m else None


def _hint_description(page_html: str, hint: StructuredHint) -> Optional[str]:
    return _text(hint["description"])


def _og_description(page_html: str, hint: StructuredHint) -> Optional[str]:
    m = _OG_DESCRIPTION_RE.search(page_html)
    return html_lib.unescape(m.group(1)) if m else None


def _hint_condition(page_html: str, hint: StructuredHint) -> Optional[str]:
    condition = _text(hint["itemCondition"])
    return _text(condition.replace(SCHEMA_ORG_PREFIX, "", 1)) if condition else None


TITLE_STRATEGIES: Sequence[Strategy] = (_hint_name, _og_title)
BRAND_STRATEGIES: Sequence[Strategy] = (_hint_brand, _brand_pattern)
PRICE_STRATEGIES: Sequence[Strategy] = (_hint_price, _price_pattern)
DESCRIPTION_STRATEGIES: Sequence[Strategy] = (_hint_description, _og_description)
CONDITION_STRATEGIES: Sequence[Strategy] = (_hint_condition,)


def _first_match(strategies: Sequence[Strategy], page_html: str, hint: StructuredHint) -> Optional[str]:
    """
    Run strategies in order and return the first non-empty value.
    A strategy that trips over a missing key or odd shape counts as absent.
    """
    for strategy in strategies:
        try:
            value = strategy(page_html, hint)
        except (KeyError, IndexError, TypeError, AttributeError, ValueError):
            continue
        if value:
            return value
    return None


def extract_title(page_html: str, hint: StructuredHint = None) -> Optional[str]:
    return _first_match(TITLE_STRATEGIES, page_html, hint)


def extract_brand(page_html: str, hint: StructuredHint = None) -> Optional[str]:
    return _first_match(BRAND_STRATEGIES, page_html, hint)


def extract_price(page_html: str, hint: StructuredHint = None) -> Optional[str]:
    """Price with currency symbol prefix, e.g. "€45"."""
    return _first_match(PRICE_STRATEGIES, page_html, hint)


def extract_description(page_html: str, hint: StructuredHint = None) -> Optional[str]:
    return _first_match(DESCRIPTION_STRATEGIES, page_html, hint)


def extract_condition(page_html: str, hint: StructuredHint = None) -> Optional[str]:
    return _first_match(CONDITION_STRATEGIES, page_html, hint)


def extract_images(page_html: str) -> List[str]:
    """
    CDN photo URLs in first-seen order, deduplicated, capped at MAX_IMAGES.
    """
    seen: Dict[str, None] = {}
    for url in _IMAGE_RE.findall(page_html or ""):
        seen.setdefault(url, None)
    return list(seen)[:MAX_IMAGES]


def extract_listing(page_html: str, url: str, hint: StructuredHint = None) -> ListingData:
    page_html = page_html or ""
    return ListingData(
        title=extract_title(page_html, hint),
        brand=extract_brand(page_html, hint),
        price=extract_price(page_html, hint),
        description=extract_description(page_html, hint),
        condition=extract_condition(page_html, hint),
        images=extract_images(page_html),
        source_url=url,
    )
