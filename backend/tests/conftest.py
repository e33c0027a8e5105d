import json
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import httpx
import pytest
from fastapi.testclient import TestClient

from dealcheck.api.deps import get_http_client
from dealcheck.core.config import Settings, get_settings
from dealcheck.main import create_app

LISTING_URL = "https://www.vinted.fr/items/4242-wool-coat"
GROQ_URL = "https://api.groq.com/openai/v1/chat/completions"
GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/"
IMAGE_1 = "https://images1.vinted.net/t/01_aaa/f800/coat.jpeg?s=1"
IMAGE_2 = "https://images1.vinted.net/t/02_bbb/f800/label.jpeg?s=2"

LISTING_HTML = f"""<!DOCTYPE html>
<html>
<head>
<meta property="og:title" content="Wool Coat (og)">
<meta property="og:description" content="Warm coat, worn twice">
<script type="application/ld+json">{{"@context": "https://schema.org", "@type": "Product",
  "name": "Max Mara Wool Coat", "description": "Camel wool coat, size 38",
  "brand": {{"@type": "Brand", "name": "Max Mara"}},
  "itemCondition": "https://schema.org/UsedCondition",
  "offers": {{"@type": "Offer", "price": "45.00", "priceCurrency": "EUR"}}}}</script>
</head>
<body>
<img src="{IMAGE_1}">
<img src="{IMAGE_2}">
<img src="{IMAGE_1}">
</body>
</html>"""

Route = Union[Callable[[httpx.Request], httpx.Response], Dict[str, Any], Exception]


class FakeWeb:
    """
    Stands in for the internet behind httpx.MockTransport.
    Routes by URL prefix (first match wins) and records every request.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._routes: List[Tuple[str, Route]] = []

    def add(self, prefix: str, status: int = 200, **response_kwargs) -> None:
        self._routes.append((prefix, dict(status_code=status, **response_kwargs)))

    def add_handler(self, prefix: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self._routes.append((prefix, handler))

    def add_error(self, prefix: str, exc: Exception) -> None:
        self._routes.append((prefix, exc))

    def requests_to(self, prefix: str) -> List[httpx.Request]:
        return [r for r in self.requests if str(r.url).startswith(prefix)]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for prefix, route in self._routes:
            if not str(request.url).startswith(prefix):
                continue
            if isinstance(route, Exception):
                raise route
            if callable(route):
                return route(request)
            return httpx.Response(**route)
        return httpx.Response(404, text="not found")

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


def groq_reply(content: Optional[str]) -> Dict[str, Any]:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def gemini_reply(text: str) -> Dict[str, Any]:
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}


def request_json(request: httpx.Request) -> Dict[str, Any]:
    return json.loads(request.content)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        MODEL_PROVIDER="groq",
        GROQ_API_KEY="test-key",
        GROQ_MODEL="llama-3.3-70b-versatile",
        GEMINI_API_KEY="",
        GEMINI_MODEL="gemini-2.0-flash",
        MODEL_VISION=True,
    )


@pytest.fixture
def web() -> FakeWeb:
    return FakeWeb()


@pytest.fixture
def make_api(web):
    def _make(app_settings: Settings) -> TestClient:
        app = create_app()

        async def _client():
            async with web.client() as client:
                yield client

        app.dependency_overrides[get_http_client] = _client
        app.dependency_overrides[get_settings] = lambda: app_settings
        return TestClient(app)

    return _make


@pytest.fixture
def api(make_api, settings) -> TestClient:
    return make_api(settings)
