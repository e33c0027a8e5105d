import base64
import logging
import re
from typing import Any, Dict, Optional, Tuple

import httpx

from dealcheck.core.config import Settings
from dealcheck.core.errors import ModelCallError, ModelConfigError, NoAnalysisError
from dealcheck.core.prompt import SYSTEM_PROMPT, build_prompt
from dealcheck.schemas.listing import ListingData

logger = logging.getLogger(__name__)

GROQ_API_URL = "https://api.groq.com/openai/v1/chat/completions"

# Service endpoint for Gemini API (v1beta)
GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"

SUPPORTED_PROVIDERS = ("groq", "gemini")

# Groq only takes image parts on its multimodal models
_GROQ_VISION_MODEL_RE = re.compile(r"vision|llama-4", re.IGNORECASE)


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("utf-8")


def _redact_key(s: str) -> str:
    """
    Redact 'key=...' in URLs or text so we never leak API keys in logs/responses.
    """
    if not s:
        return s
    return re.sub(r"(key=)([^&\s]+)", r"\1REDACTED", s)


class ModelClient:
    """
    Single-shot completion call against the configured provider.

    No retries and no streamed completions: any failure is terminal for the request.
    """

    def __init__(self, settings: Settings, client: httpx.AsyncClient):
        provider = settings.provider
        if provider not in SUPPORTED_PROVIDERS:
            raise ModelConfigError(f"Unsupported MODEL_PROVIDER: {settings.MODEL_PROVIDER}")
        if not settings.api_key:
            raise ModelConfigError(f"{settings.api_key_name} environment variable not set")

        self.provider = provider
        self.model = settings.GEMINI_MODEL if provider == "gemini" else settings.GROQ_MODEL
        self._api_key = settings.api_key
        self._settings = settings
        self._client = client

    @property
    def supports_images(self) -> bool:
        if not self._settings.MODEL_VISION:
            return False
        if self.provider == "gemini":
            return True
        return bool(_GROQ_VISION_MODEL_RE.search(self.model))

    async def analyze(self, listing: ListingData) -> str:
        image: Optional[Tuple[bytes, str]] = None
        if listing.images and self.supports_images:
            image = await self._download_image(listing.images[0])

        # The photo note goes in only when a photo is actually sent
        prompt = build_prompt(listing, image_attached=image is not None)

        if self.provider == "gemini":
            url, params, headers, payload = self._gemini_request(prompt, image)
        else:
            url, params, headers, payload = self._groq_request(prompt, image)

        logger.info("[MODEL] %s/%s request (image=%s)", self.provider, self.model, image is not None)

        try:
            r = await self._client.post(
                url,
                params=params,
                headers=headers,
                json=payload,
                timeout=self._settings.MODEL_TIMEOUT_SECONDS,
            )
        except httpx.HTTPError as e:
            logger.error("[MODEL] request failed: %s", _redact_key(str(e)))
            raise ModelCallError(f"AI analysis failed: {_redact_key(str(e)) or type(e).__name__}") from e

        if not r.is_success:
            body = _redact_key(r.text)
            logger.error("[MODEL] %s API error %s: %s", self.provider, r.status_code, body[:2000])
            raise ModelCallError(f"AI analysis failed: {r.status_code} - {body[:200]}")

        try:
            data = r.json()
        except ValueError:
            raise NoAnalysisError()

        text = self._extract_text(data)
        if not text or not text.strip():
            raise NoAnalysisError()
        return text

    async def _download_image(self, url: str) -> Optional[Tuple[bytes, str]]:
        """
        Best-effort photo download. Any failure means text-only analysis.
        """
        max_bytes = self._settings.MAX_IMAGE_BYTES
        try:
            async with self._client.stream(
                "GET",
                url,
                timeout=self._settings.IMAGE_TIMEOUT_SECONDS,
                follow_redirects=True,
            ) as r:
                r.raise_for_status()

                mime_type = (r.headers.get("content-type") or "").split(";")[0].strip().lower()
                if not mime_type.startswith("image/"):
                    logger.warning("[MODEL] %s is not an image (%s), continuing text-only", url, mime_type or "no type")
                    return None

                declared = r.headers.get("content-length")
                if declared and declared.isdigit() and int(declared) > max_bytes:
                    logger.warning("[MODEL] Image is %s bytes (cap %d), continuing text-only", declared, max_bytes)
                    return None

                data = bytearray()
                async for chunk in r.aiter_bytes():
                    data.extend(chunk)
                    if len(data) > max_bytes:
                        logger.warning("[MODEL] Image exceeds %d bytes, continuing text-only", max_bytes)
                        return None
        except httpx.HTTPError as e:
            logger.warning("[MODEL] Image download failed, continuing text-only: %s", e)
            return None

        if not data:
            logger.warning("[MODEL] Image at %s is empty, continuing text-only", url)
            return None

        return bytes(data), mime_type

    def _groq_request(
        self, prompt: str, image: Optional[Tuple[bytes, str]]
    ) -> Tuple[str, Dict[str, Any], Dict[str, str], Dict[str, Any]]:
        user_content: Any = prompt
        if image is not None:
            data, mime_type = image
            user_content = [
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{_b64(data)}"}},
            ]

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": user_content},
            ],
            "temperature": self._settings.MODEL_TEMPERATURE,
            "max_tokens": self._settings.MODEL_MAX_TOKENS,
        }
        headers = {"Authorization": f"Bearer {self._api_key}"}
        return GROQ_API_URL, {}, headers, payload

    def _gemini_request(
        self, prompt: str, image: Optional[Tuple[bytes, str]]
    ) -> Tuple[str, Dict[str, Any], Dict[str, str], Dict[str, Any]]:
        model_name = self.model if self.model.startswith("models/") else f"models/{self.model}"
        url = f"{GEMINI_API_BASE}/{model_name}:generateContent"

        parts = [{"text": prompt}]
        if image is not None:
            data, mime_type = image
            parts.append({"inline_data": {"mime_type": mime_type, "data": _b64(data)}})

        payload = {
            "system_instruction": {"parts": [{"text": SYSTEM_PROMPT}]},
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {
                "temperature": self._settings.MODEL_TEMPERATURE,
                "maxOutputTokens": self._settings.MODEL_MAX_TOKENS,
            },
        }
        return url, {"key": self._api_key}, {}, payload

    def _extract_text(self, data: Any) -> Optional[str]:
        try:
            if self.provider == "gemini":
                parts = data["candidates"][0]["content"]["parts"]
                return "".join(p.get("text", "") for p in parts if isinstance(p, dict))
            content = data["choices"][0]["message"]["content"]
            return content if isinstance(content, str) else None
        except (KeyError, IndexError, TypeError):
            logger.error("[MODEL] Unexpected %s response shape", self.provider)
            return None
