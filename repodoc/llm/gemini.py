"""Client for the Gemini REST API (context caching and content generation)."""

from __future__ import annotations

import asyncio
import base64
import json
import re
from dataclasses import dataclass
from functools import partial
from typing import Any, Dict, List, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from ..config import DEFAULT_BASE_URL, DEFAULT_MODEL, Settings
from ..debug import DebugSink, NullDebugSink
from ..logging import get_logger
from ..models import CacheHandle
from .base import GenerationError

logger = get_logger("llm.gemini")

_ANALYSIS_BLOCK = re.compile(r"<analysis>.*?</analysis>", re.DOTALL)
_LIST_PAGE_SIZE = 100


@dataclass
class GeminiRequest:
    """A single HTTP call against the Gemini API."""

    method: str
    path: str
    payload: Optional[Dict[str, Any]]
    query: Dict[str, str]


class GeminiClient:
    """Creates context caches and generates text with a Gemini model.

    Network calls are blocking ``urllib`` requests pushed to the default
    executor so the event loop keeps serving other strategies.
    """

    def __init__(
        self,
        api_key: str,
        *,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        request_timeout: float = 120.0,
        debug_sink: DebugSink | None = None,
    ) -> None:
        if not api_key:
            raise GenerationError("Gemini API key is required")
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.request_timeout = request_timeout
        self._debug = debug_sink or NullDebugSink()

    @classmethod
    def from_settings(cls, settings: Settings, *, debug_sink: DebugSink | None = None) -> "GeminiClient":
        return cls(
            settings.api_key,
            model=settings.model,
            base_url=settings.base_url,
            request_timeout=settings.request_timeout,
            debug_sink=debug_sink,
        )

    @property
    def model_resource(self) -> str:
        return self.model if self.model.startswith("models/") else f"models/{self.model}"

    async def list_caches(self) -> List[CacheHandle]:
        handles: List[CacheHandle] = []
        page_token: Optional[str] = None
        while True:
            query = {"pageSize": str(_LIST_PAGE_SIZE)}
            if page_token:
                query["pageToken"] = page_token
            payload = await self._call(GeminiRequest("GET", "cachedContents", None, query))
            for item in payload.get("cachedContents") or []:
                if isinstance(item, dict) and item.get("name"):
                    handles.append(_handle_from_payload(item))
            page_token = payload.get("nextPageToken")
            if not page_token:
                return handles

    async def create_cache(
        self,
        content: str,
        *,
        mime_type: str = "text/plain",
        ttl_seconds: int = 600,
        display_name: Optional[str] = None,
    ) -> CacheHandle:
        self._debug.write("ai_cache_content", content)
        body: Dict[str, Any] = {
            "model": self.model_resource,
            "contents": [{"role": "user", "parts": [_content_part(content, mime_type)]}],
            "ttl": f"{ttl_seconds}s",
        }
        if display_name:
            body["displayName"] = display_name
        payload = await self._call(GeminiRequest("POST", "cachedContents", body, {}))
        if not payload.get("name"):
            raise GenerationError("Failed to create cache: cache name is missing")
        return _handle_from_payload(payload)

    async def generate_content(self, prompt: str, cache: Optional[CacheHandle] = None) -> str:
        self._debug.write("ai_prompt", prompt)
        body: Dict[str, Any] = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        model_resource = self.model_resource
        if cache is not None:
            body["cachedContent"] = cache.name
            # Cached content is bound to the model it was created with.
            model_resource = cache.model or model_resource
        payload = await self._call(
            GeminiRequest("POST", f"{model_resource}:generateContent", body, {})
        )
        text = _extract_text(payload)
        if not text:
            raise GenerationError("Gemini returned an empty response")
        return strip_analysis_blocks(text)

    async def _call(self, request: GeminiRequest) -> Dict[str, Any]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(self._send, request))

    def _send(self, request: GeminiRequest) -> Dict[str, Any]:
        url = f"{self.base_url}/{request.path}"
        if request.query:
            url = f"{url}?{urlencode(request.query)}"
        data = json.dumps(request.payload).encode("utf-8") if request.payload is not None else None
        headers = {"Content-Type": "application/json", "x-goog-api-key": self.api_key}
        http_request = Request(url, data=data, headers=headers, method=request.method)

        try:
            with urlopen(http_request, timeout=self.request_timeout) as response:
                raw = response.read()
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
            message = detail.strip() or exc.reason
            raise GenerationError(
                f"Gemini request {request.method} {request.path} failed with status {exc.code}: {message}"
            ) from exc
        except URLError as exc:
            raise GenerationError(f"Gemini request {request.method} {request.path} failed: {exc.reason}") from exc

        if not raw:
            return {}
        try:
            payload = json.loads(raw.decode("utf-8"))
        except json.JSONDecodeError as exc:
            raise GenerationError("Gemini returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise GenerationError("Gemini returned an unexpected payload")
        return payload


def strip_analysis_blocks(text: str) -> str:
    """Remove ``<analysis>`` scratchpad blocks the prompts allow the model to emit."""
    return _ANALYSIS_BLOCK.sub("", text).strip()


def _content_part(content: str, mime_type: str) -> Dict[str, Any]:
    if mime_type.startswith("text/plain"):
        return {"text": content}
    encoded = base64.b64encode(content.encode("utf-8")).decode("ascii")
    return {"inlineData": {"mimeType": mime_type, "data": encoded}}


def _handle_from_payload(payload: Dict[str, Any]) -> CacheHandle:
    return CacheHandle(
        name=str(payload["name"]),
        display_name=str(payload.get("displayName") or ""),
        model=payload.get("model"),
        expire_time=payload.get("expireTime"),
    )


def _extract_text(payload: Dict[str, Any]) -> str:
    candidates = payload.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return ""
    first = candidates[0]
    if not isinstance(first, dict):
        return ""
    content = first.get("content")
    if not isinstance(content, dict):
        return ""
    parts = content.get("parts")
    if not isinstance(parts, list):
        return ""
    return "".join(
        part["text"] for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str)
    )


__all__ = ["GeminiClient", "strip_analysis_blocks"]
