"""Gemini ``generateContent`` client with optional Google Search grounding."""

from __future__ import annotations

from typing import Any

from b3_master.providers.http import ProviderError, post_json
from b3_master.providers.models import SourceCitation

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"


class GeminiClient:
    name = "gemini"

    def __init__(self, api_key: str, model: str, timeout_seconds: float = 20.0, grounded: bool = True) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout_seconds = timeout_seconds
        self.grounded = grounded
        self.last_citations: list[SourceCitation] = []

    def generate_text(self, prompt: str) -> str | None:
        payload: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": 0.2},
        }
        if self.grounded:
            payload["tools"] = [{"google_search": {}}]
        data = post_json(
            f"{GEMINI_BASE_URL}/{self.model}:generateContent",
            provider="gemini",
            payload=payload,
            timeout_seconds=self.timeout_seconds,
            headers={"x-goog-api-key": self.api_key, "content-type": "application/json"},
        )
        if not isinstance(data, dict):
            raise ProviderError("gemini", "BAD_RESPONSE", "Gemini returned an unexpected payload.")
        candidates = data.get("candidates") or []
        self.last_citations = []
        if not candidates or not isinstance(candidates[0], dict):
            return None
        candidate = candidates[0]
        chunks = ((candidate.get("groundingMetadata") or {}).get("groundingChunks")) or []
        for chunk in chunks:
            web = chunk.get("web") if isinstance(chunk, dict) else None
            if isinstance(web, dict) and web.get("uri"):
                self.last_citations.append(SourceCitation(title=str(web.get("title") or web["uri"]), uri=web["uri"]))
        parts = (candidate.get("content") or {}).get("parts") or []
        texts = [part.get("text") for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str)]
        return "\n".join(texts).strip() if texts else None
