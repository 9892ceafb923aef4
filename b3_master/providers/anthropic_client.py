"""Anthropic messages client used for advisory text and LLM quote lookups."""

from __future__ import annotations

from typing import Any

from b3_master.providers.http import ProviderError, post_json
from b3_master.providers.models import SourceCitation

ANTHROPIC_MESSAGES_URL = "https://api.anthropic.com/v1/messages"


class AnthropicClient:
    name = "anthropic"

    def __init__(self, api_key: str, model: str, timeout_seconds: float = 20.0, max_tokens: int = 350) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout_seconds = timeout_seconds
        self.max_tokens = max_tokens
        self.last_citations: list[SourceCitation] = []

    def generate_text(self, prompt: str) -> str | None:
        payload: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": 0.2,
            "messages": [{"role": "user", "content": prompt}],
        }
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": "2023-06-01",
            "content-type": "application/json",
        }
        data = post_json(
            ANTHROPIC_MESSAGES_URL,
            provider="anthropic",
            payload=payload,
            timeout_seconds=self.timeout_seconds,
            headers=headers,
        )
        if not isinstance(data, dict):
            raise ProviderError("anthropic", "BAD_RESPONSE", "Anthropic returned an unexpected payload.")
        content = data.get("content")
        self.last_citations = []
        if not isinstance(content, list):
            return None
        texts = [item.get("text") for item in content if isinstance(item, dict) and isinstance(item.get("text"), str)]
        for item in content:
            for citation in (item.get("citations") or []) if isinstance(item, dict) else []:
                url = citation.get("url") if isinstance(citation, dict) else None
                if url:
                    self.last_citations.append(SourceCitation(title=str(citation.get("title") or url), uri=url))
        return "\n".join(texts).strip() if texts else None
