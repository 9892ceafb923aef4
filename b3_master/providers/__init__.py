"""Quote providers, LLM clients and normalized provider models."""

from b3_master.providers.anthropic_client import AnthropicClient
from b3_master.providers.brapi import BrapiClient
from b3_master.providers.gemini_client import GeminiClient
from b3_master.providers.llm_quotes import LlmQuoteProvider
from b3_master.providers.local_api import LocalApiClient
from b3_master.providers.mock import MockQuoteProvider
from b3_master.providers.yahoo_finance import YahooFinanceClient

__all__ = [
    "AnthropicClient",
    "BrapiClient",
    "GeminiClient",
    "LlmQuoteProvider",
    "LocalApiClient",
    "MockQuoteProvider",
    "YahooFinanceClient",
]
