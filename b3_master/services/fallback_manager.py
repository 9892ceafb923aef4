"""Ordered fallback across configured quote providers."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from b3_master.providers.http import ProviderError
from b3_master.services.base import ErrorEnvelope, ServiceResult
from b3_master.services.provider_status import ProviderStatus

T = TypeVar("T")
LOGGER = logging.getLogger(__name__)
RATE_LIMIT_PATTERNS = (
    "rate limit",
    "too many requests",
    "limite de requisições",
    "quota",
    "limit exceeded",
)
DEFAULT_RATE_LIMIT_DISABLE_SECONDS = 60 * 60
GENERIC_QUOTE_ERROR = "All quote providers are currently unavailable. Please try again later."


@dataclass(frozen=True)
class ProviderAttempt(Generic[T]):
    key: str
    label: str
    call: Callable[[], T | None]


def _is_empty(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


class FallbackManager:
    """Runs provider attempts in order until one returns non-empty data."""

    def __init__(
        self,
        provider_status: ProviderStatus,
        rate_limit_disable_seconds: dict[str, int] | None = None,
        default_disable_seconds: int = DEFAULT_RATE_LIMIT_DISABLE_SECONDS,
    ) -> None:
        self._provider_status = provider_status
        self._rate_limit_disable_seconds = rate_limit_disable_seconds or {}
        self._default_disable_seconds = default_disable_seconds

    def execute(self, operation: str, subject: str, attempts: list[ProviderAttempt[T]]) -> ServiceResult[T]:
        had_fallback = False
        last_error: ProviderError | None = None
        for attempt in attempts:
            if self._provider_status.is_disabled(attempt.key):
                had_fallback = True
                LOGGER.info(
                    "provider skipped (disabled window): op=%s subject=%s provider=%s disabled_until=%s",
                    operation,
                    subject,
                    attempt.key,
                    self._provider_status.get_disabled_until(attempt.key),
                )
                continue

            started = time.perf_counter()
            try:
                value = attempt.call()
                elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
                LOGGER.info(
                    "provider attempt complete: op=%s subject=%s provider=%s success=%s latency_ms=%s",
                    operation,
                    subject,
                    attempt.key,
                    not _is_empty(value),
                    elapsed_ms,
                )
                if not _is_empty(value):
                    warning = "Used fallback provider due to upstream issue." if had_fallback else None
                    return ServiceResult(data=value, source=attempt.label, warning=warning, fetched_at=time.time())
                had_fallback = True
            except ProviderError as error:
                had_fallback = True
                last_error = error
                elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
                LOGGER.warning(
                    "provider attempt failed: op=%s subject=%s provider=%s code=%s status=%s latency_ms=%s",
                    operation,
                    subject,
                    attempt.key,
                    error.code,
                    error.status,
                    elapsed_ms,
                )
                if self.is_rate_limited(error):
                    ttl_seconds = self._rate_limit_disable_seconds.get(attempt.key, self._default_disable_seconds)
                    disabled_until = self._provider_status.disable_provider(attempt.key, ttl_seconds)
                    LOGGER.warning(
                        "provider disabled after rate limit: provider=%s disabled_until=%s op=%s",
                        attempt.key,
                        disabled_until,
                        operation,
                    )
            except Exception:
                had_fallback = True
                elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
                LOGGER.exception(
                    "provider attempt unexpected failure: op=%s subject=%s provider=%s latency_ms=%s",
                    operation,
                    subject,
                    attempt.key,
                    elapsed_ms,
                )

        code = "UPSTREAM" if last_error is None or last_error.code == "NOT_FOUND" else last_error.code
        return ServiceResult(
            data=None,
            error=ErrorEnvelope(code=code, message=GENERIC_QUOTE_ERROR, retriable=True),
        )

    @staticmethod
    def is_rate_limited(error: ProviderError) -> bool:
        if error.code == "RATE_LIMIT" or error.status == 429:
            return True
        message = (error.message or "").lower()
        return any(pattern in message for pattern in RATE_LIMIT_PATTERNS)
