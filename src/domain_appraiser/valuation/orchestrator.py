"""Valuation orchestrator - cache, remote model with retry, local fallback.

Order of resolution for one domain:

1. Cache lookup (any backend error counts as a miss)
2. Remote model, each attempt raced against a timeout, retried with linear
   backoff on rate-limit / throttle / timeout / network errors only
3. Local fallback pricer when the remote path gives up

Remote successes are written back to the cache without blocking the caller.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Set

from ..errors import (
    ConfigurationError,
    RemoteTimeoutError,
    ValuationUnavailableError,
    describe_error,
    is_retryable,
)
from ..scoring.brandability import score_brandability
from ..scoring.fallback_pricer import calculate_fallback_price
from ..scoring.radio import apply_radio_penalty, radio_test
from ..utils.cache import SEVEN_DAYS, CacheBackend
from ..utils.domain import cache_key, clean_domain
from .models import (
    CONFIDENCE_HIGH,
    CONFIDENCE_MEDIUM,
    SOURCE_LOCAL,
    SOURCE_REMOTE,
    ValuationResult,
)
from .remote import parse_valuation_response

logger = logging.getLogger(__name__)

FALLBACK_SILENT = 'silent'
FALLBACK_SURFACE = 'surface'
FALLBACK_MODES = (FALLBACK_SILENT, FALLBACK_SURFACE)


class ValuationOrchestrator:
    """Resolves a ValuationResult per domain.

    Args:
        provider: object with ``async predict(domain) -> payload``
        cache: object with async ``get(key)`` / ``set(key, value, ttl_seconds)``,
            or None to run without a cache
        timeout: seconds allowed for each remote attempt
        max_retries: extra attempts after the first one
        backoff_seconds: delay unit; attempt n waits n * backoff_seconds
        fallback_mode: 'silent' returns the local estimate, 'surface' raises
            ValuationUnavailableError carrying it
        sleep: coroutine used for backoff delays
    """

    def __init__(
        self,
        provider,
        cache: Optional[CacheBackend] = None,
        timeout: float = 5.0,
        max_retries: int = 2,
        backoff_seconds: float = 1.0,
        cache_ttl: int = SEVEN_DAYS,
        fallback_mode: str = FALLBACK_SILENT,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        if fallback_mode not in FALLBACK_MODES:
            raise ConfigurationError(f"unknown fallback mode: {fallback_mode}")
        self.provider = provider
        self.cache = cache
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds
        self.cache_ttl = cache_ttl
        self.fallback_mode = fallback_mode
        self._sleep = sleep
        self._pending_writes: Set[asyncio.Task] = set()

    async def _read_cache(self, key: str) -> Optional[ValuationResult]:
        if self.cache is None:
            return None
        try:
            payload = await self.cache.get(key)
        except Exception as e:
            logger.warning("Cache read failed for %s: %s", key, e)
            return None
        if payload is None:
            return None
        result = ValuationResult.from_cache(payload)
        if result is None:
            logger.debug("Ignoring malformed cache entry for %s", key)
        return result

    async def _write_cache(self, key: str, result: ValuationResult) -> None:
        try:
            await self.cache.set(key, result.to_json(), self.cache_ttl)
        except Exception as e:
            logger.warning("Cache write failed for %s: %s", key, e)

    def _schedule_cache_write(self, key: str, result: ValuationResult) -> None:
        if self.cache is None:
            return
        task = asyncio.ensure_future(self._write_cache(key, result))
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def flush(self) -> None:
        """Wait for background cache writes, then let the cache persist them."""
        if self._pending_writes:
            await asyncio.gather(*list(self._pending_writes))
        persist = getattr(self.cache, 'flush', None)
        if persist is None:
            return
        try:
            await persist()
        except Exception as e:
            logger.warning("Cache flush failed: %s", e)

    async def aclose(self) -> None:
        """Flush pending writes, then release provider and cache connections."""
        await self.flush()
        for resource in (self.provider, self.cache):
            close = getattr(resource, 'aclose', None)
            if close is not None:
                await close()

    async def _attempt(self, domain: str) -> ValuationResult:
        try:
            payload = await asyncio.wait_for(self.provider.predict(domain), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise RemoteTimeoutError(f"no answer within {self.timeout}s", domain=domain) from e

        estimate = parse_valuation_response(payload)
        return ValuationResult(
            source=SOURCE_REMOTE,
            value=estimate.value,
            confidence=CONFIDENCE_HIGH,
            raw=payload,
            tiers=estimate.tiers,
        )

    async def _fetch_remote(self, domain: str) -> ValuationResult:
        """Call the provider, retrying retryable failures; re-raise the last error."""
        attempts = self.max_retries + 1
        attempt = 1
        while True:
            try:
                return await self._attempt(domain)
            except Exception as e:
                if attempt >= attempts or not is_retryable(e):
                    raise
                delay = attempt * self.backoff_seconds
                logger.info(
                    "Remote valuation attempt %d/%d for %s failed (%s), retrying in %.1fs",
                    attempt, attempts, domain, type(e).__name__, delay
                )
                await self._sleep(delay)
                attempt += 1

    def _fallback(self, domain: str) -> ValuationResult:
        fallback = calculate_fallback_price(domain)
        radio = radio_test(domain)
        brand = score_brandability(domain)
        return ValuationResult(
            source=SOURCE_LOCAL,
            value=apply_radio_penalty(fallback.fallback_price, radio),
            confidence=CONFIDENCE_MEDIUM,
            raw={
                'fallback_result': fallback.to_dict(),
                'radio_test': {'flagged': radio.flagged, 'reason': radio.reason},
                'brand_scoring': brand.to_dict(),
            },
        )

    async def valuate(self, domain: str) -> ValuationResult:
        """Resolve one domain: cache, then remote, then local fallback."""
        domain = clean_domain(domain)
        key = cache_key(domain)

        cached = await self._read_cache(key)
        if cached is not None:
            logger.debug("Cache hit for %s", domain)
            return cached

        try:
            result = await self._fetch_remote(domain)
        except Exception as e:
            logger.warning("Remote valuation failed for %s, using local model: %s", domain, e)
            fallback = self._fallback(domain)
            if self.fallback_mode == FALLBACK_SURFACE:
                code, message = describe_error(e, domain)
                raise ValuationUnavailableError(code, message, domain=domain, fallback=fallback) from e
            return fallback

        self._schedule_cache_write(key, result)
        return result

