"""Per-domain and bulk appraisal on top of the orchestrator."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..errors import InvalidRequestError, UnprocessableDomainError, describe_error
from ..scoring.brandability import BrandabilityScore, BrandabilityScorer
from ..scoring.radio import radio_test
from ..utils.domain import clean_domain, estimate_word_count, is_valid_domain, split_domain
from .composer import brand_multiplier, compose_prices

logger = logging.getLogger(__name__)

SORT_FIELDS = ('liquidity_price', 'market_price', 'buy_now_price', 'brand_score')


@dataclass
class DomainAppraisal:
    """One output row."""
    domain: str
    source: Optional[str]
    status: str
    liquidity_price: Optional[int]
    market_price: Optional[int]
    buy_now_price: Optional[int]
    brand_label: str
    brand_score: int
    brand_multiplier: float
    length: int
    tld: str
    word_count: int
    radio_flagged: bool = False
    cached: bool = False
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'domain': self.domain,
            'source': self.source,
            'status': self.status,
            'liquidity_price': self.liquidity_price,
            'market_price': self.market_price,
            'buy_now_price': self.buy_now_price,
            'brand_label': self.brand_label,
            'brand_score': self.brand_score,
            'brand_multiplier': self.brand_multiplier,
            'length': self.length,
            'tld': self.tld,
            'word_count': self.word_count,
            'radio_flagged': self.radio_flagged,
            'cached': self.cached,
        }
        if self.error:
            result['error'] = self.error
        return result


class AppraisalService:
    """Runs valuation, brand scoring and price composition for domains."""

    def __init__(
        self,
        orchestrator,
        scorer: Optional[BrandabilityScorer] = None,
        max_concurrent: int = 3,
        max_domains: int = 200,
        sort_field: str = 'market_price'
    ):
        if sort_field not in SORT_FIELDS:
            raise InvalidRequestError(f"cannot sort by {sort_field}")
        self.orchestrator = orchestrator
        self.scorer = scorer or BrandabilityScorer()
        self.max_concurrent = max_concurrent
        self.max_domains = max_domains
        self.sort_field = sort_field

    def _row(self, domain: str, brand: Optional[BrandabilityScore] = None, **values) -> DomainAppraisal:
        sld, tld = split_domain(domain)
        brand = brand or self.scorer.score(domain)
        return DomainAppraisal(
            domain=domain,
            brand_label=brand.label,
            brand_score=brand.score,
            brand_multiplier=brand_multiplier(brand),
            length=len(sld),
            tld=tld,
            word_count=estimate_word_count(sld),
            radio_flagged=radio_test(domain).flagged,
            **values
        )

    async def appraise(self, domain: str) -> DomainAppraisal:
        """Appraise one domain; errors propagate.

        Anything that is not a hostname is rejected before the remote model
        is asked.
        """
        if not isinstance(domain, str):
            raise UnprocessableDomainError(f"not a domain name: {domain!r}")
        domain = clean_domain(domain)
        if not is_valid_domain(domain):
            raise UnprocessableDomainError(f"invalid hostname: {domain}", domain=domain)
        valuation = await self.orchestrator.valuate(domain)
        brand = self.scorer.score(domain)
        prices = compose_prices(valuation, brand_multiplier(brand))
        return self._row(
            domain,
            brand=brand,
            source=valuation.source,
            status='ok',
            cached=valuation.cached,
            **prices.to_dict()
        )

    def _error_row(self, domain: str, exc: BaseException) -> DomainAppraisal:
        code, _ = describe_error(exc, domain)
        return self._row(
            domain,
            source=None,
            status='error',
            liquidity_price=0,
            market_price=0,
            buy_now_price=0,
            error=code,
        )

    async def _appraise_isolated(self, domain: str, semaphore: asyncio.Semaphore) -> DomainAppraisal:
        async with semaphore:
            try:
                return await self.appraise(domain)
            except Exception as e:
                logger.error("Failed to appraise %s: %s", domain, e)
                name = clean_domain(domain) if isinstance(domain, str) else str(domain)
                return self._error_row(name, e)

    def _validate_batch(self, domains: List[str]) -> None:
        if not domains or not isinstance(domains, (list, tuple)):
            raise InvalidRequestError("provide at least one domain")
        if len(domains) > self.max_domains:
            raise InvalidRequestError(f"maximum {self.max_domains} domains allowed per request")

    async def appraise_bulk(self, domains: List[str], sort_field: Optional[str] = None) -> List[DomainAppraisal]:
        """Appraise many domains with bounded concurrency.

        A failing domain becomes a zero-priced error row; the batch itself
        only fails on invalid input. Rows are sorted descending by
        ``sort_field``.
        """
        self._validate_batch(domains)
        sort_field = sort_field or self.sort_field
        if sort_field not in SORT_FIELDS:
            raise InvalidRequestError(f"cannot sort by {sort_field}")

        semaphore = asyncio.Semaphore(self.max_concurrent)
        tasks = [self._appraise_isolated(domain, semaphore) for domain in domains]
        results = await asyncio.gather(*tasks)
        await self.orchestrator.flush()

        results.sort(key=lambda r: getattr(r, sort_field) or 0, reverse=True)
        return results

    def appraise_bulk_sync(self, domains: List[str], sort_field: Optional[str] = None) -> List[DomainAppraisal]:
        """Synchronous wrapper for bulk appraisal."""
        return asyncio.run(self.appraise_bulk(domains, sort_field=sort_field))

    async def aclose(self) -> None:
        await self.orchestrator.aclose()
