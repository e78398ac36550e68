"""Build the process-wide services from configuration."""

from .config import AppraiserConfig
from .utils.cache import JsonFileCache, RedisCache
from .valuation.orchestrator import ValuationOrchestrator
from .valuation.remote import ReplicateValuationClient
from .valuation.service import AppraisalService


def build_cache(config: AppraiserConfig):
    if config.cache_backend == 'redis':
        return RedisCache(config.redis_url)
    if config.cache_backend == 'file':
        return JsonFileCache(cache_file=config.cache_file)
    return None


def build_service(config: AppraiserConfig, provider=None, cache=None) -> AppraisalService:
    """Wire provider, cache, orchestrator and service.

    Raises ConfigurationError before any work when credentials are missing.
    """
    if provider is None:
        provider = ReplicateValuationClient(
            api_token=config.api_token,
            model_version=config.model_version,
        )
    if cache is None:
        cache = build_cache(config)

    orchestrator = ValuationOrchestrator(
        provider,
        cache=cache,
        timeout=config.remote_timeout,
        max_retries=config.max_retries,
        backoff_seconds=config.backoff_seconds,
        cache_ttl=config.cache_ttl_seconds,
        fallback_mode=config.fallback_mode,
    )
    return AppraisalService(
        orchestrator,
        max_concurrent=config.bulk_concurrency,
        max_domains=config.bulk_limit,
        sort_field=config.sort_field,
    )
