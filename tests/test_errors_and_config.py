"""
Tests for error classification and configuration loading.
"""

import asyncio

import pytest

from domain_appraiser.config import AppraiserConfig, load_config
from domain_appraiser.errors import (
    BillingError,
    ConfigurationError,
    InvalidRequestError,
    RateLimitError,
    RemoteServiceError,
    RemoteTimeoutError,
    TransportError,
    ValidationError,
    describe_error,
    is_retryable,
    matches_any,
)
from domain_appraiser.factory import build_cache, build_service
from domain_appraiser.utils.cache import JsonFileCache, RedisCache


# =============================================================================
# Errors
# =============================================================================


class TestIsRetryable:
    """Tests for retry classification."""

    @pytest.mark.parametrize(
        "exc",
        [
            RateLimitError("429"),
            TransportError("reset"),
            RemoteTimeoutError("slow"),
            RuntimeError("Too Many Requests"),
            RuntimeError("read timed out"),
            TimeoutError(),
        ],
    )
    def test_retryable(self, exc):
        assert is_retryable(exc)

    @pytest.mark.parametrize(
        "exc",
        [
            BillingError("402"),
            RemoteServiceError("HTTP 500"),
            ValidationError("bad payload"),
            ValueError("nope"),
            RuntimeError("lookup failed for shop4290.com"),
            RuntimeError("order 14021 rejected"),
        ],
    )
    def test_not_retryable(self, exc):
        assert not is_retryable(exc)


class TestDescribeError:
    """Tests for user-facing error descriptions."""

    @pytest.mark.parametrize(
        "exc,code",
        [
            (BillingError("x"), "INSUFFICIENT_CREDIT"),
            (RuntimeError("Insufficient credit on account"), "INSUFFICIENT_CREDIT"),
            (RuntimeError("HTTP 429"), "RATE_LIMITED"),
            (RuntimeError("request timed out"), "UPSTREAM_TIMEOUT"),
            (RuntimeError("422 Unprocessable Entity"), "UNPROCESSABLE_DOMAIN"),
            (RemoteServiceError("HTTP 503"), "TECHNICAL_ERROR"),
            (ValueError("weird"), "TECHNICAL_ERROR"),
            (RuntimeError("no model output for a4220.io"), "TECHNICAL_ERROR"),
            (RuntimeError("status=429"), "RATE_LIMITED"),
        ],
    )
    def test_codes(self, exc, code):
        assert describe_error(exc, "example.com")[0] == code

    def test_message_hides_upstream_text(self):
        exc = RuntimeError("Traceback: POST https://api.replicate.com/v1/predictions token=r8_secret")
        code, message = describe_error(exc, "example.com")
        assert "replicate" not in message
        assert "r8_secret" not in message
        assert "example.com" in message

    def test_status_codes_match_as_whole_words(self):
        assert matches_any("HTTP 429 Too Many", ["429"])
        assert matches_any("Error: 402", ["402"])
        assert not matches_any("shop4290.com", ["429"])
        assert not matches_any("x1402y", ["402"])
        assert matches_any("Quota Exceeded", ["quota exceeded"])

    def test_invalid_request_keeps_detail(self):
        code, message = describe_error(InvalidRequestError("maximum 200 domains"))
        assert code == "INVALID_REQUEST"
        assert "maximum 200 domains" in message


# =============================================================================
# Configuration
# =============================================================================


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(str(tmp_path / "absent.yaml"), environ={})
        assert config == AppraiserConfig()
        assert config.cache_ttl_seconds == 7 * 24 * 60 * 60
        assert config.bulk_concurrency == 3
        assert config.bulk_limit == 200

    def test_yaml_then_env(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("max_retries: 4\ncache_backend: none\nfallback_mode: silent\n")

        config = load_config(
            str(path),
            environ={"REPLICATE_API_TOKEN": "r8_env", "APPRAISER_FALLBACK_MODE": "surface"},
        )

        assert config.max_retries == 4
        assert config.cache_backend == "none"
        assert config.api_token == "r8_env"
        assert config.fallback_mode == "surface"

    @pytest.mark.parametrize(
        "content",
        [
            "cache_backend: memcached\n",
            "fallback_mode: loud\n",
            "sort_field: domain\n",
            "cache_backend: redis\n",
            "no_such_key: 1\n",
            "- just\n- a list\n",
            "max_retries: [\n",
        ],
    )
    def test_bad_config_raises(self, tmp_path, content):
        path = tmp_path / "config.yaml"
        path.write_text(content)
        with pytest.raises(ConfigurationError):
            load_config(str(path), environ={})


class TestFactory:
    """Tests for wiring services from configuration."""

    def test_build_cache_backends(self, tmp_path):
        assert build_cache(AppraiserConfig(cache_backend="none")) is None
        assert isinstance(
            build_cache(AppraiserConfig(cache_file=str(tmp_path / "c.json"))), JsonFileCache
        )
        redis_cache = build_cache(AppraiserConfig(cache_backend="redis", redis_url="redis://localhost:6379/0"))
        assert isinstance(redis_cache, RedisCache)

    def test_missing_token_fails_before_work(self):
        with pytest.raises(ConfigurationError):
            build_service(AppraiserConfig(api_token=None, cache_backend="none"))

    def test_service_uses_config(self):
        service = build_service(
            AppraiserConfig(api_token="r8_test", cache_backend="none", max_retries=5, bulk_limit=10)
        )
        try:
            assert service.orchestrator.max_retries == 5
            assert service.max_domains == 10
        finally:
            asyncio.run(service.aclose())
