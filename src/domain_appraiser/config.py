"""Configuration: YAML file first, environment variables on top."""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, List, Optional, Any

import yaml

from .errors import ConfigurationError
from .valuation.orchestrator import FALLBACK_MODES
from .valuation.service import SORT_FIELDS

DEFAULT_CONFIG_PATH = "config/config.yaml"

CACHE_BACKENDS = ('file', 'redis', 'none')

ENV_OVERRIDES = {
    'REPLICATE_API_TOKEN': 'api_token',
    'APPRAISER_REDIS_URL': 'redis_url',
    'APPRAISER_CACHE_BACKEND': 'cache_backend',
    'APPRAISER_FALLBACK_MODE': 'fallback_mode',
}


@dataclass
class AppraiserConfig:
    api_token: Optional[str] = None
    model_version: str = 'a925db842c707850e4ca7b7e86b217692b0353a9ca05eb028802c4a85db93843'
    remote_timeout: float = 5.0
    max_retries: int = 2
    backoff_seconds: float = 1.0
    fallback_mode: str = 'silent'

    cache_backend: str = 'file'
    cache_file: str = 'data/cache/valuations.json'
    cache_ttl_days: int = 7
    redis_url: Optional[str] = None

    bulk_concurrency: int = 3
    bulk_limit: int = 200
    sort_field: str = 'market_price'

    tld_probe_delay: float = 0.08
    tlds: List[str] = field(default_factory=lambda: [
        'com', 'net', 'org', 'io', 'ai', 'co', 'xyz', 'app', 'dev', 'tech'
    ])

    @property
    def cache_ttl_seconds(self) -> int:
        return self.cache_ttl_days * 24 * 60 * 60

    def validate(self) -> 'AppraiserConfig':
        if self.cache_backend not in CACHE_BACKENDS:
            raise ConfigurationError(f"cache_backend must be one of {CACHE_BACKENDS}")
        if self.fallback_mode not in FALLBACK_MODES:
            raise ConfigurationError(f"fallback_mode must be one of {FALLBACK_MODES}")
        if self.sort_field not in SORT_FIELDS:
            raise ConfigurationError(f"sort_field must be one of {SORT_FIELDS}")
        if self.cache_backend == 'redis' and not self.redis_url:
            raise ConfigurationError("cache_backend 'redis' needs redis_url")
        if self.max_retries < 0 or self.bulk_concurrency < 1 or self.bulk_limit < 1:
            raise ConfigurationError("retry and bulk limits must be positive")
        return self


def _read_yaml(config_path: str) -> Dict[str, Any]:
    config_file = Path(config_path)
    if not config_file.exists():
        return {}
    try:
        with open(config_file) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"cannot parse {config_path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"{config_path} must contain a mapping")
    return data


def load_config(config_path: str = DEFAULT_CONFIG_PATH, environ: Optional[Dict[str, str]] = None) -> AppraiserConfig:
    """Load configuration from YAML, then apply environment overrides."""
    environ = os.environ if environ is None else environ
    data = _read_yaml(config_path)

    known = {f.name for f in fields(AppraiserConfig)}
    unknown = set(data) - known
    if unknown:
        raise ConfigurationError(f"unknown config keys: {', '.join(sorted(unknown))}")

    for env_name, key in ENV_OVERRIDES.items():
        if environ.get(env_name):
            data[key] = environ[env_name]

    return AppraiserConfig(**data).validate()
