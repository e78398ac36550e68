from .cache import JsonFileCache, RedisCache
from .domain import clean_domain, is_valid_domain, split_domain

__all__ = ['JsonFileCache', 'RedisCache', 'clean_domain', 'is_valid_domain', 'split_domain']
