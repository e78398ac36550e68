"""Domain name cleanup and decomposition."""

import re
from typing import Tuple

DOMAIN_PATTERN = re.compile(r'^((?!-)[a-z0-9-]{1,63}(?<!-)\.)+[a-z]{2,63}$')
MAX_DOMAIN_LENGTH = 253


def clean_domain(raw: str) -> str:
    """Strip scheme, www prefix, paths and whitespace; lower-case the rest."""
    domain = raw.strip().lower()
    domain = re.sub(r'^https?://', '', domain)
    domain = re.sub(r'^www\.', '', domain)
    domain = re.sub(r'/.*$', '', domain)
    return domain


def is_valid_domain(domain: str) -> bool:
    if not domain or len(domain) > MAX_DOMAIN_LENGTH:
        return False
    return bool(DOMAIN_PATTERN.match(domain))


def split_domain(domain: str) -> Tuple[str, str]:
    """Split into (sld, tld); the TLD keeps every label after the first dot.

    A name without a dot comes back as (name, '').
    """
    domain = domain.lower()
    if '.' not in domain:
        return domain, ''
    sld, tld = domain.split('.', 1)
    return sld, tld


def cache_key(domain: str) -> str:
    return f"appraisal:{clean_domain(domain)}"


def estimate_word_count(sld: str) -> int:
    """Loose word count used in output rows."""
    if '-' in sld:
        return len(sld.split('-'))
    return max(1, int(len(sld) / 5 + 0.5))
