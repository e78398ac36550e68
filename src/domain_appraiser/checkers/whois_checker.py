"""WHOIS confirmation of registration status."""

import logging
import time
from typing import Callable, Optional

import whois
from whois.exceptions import WhoisDomainNotFoundError

from ..errors import RATE_LIMIT_PATTERNS, matches_any

logger = logging.getLogger(__name__)


class WhoisChecker:
    """WHOIS lookups with one backoff retry when the server throttles us."""

    NOT_FOUND_PATTERNS = ['no match', 'not found', 'no entries', 'available', 'domain not found']
    REGISTERED_PATTERNS = ['registered', 'exists']

    def __init__(
        self,
        backoff_delay: float = 5.0,
        lookup: Callable = whois.whois,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.backoff_delay = backoff_delay
        self._lookup = lookup
        self._sleep = sleep

    def is_unregistered(self, domain: str, retry: bool = True) -> Optional[bool]:
        """True if WHOIS has no record, False if registered, None if unknown."""
        try:
            record = self._lookup(domain)
        except WhoisDomainNotFoundError:
            return True
        except Exception as e:
            error_msg = str(e).lower()

            if matches_any(error_msg, RATE_LIMIT_PATTERNS):
                if retry:
                    logger.debug("WHOIS throttled for %s, backing off %.1fs", domain, self.backoff_delay)
                    self._sleep(self.backoff_delay)
                    return self.is_unregistered(domain, retry=False)
                return None

            if any(p in error_msg for p in self.NOT_FOUND_PATTERNS):
                return True
            if any(p in error_msg for p in self.REGISTERED_PATTERNS):
                return False

            logger.debug("WHOIS lookup for %s failed: %s", domain, e)
            return None

        return getattr(record, 'domain_name', None) is None
