"""DNS-based registration pre-check."""

from typing import Optional

import dns.exception
import dns.resolver


class DNSChecker:
    """Fast DNS lookup used before the slower WHOIS query."""

    def __init__(self, timeout: float = 3.0):
        self.timeout = timeout

    def is_unregistered(self, domain: str) -> Optional[bool]:
        """Guess registration from an A-record lookup.

        Returns:
            True: no such name in DNS, probably unregistered
            False: the name resolves (or exists without an A record)
            None: lookup timed out or failed
        """
        resolver = dns.resolver.Resolver()
        resolver.timeout = self.timeout
        resolver.lifetime = self.timeout

        try:
            resolver.resolve(domain, 'A')
            return False
        except dns.resolver.NXDOMAIN:
            return True
        except dns.resolver.NoAnswer:
            return False  # Exists, just no A record
        except dns.resolver.NoNameservers:
            return True
        except dns.exception.Timeout:
            return None
        except dns.exception.DNSException:
            return None
