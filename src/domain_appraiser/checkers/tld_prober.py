"""Which extensions of a name are already registered?"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Any

from ..utils.domain import split_domain
from .dns_checker import DNSChecker
from .whois_checker import WhoisChecker

logger = logging.getLogger(__name__)

DEFAULT_TLDS = ['com', 'net', 'org', 'io', 'ai', 'co', 'xyz', 'app', 'dev', 'tech']


@dataclass
class TldProbeResult:
    """Registration status of one SLD across extensions."""
    sld: str
    registered_tlds: List[str] = field(default_factory=list)
    available_tlds: List[str] = field(default_factory=list)
    unknown_tlds: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sld': self.sld,
            'tlds_registered_count': len(self.registered_tlds),
            'registered_tlds': self.registered_tlds,
            'tlds_available_count': len(self.available_tlds),
            'available_tlds': self.available_tlds,
            'unknown_tlds': self.unknown_tlds,
        }


class TldProber:
    """Sequential per-extension probe with a fixed delay between requests."""

    def __init__(
        self,
        delay: float = 0.08,
        verify_with_whois: bool = True,
        dns_checker: Optional[DNSChecker] = None,
        whois_checker: Optional[WhoisChecker] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.delay = delay
        self.verify_with_whois = verify_with_whois
        self.dns_checker = dns_checker or DNSChecker()
        self.whois_checker = whois_checker or WhoisChecker()
        self._sleep = sleep

    def _probe_one(self, domain: str) -> Optional[bool]:
        """True if available, False if registered, None if unknown."""
        dns_result = self.dns_checker.is_unregistered(domain)
        if dns_result is False:
            return False
        if dns_result is True and self.verify_with_whois:
            return self.whois_checker.is_unregistered(domain)
        return dns_result

    def probe(
        self,
        domain: str,
        tlds: Optional[List[str]] = None,
        progress_callback=None
    ) -> TldProbeResult:
        """Probe the SLD of `domain` across `tlds` one extension at a time.

        Args:
            domain: a domain or bare name; only the SLD is used
            tlds: extensions to probe, defaults to DEFAULT_TLDS
            progress_callback: optional callback(current, total)
        """
        sld, _ = split_domain(domain)
        tlds = tlds or DEFAULT_TLDS
        result = TldProbeResult(sld=sld)

        for i, tld in enumerate(tlds):
            if i > 0:
                self._sleep(self.delay)

            candidate = f"{sld}.{tld}"
            try:
                available = self._probe_one(candidate)
            except Exception as e:
                logger.warning("Probe failed for %s: %s", candidate, e)
                available = None

            if available is True:
                result.available_tlds.append(tld)
            elif available is False:
                result.registered_tlds.append(tld)
            else:
                result.unknown_tlds.append(tld)

            if progress_callback:
                progress_callback(i + 1, len(tlds))

        return result
