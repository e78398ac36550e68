from .dns_checker import DNSChecker
from .whois_checker import WhoisChecker
from .tld_prober import TldProber, TldProbeResult

__all__ = ['DNSChecker', 'WhoisChecker', 'TldProber', 'TldProbeResult']
