"""
Tests for DNS/WHOIS registration checks and the TLD prober.
"""

from types import SimpleNamespace

import dns.exception
import dns.resolver
import pytest
from whois.exceptions import WhoisDomainNotFoundError

from domain_appraiser.checkers.dns_checker import DNSChecker
from domain_appraiser.checkers.tld_prober import DEFAULT_TLDS, TldProber
from domain_appraiser.checkers.whois_checker import WhoisChecker


class ScriptedChecker:
    """Checker returning a fixed answer per domain."""

    def __init__(self, answers, default=None):
        self.answers = answers
        self.default = default
        self.calls = []

    def is_unregistered(self, domain):
        self.calls.append(domain)
        answer = self.answers.get(domain, self.default)
        if isinstance(answer, Exception):
            raise answer
        return answer


class TestDNSChecker:
    """Tests for DNSChecker with a patched resolver."""

    @pytest.mark.parametrize(
        "raised,expected",
        [
            (None, False),
            (dns.resolver.NXDOMAIN(), True),
            (dns.resolver.NoNameservers(), True),
            (dns.resolver.NoAnswer(), False),
            (dns.exception.Timeout(), None),
            (dns.exception.DNSException(), None),
        ],
    )
    def test_lookup_outcomes(self, monkeypatch, raised, expected):
        class FakeResolver:
            def resolve(self, name, rdtype):
                if raised is not None:
                    raise raised
                return ["93.184.216.34"]

        monkeypatch.setattr(dns.resolver, "Resolver", FakeResolver)
        assert DNSChecker(timeout=0.1).is_unregistered("example.com") is expected


class TestWhoisChecker:
    """Tests for WhoisChecker with an injected lookup."""

    def test_not_found_exception(self):
        def lookup(domain):
            raise WhoisDomainNotFoundError("No match for domain")

        assert WhoisChecker(lookup=lookup).is_unregistered("zzqq.com") is True

    def test_record_without_name_is_unregistered(self):
        checker = WhoisChecker(lookup=lambda d: SimpleNamespace(domain_name=None))
        assert checker.is_unregistered("zzqq.com") is True

    def test_record_with_name_is_registered(self):
        checker = WhoisChecker(lookup=lambda d: SimpleNamespace(domain_name="EXAMPLE.COM"))
        assert checker.is_unregistered("example.com") is False

    def test_rate_limit_retries_once(self):
        sleeps = []
        attempts = []

        def lookup(domain):
            attempts.append(domain)
            raise Exception("Rate limit exceeded, try again later")

        checker = WhoisChecker(backoff_delay=5.0, lookup=lookup, sleep=sleeps.append)

        assert checker.is_unregistered("example.com") is None
        assert len(attempts) == 2
        assert sleeps == [5.0]

    @pytest.mark.parametrize(
        "message,expected",
        [
            ("No entries found", True),
            ("Domain is already registered", False),
            ("socket closed", None),
        ],
    )
    def test_error_text_classification(self, message, expected):
        def lookup(domain):
            raise Exception(message)

        assert WhoisChecker(lookup=lookup).is_unregistered("example.com") is expected


class TestTldProber:
    """Tests for the sequential TLD prober."""

    def make_prober(self, dns_answers, whois_answers=None, verify=True):
        sleeps = []
        prober = TldProber(
            delay=0.08,
            verify_with_whois=verify,
            dns_checker=ScriptedChecker(dns_answers),
            whois_checker=ScriptedChecker(whois_answers or {}),
            sleep=sleeps.append,
        )
        return prober, sleeps

    def test_classifies_each_tld(self):
        prober, _ = self.make_prober(
            dns_answers={
                "zorvana.com": False,
                "zorvana.io": True,
                "zorvana.ai": True,
                "zorvana.net": None,
            },
            whois_answers={"zorvana.io": True, "zorvana.ai": False},
        )

        result = prober.probe("zorvana.com", tlds=["com", "io", "ai", "net"])

        assert result.sld == "zorvana"
        assert result.registered_tlds == ["com", "ai"]
        assert result.available_tlds == ["io"]
        assert result.unknown_tlds == ["net"]
        assert result.to_dict()["tlds_registered_count"] == 2

    def test_registered_by_dns_skips_whois(self):
        prober, _ = self.make_prober(dns_answers={"taken.com": False})
        prober.probe("taken", tlds=["com"])
        assert prober.whois_checker.calls == []

    def test_no_whois_verification(self):
        prober, _ = self.make_prober(dns_answers={"free.io": True}, verify=False)
        result = prober.probe("free", tlds=["io"])
        assert result.available_tlds == ["io"]
        assert prober.whois_checker.calls == []

    def test_sleeps_between_probes_only(self):
        prober, sleeps = self.make_prober(dns_answers={})
        prober.probe("name", tlds=["com", "io", "ai"])
        assert sleeps == [0.08, 0.08]

    def test_checker_exception_is_unknown(self):
        prober, _ = self.make_prober(dns_answers={"name.com": RuntimeError("resolver died")})
        result = prober.probe("name", tlds=["com"])
        assert result.unknown_tlds == ["com"]

    def test_defaults_and_progress(self):
        prober, _ = self.make_prober(dns_answers={})
        progress = []

        result = prober.probe("name.com", progress_callback=lambda i, n: progress.append((i, n)))

        assert len(result.unknown_tlds) == len(DEFAULT_TLDS)
        assert progress[-1] == (len(DEFAULT_TLDS), len(DEFAULT_TLDS))
