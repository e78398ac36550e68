"""In-memory stand-ins for the provider, cache and sleep."""

import asyncio
from datetime import timedelta

from domain_appraiser.errors import CacheError


TIERED_PAYLOAD = {
    "valuations": [
        {"domain": "example.com", "auction": 150, "marketplace": 1000, "brokerage": 400}
    ]
}


class FakeProvider:
    """Remote provider that replays a script of payloads and exceptions."""

    def __init__(self, *outcomes, default=TIERED_PAYLOAD, delay: float = 0.0):
        self.outcomes = list(outcomes)
        self.default = default
        self.delay = delay
        self.calls = []

    async def predict(self, domain):
        self.calls.append(domain)
        if self.delay:
            await asyncio.sleep(self.delay)
        outcome = self.outcomes.pop(0) if self.outcomes else self.default
        if isinstance(outcome, BaseException):
            raise outcome
        if callable(outcome):
            return outcome(domain)
        return outcome


class FakeCache:
    """In-memory cache recording every write."""

    def __init__(self, entries=None, fail_reads: bool = False, fail_writes: bool = False):
        self.entries = dict(entries or {})
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.writes = []

    async def get(self, key):
        if self.fail_reads:
            raise CacheError("cache unreachable")
        return self.entries.get(key)

    async def set(self, key, value, ttl_seconds):
        if self.fail_writes:
            raise CacheError("cache unreachable")
        self.writes.append((key, value, ttl_seconds))
        self.entries[key] = value


class RecordingSleep:
    """Async sleep replacement that only records requested delays."""

    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


class FakeClock:
    """Settable clock for expiry tests."""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)
