"""Value types passed between the orchestrator, composer and service."""

import json
from dataclasses import dataclass, asdict, field
from typing import Any, Dict, Optional

SOURCE_REMOTE = 'remote'
SOURCE_LOCAL = 'local'
SOURCES = (SOURCE_REMOTE, SOURCE_LOCAL)

CONFIDENCE_HIGH = 'High'
CONFIDENCE_MEDIUM = 'Medium'


@dataclass(frozen=True)
class ValuationTiers:
    """Granular auction / marketplace / brokerage estimates."""
    auction: float
    marketplace: float
    brokerage: float


@dataclass(frozen=True)
class ValuationResult:
    """One domain's valuation, remote or local."""
    source: str
    value: float
    confidence: str
    raw: Any = None
    tiers: Optional[ValuationTiers] = None
    cached: bool = field(default=False, compare=False)

    def to_json(self) -> str:
        data = {
            'source': self.source,
            'value': self.value,
            'confidence': self.confidence,
            'raw': self.raw,
            'tiers': asdict(self.tiers) if self.tiers else None,
        }
        return json.dumps(data, default=str)

    @classmethod
    def from_cache(cls, payload: Any) -> Optional['ValuationResult']:
        """Rebuild a cached result; None if the entry is not well-formed."""
        if isinstance(payload, (bytes, str)):
            try:
                payload = json.loads(payload)
            except ValueError:
                return None
        if not isinstance(payload, dict):
            return None

        value = payload.get('value')
        source = payload.get('source')
        if not is_number(value) or value < 0 or source not in SOURCES:
            return None

        tiers = None
        raw_tiers = payload.get('tiers')
        if isinstance(raw_tiers, dict) and all(
            is_number(raw_tiers.get(k)) for k in ('auction', 'marketplace', 'brokerage')
        ):
            tiers = ValuationTiers(
                auction=raw_tiers['auction'],
                marketplace=raw_tiers['marketplace'],
                brokerage=raw_tiers['brokerage'],
            )

        return cls(
            source=source,
            value=value,
            confidence=payload.get('confidence') or CONFIDENCE_MEDIUM,
            raw=payload.get('raw'),
            tiers=tiers,
            cached=True,
        )


@dataclass(frozen=True)
class PriceTiers:
    liquidity_price: int
    market_price: int
    buy_now_price: int

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


def is_number(value: Any) -> bool:
    # bool is an int subclass but never a price
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value == value
