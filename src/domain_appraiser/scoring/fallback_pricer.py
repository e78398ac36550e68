"""Deterministic local pricing used when no remote estimate is available.

The price is a plain sum of six signals:

1. Base score from SLD length
2. TLD score
3. Commercial keyword bonus
4. Digit / hyphen penalties
5. Pronounceability bonus (vowel ratio)
6. Structure bonus (estimated word count)

and is never lower than ``PRICE_FLOOR``.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional

from ..utils.domain import split_domain
from ..utils.phonetics import vowel_ratio

PRICE_FLOOR = 20

LENGTH_BANDS = [
    (7, 120),
    (10, 80),
    (14, 50),
]
LONG_NAME_BASE = 25

TLD_SCORES = {
    'com': 150,
    'ai': 70,
    'io': 60,
}
DEFAULT_TLD_SCORE = 25

# Order matters: the first keyword found wins
COMMERCIAL_KEYWORDS = [
    'pay', 'shop', 'cash', 'market', 'tech', 'coin', 'ai', 'data', 'cloud', 'host', 'app', 'web'
]
KEYWORD_BONUS = 90

DIGIT_PENALTY = -40
HYPHEN_PENALTY = -25
PRONOUNCE_BONUS = 20
PRONOUNCE_RATIO = 0.30
STRUCTURE_BONUS = 20


@dataclass(frozen=True)
class FallbackSignals:
    length: int
    tld: str
    keyword_detected: Optional[str]
    penalty: int
    pronounce_bonus: int
    structure_bonus: int


@dataclass(frozen=True)
class FallbackResult:
    """Local price with the signals that produced it."""
    domain: str
    fallback_price: int
    signals: FallbackSignals

    def to_dict(self) -> Dict[str, Any]:
        return {
            'domain': self.domain,
            'fallback_price': self.fallback_price,
            'signals': asdict(self.signals),
        }


def _base_score(length: int) -> int:
    for limit, score in LENGTH_BANDS:
        if length < limit:
            return score
    return LONG_NAME_BASE


def _detect_keyword(name: str) -> Optional[str]:
    for keyword in COMMERCIAL_KEYWORDS:
        if keyword in name:
            return keyword
    return None


def _estimate_word_count(name: str) -> int:
    if '-' in name:
        return len(name.split('-'))
    return 1 if len(name) <= 10 else 2


def calculate_fallback_price(domain: str) -> FallbackResult:
    """Price a domain from its name alone."""
    if '.' not in domain:
        # Malformed input gets the floor price, not an error
        return FallbackResult(
            domain=domain,
            fallback_price=PRICE_FLOOR,
            signals=FallbackSignals(
                length=len(domain),
                tld='',
                keyword_detected=None,
                penalty=0,
                pronounce_bonus=0,
                structure_bonus=0,
            ),
        )

    name, tld = split_domain(domain)
    length = len(name)

    base = _base_score(length)
    tld_score = TLD_SCORES.get(tld, DEFAULT_TLD_SCORE)

    keyword = _detect_keyword(name)
    keyword_bonus = KEYWORD_BONUS if keyword else 0

    penalty = 0
    if any(c.isdigit() for c in name):
        penalty += DIGIT_PENALTY
    if '-' in name:
        penalty += HYPHEN_PENALTY

    pronounce_bonus = PRONOUNCE_BONUS if length and vowel_ratio(name) > PRONOUNCE_RATIO else 0
    structure_bonus = STRUCTURE_BONUS if _estimate_word_count(name) <= 2 else 0

    raw_price = base + tld_score + keyword_bonus + penalty + pronounce_bonus + structure_bonus

    return FallbackResult(
        domain=domain,
        fallback_price=max(PRICE_FLOOR, raw_price),
        signals=FallbackSignals(
            length=length,
            tld=tld,
            keyword_detected=keyword,
            penalty=penalty,
            pronounce_bonus=pronounce_bonus,
            structure_bonus=structure_bonus,
        ),
    )
