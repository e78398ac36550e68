"""Radio test - would the name survive being read out loud?"""

import math
from dataclasses import dataclass
from typing import Optional

from ..utils.domain import split_domain
from ..utils.phonetics import VOWELS
from .fallback_pricer import PRICE_FLOOR

MAX_LENGTH = 25
MAX_CONSONANT_RUN = 5
MIN_VOWEL_RATIO = 0.15
PENALTY_FACTOR = 0.35


@dataclass(frozen=True)
class RadioTestResult:
    flagged: bool
    reason: Optional[str] = None


def radio_test(domain: str) -> RadioTestResult:
    """Flag gibberish: overlong names, long consonant runs, almost no vowels."""
    name, _ = split_domain(domain)

    if len(name) > MAX_LENGTH:
        return RadioTestResult(True, 'excessive_length')

    # Digits and hyphens break a consonant run
    run = 0
    for c in name:
        if c == '-' or c.isdigit():
            run = 0
        elif c not in VOWELS:
            run += 1
            if run > MAX_CONSONANT_RUN:
                return RadioTestResult(True, 'consecutive_consonants')
        else:
            run = 0

    letters = [c for c in name if 'a' <= c <= 'z']
    vowel_count = sum(1 for c in letters if c in VOWELS)
    if len(letters) > 3 and vowel_count / len(letters) < MIN_VOWEL_RATIO:
        return RadioTestResult(True, 'low_vowel_ratio')

    return RadioTestResult(False)


def apply_radio_penalty(price: int, result: RadioTestResult) -> int:
    """Cut a flagged name's price to 35%, rounded half-up, never below the floor."""
    if not result.flagged:
        return price
    return max(PRICE_FLOOR, int(math.floor(price * PENALTY_FACTOR + 0.5)))
