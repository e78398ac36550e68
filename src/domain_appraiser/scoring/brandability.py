"""Brandability scoring - multi-signal linguistic quality of a name."""

import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, Tuple

from ..utils.domain import split_domain
from ..utils.phonetics import (
    FLOW_VOWELS,
    count_syllables,
    count_vowels,
    cv_pattern,
    has_repeated_char,
    max_consonant_run,
)

LABEL_THRESHOLDS = [
    (85, 'Premium'),
    (70, 'Strong'),
    (50, 'Average'),
    (30, 'Weak'),
]

LABELS = ('Poor', 'Weak', 'Average', 'Strong', 'Premium')


def label_for(score: int) -> str:
    """Label for an integer 0-100 score."""
    for threshold, label in LABEL_THRESHOLDS:
        if score >= threshold:
            return label
    return 'Poor'


@dataclass(frozen=True)
class BrandabilityScore:
    """Brandability result with raw per-signal scores."""
    domain: str
    score: int
    label: str
    breakdown: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'domain': self.domain,
            'score': self.score,
            'label': self.label,
            'breakdown': dict(self.breakdown),
        }


class BrandabilityScorer:
    """Rates how brandable the SLD of a domain is on a 0-100 scale."""

    DEFAULT_WEIGHTS = {
        'pronounceability': 0.30,
        'cv_pattern': 0.15,
        'language_likelihood': 0.20,
        'entropy': 0.10,
        'brand_similarity': 0.15,
        'length': 0.10,
    }

    # Raw clamp range of every signal
    RANGES: Dict[str, Tuple[int, int]] = {
        'pronounceability': (-40, 40),
        'cv_pattern': (-25, 25),
        'language_likelihood': (-35, 30),
        'entropy': (-30, 20),
        'brand_similarity': (-20, 30),
        'length': (-10, 15),
    }

    FAVORED_PATTERNS = ['CVCV', 'VCVC', 'CVCVC', 'CVVC', 'VCV']

    UNSEEN_BIGRAM_SCORE = -5

    # Frequency proxy for common English bigrams plus brandable onsets
    BIGRAM_SCORES = {
        'th': 30, 'he': 28, 'in': 25, 'er': 25, 'an': 24, 're': 21, 'on': 20,
        'at': 18, 'en': 18, 'nd': 17, 'ti': 16, 'es': 16, 'or': 15, 'te': 15,
        'of': 15, 'ed': 14, 'is': 14, 'it': 13, 'al': 13, 'ar': 12, 'st': 12,
        'to': 12, 'nt': 12, 'ng': 11, 'se': 11, 'ha': 11, 'as': 11, 'ou': 10,
        'io': 10, 'le': 10, 've': 10, 'co': 10, 'me': 10, 'de': 9, 'hi': 9,
        'ri': 9, 'ro': 9, 'ic': 9, 'ne': 8, 'ea': 8, 'ra': 8, 'ce': 8, 'li': 8,
        'ch': 8, 'll': 8, 'be': 7, 'ma': 7, 'si': 7, 'om': 7, 'ur': 7,
        'br': 8, 'pr': 8, 'tr': 8, 'cr': 8, 'gr': 8, 'pl': 7, 'cl': 7, 'bl': 7,
        'ph': 7, 'sh': 7, 'dr': 7, 'fr': 7, 'fl': 7, 'gl': 7, 'sp': 7, 'sw': 6,
        'tw': 6, 'vo': 6, 'iv': 6, 'di': 6, 'em': 6, 'ex': 6, 'un': 6, 'ad': 6,
        'ab': 6, 'ob': 6, 'up': 6, 'fy': 6, 'ly': 10, 'my': 5, 'ny': 5, 'vy': 5,
    }

    # Tokens shorter than three letters are kept for reference but never matched
    BRAND_TOKENS = (
        'ly', 'ify', 'hub', 'lab', 'box', 'pay', 'bet', 'air', 'pro', 'get',
        'net', 'sys', 'web', 'bit', 'bot', 'arc', 'ion', 'gen', 'pan', 'zo',
        'vox', 'tec', 'col', 'mid', 'way', 'fly', 'sky', 'key', 'pix', 'tex',
        'nex', 'hex', 'rex', 'max', 'fix', 'mix', 'q', 'z', 'x',
        'nova', 'terra', 'aero', 'dyn', 'soft', 'sol', 'log', 'dat', 'flow',
        'sync', 'host', 'cloud', 'star', 'blue', 'red', 'one', 'go', 'up',
        'brand', 'corp', 'inc', 'ltd', 'app', 'shop', 'store', 'mart', 'market',
        'trade', 'deal', 'sale', 'buy', 'sell', 'auto', 'car', 'home', 'house',
        'life', 'live', 'love', 'good', 'best', 'top', 'hot', 'new', 'now',
        'fun', 'joy', 'play', 'game', 'win', 'bet', 'spt', 'fit', 'run',
        'health', 'med', 'care', 'doc', 'law', 'legal', 'tax', 'money', 'cash',
        'fin', 'cap', 'vest', 'bank', 'coin', 'chain', 'block', 'token', 'crypt',
        'meta', 'verse', 'cyber', 'sec', 'safe', 'guard', 'lock', 'pass', 'id',
        'auth', 'login', 'user', 'admin', 'root', 'dev', 'code', 'git', 'api',
        'sdk', 'cli', 'gui', 'ux', 'ui', 'ai', 'ml', 'bot', 'rob', 'auto',
        'mech', 'eng', 'con', 'struct', 'build', 'create', 'make', 'do', 'work',
        'job', 'task', 'list', 'note', 'book', 'read', 'write', 'learn', 'edu',
        'sch', 'uni', 'col', 'acad', 'inst', 'tut', 'men', 'guid', 'lead',
        'dir', 'map', 'nav', 'loc', 'geo', 'pos', 'place', 'spot', 'zone',
        'area', 'reg', 'land', 'world', 'globe', 'earth', 'mars', 'moon', 'sun',
    )

    TECH_SUFFIXES = ('ly', 'ify', 'ai', 'io')

    def __init__(self, weights: Optional[Dict[str, float]] = None):
        self.weights = weights or self.DEFAULT_WEIGHTS

    def _clamp(self, signal: str, value: int) -> int:
        low, high = self.RANGES[signal]
        return max(low, min(high, value))

    def _score_pronounceability(self, word: str) -> int:
        score = 0
        length = len(word)
        vowel_count = count_vowels(word, FLOW_VOWELS)
        ratio = vowel_count / length if length else 0.0

        if 0.3 <= ratio <= 0.6:
            score += 15
        elif ratio < 0.2 or ratio > 0.8:
            score -= 10

        if vowel_count == 0:
            score -= 20

        longest_cluster = max_consonant_run(word)
        if longest_cluster > 3:
            score -= 15
        if longest_cluster > 4:
            score -= 25

        # Vowel/consonant alternation gives the name flow
        if length > 1:
            alternations = sum(
                1 for i in range(length - 1)
                if (word[i] in FLOW_VOWELS) != (word[i + 1] in FLOW_VOWELS)
            )
            if alternations / (length - 1) > 0.7:
                score += 15

        syllables = count_syllables(word)
        if 2 <= syllables <= 4:
            score += 10

        return self._clamp('pronounceability', score)

    def _score_cv_pattern(self, word: str) -> int:
        score = 0
        pattern = cv_pattern(word)

        # Favored shapes overlap, so only the first hit counts
        if any(p in pattern for p in self.FAVORED_PATTERNS):
            score += 10
        if pattern in self.FAVORED_PATTERNS:
            score += 15

        if 'CCCC' in pattern:
            score -= 15
        if 'VVVV' in pattern:
            score -= 10
        if has_repeated_char(word):
            score -= 10

        if pattern.count('C') > pattern.count('V') * 4:
            score -= 10

        return self._clamp('cv_pattern', score)

    def _score_language_likelihood(self, word: str) -> int:
        bigram_count = len(word) - 1
        if bigram_count > 0:
            total = sum(
                self.BIGRAM_SCORES.get(word[i:i + 2], self.UNSEEN_BIGRAM_SCORE)
                for i in range(bigram_count)
            )
            average = total / bigram_count
        else:
            average = 0.0

        if average > 15:
            score = 20  # very natural
        elif average > 5:
            score = 10  # natural
        elif average < -3:
            score = -30  # gibberish
        elif average < -2:
            score = -20  # unnatural
        else:
            score = -5  # slightly unnatural

        if average > 8:
            score += 10

        return self._clamp('language_likelihood', score)

    def _score_entropy(self, word: str) -> int:
        length = len(word)
        if not length:
            return 0
        entropy = 0.0
        for count in Counter(word).values():
            p = count / length
            entropy -= p * math.log2(p)

        score = 0
        # Random-looking strings
        if length < 8 and entropy > 2.8:
            score -= 20
        elif length >= 8 and entropy > 3.2:
            score -= 15

        # Repetitive strings
        if length > 5 and entropy < 1.5:
            score -= 10

        if 1.5 <= entropy <= 2.8:
            score += 20

        return self._clamp('entropy', score)

    def _score_brand_similarity(self, word: str) -> int:
        score = 0
        for token in self.BRAND_TOKENS:
            if len(token) < 3:
                continue
            if token in word:
                score += 10
                if word.startswith(token) or word.endswith(token):
                    score += 5

        if word.endswith(self.TECH_SUFFIXES):
            score += 10

        return self._clamp('brand_similarity', score)

    def _score_length(self, word: str) -> int:
        length = len(word)
        if 5 <= length <= 10:
            score = 15
        elif 4 <= length <= 12:
            score = 10
        elif 13 <= length <= 15:
            score = 0
        elif length > 15:
            score = -10
        else:
            score = -5
        return self._clamp('length', score)

    def _normalize(self, signal: str, value: int) -> float:
        low, high = self.RANGES[signal]
        return max(0.0, min(100.0, (value - low) / (high - low) * 100))

    def breakdown(self, word: str) -> Dict[str, int]:
        """Raw clamped score of every signal for a bare SLD."""
        return {
            'pronounceability': self._score_pronounceability(word),
            'cv_pattern': self._score_cv_pattern(word),
            'language_likelihood': self._score_language_likelihood(word),
            'entropy': self._score_entropy(word),
            'brand_similarity': self._score_brand_similarity(word),
            'length': self._score_length(word),
        }

    def score(self, domain: str) -> BrandabilityScore:
        """Score a domain (or bare name); only the SLD is considered."""
        word, _ = split_domain(domain)
        signals = self.breakdown(word)

        weighted = sum(
            self._normalize(name, value) * self.weights[name]
            for name, value in signals.items()
        )
        # Half-up rounding, then label off the rounded value
        final = max(0, min(100, int(math.floor(weighted + 0.5))))

        return BrandabilityScore(
            domain=domain,
            score=final,
            label=label_for(final),
            breakdown=signals,
        )

    def score_batch(self, domains: List[str]) -> List[BrandabilityScore]:
        return [self.score(domain) for domain in domains]

    def rank(self, domains: List[str], min_score: int = 0) -> List[BrandabilityScore]:
        """Score and rank domains by brandability."""
        scores = [s for s in self.score_batch(domains) if s.score >= min_score]
        scores.sort(key=lambda s: s.score, reverse=True)
        return scores


_default_scorer = BrandabilityScorer()


def score_brandability(domain: str) -> BrandabilityScore:
    return _default_scorer.score(domain)
