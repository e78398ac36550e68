"""Letter-level helpers shared by the scorers."""

import re
from typing import Set

# 'y' counts as a vowel for phonetic flow, not for the simple vowel ratio
VOWELS = set('aeiou')
FLOW_VOWELS = set('aeiouy')
FLOW_CONSONANTS = set('bcdfghjklmnpqrstvwxz')

_REPEATED_CHAR = re.compile(r'(.)\1{2,}')


def count_vowels(word: str, vowels: Set[str] = VOWELS) -> int:
    return sum(1 for c in word if c in vowels)


def vowel_ratio(word: str, vowels: Set[str] = VOWELS) -> float:
    """Share of vowels in the word, 0.0 for an empty word."""
    if not word:
        return 0.0
    return count_vowels(word, vowels) / len(word)


def max_consonant_run(word: str, consonants: Set[str] = FLOW_CONSONANTS) -> int:
    """Length of the longest run of consecutive consonants."""
    longest = 0
    current = 0
    for c in word:
        if c in consonants:
            current += 1
            longest = max(longest, current)
        else:
            current = 0
    return longest


def cv_pattern(word: str) -> str:
    """Map each character to V (vowel), C (consonant) or ? (anything else)."""
    pattern = ''
    for c in word:
        if c in FLOW_VOWELS:
            pattern += 'V'
        elif c in FLOW_CONSONANTS:
            pattern += 'C'
        else:
            pattern += '?'
    return pattern


def has_repeated_char(word: str) -> bool:
    """True if any character appears three or more times in a row."""
    return bool(_REPEATED_CHAR.search(word))


def count_syllables(word: str) -> int:
    """Rough syllable estimate from vowel groups."""
    syllables = 0
    prev_is_vowel = False
    for c in word:
        is_vowel = c in FLOW_VOWELS
        if is_vowel and not prev_is_vowel:
            syllables += 1
        prev_is_vowel = is_vowel

    # Silent trailing 'e'
    if word.endswith('e') and syllables > 1:
        syllables -= 1
    return syllables
