"""
Tests for domain helpers, phonetics and the radio test.
"""

import pytest

from domain_appraiser.scoring.radio import RadioTestResult, apply_radio_penalty, radio_test
from domain_appraiser.utils.domain import (
    cache_key,
    clean_domain,
    estimate_word_count,
    is_valid_domain,
    split_domain,
)
from domain_appraiser.utils.phonetics import (
    count_syllables,
    cv_pattern,
    has_repeated_char,
    max_consonant_run,
    vowel_ratio,
)


class TestDomainHelpers:
    """Tests for domain cleanup and decomposition."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("  Example.COM ", "example.com"),
            ("https://www.example.com/path?q=1", "example.com"),
            ("http://shop.example.co.uk/", "shop.example.co.uk"),
        ],
    )
    def test_clean_domain(self, raw, expected):
        assert clean_domain(raw) == expected

    def test_split_domain(self):
        assert split_domain("Startup.IO") == ("startup", "io")
        assert split_domain("name.co.uk") == ("name", "co.uk")
        assert split_domain("localhost") == ("localhost", "")

    def test_is_valid_domain(self):
        assert is_valid_domain("example.com")
        assert is_valid_domain("my-site.co.uk")
        assert not is_valid_domain("-bad.com")
        assert not is_valid_domain("nodot")
        assert not is_valid_domain("")
        assert not is_valid_domain("a" * 250 + ".com")

    def test_cache_key_normalizes(self):
        assert cache_key("HTTPS://Example.com") == "appraisal:example.com"

    @pytest.mark.parametrize(
        "sld,expected",
        [("go", 1), ("startup", 1), ("brightcloud", 2), ("superlongbrandname", 4), ("a-b-c", 3)],
    )
    def test_estimate_word_count(self, sld, expected):
        assert estimate_word_count(sld) == expected


class TestPhonetics:
    """Tests for letter-level helpers."""

    def test_vowel_ratio(self):
        assert vowel_ratio("") == 0.0
        assert vowel_ratio("abab") == 0.5

    def test_y_breaks_consonant_runs(self):
        assert max_consonant_run("strength") == 4
        assert max_consonant_run("rhythm") == 3

    def test_cv_pattern(self):
        assert cv_pattern("nova") == "CVCV"
        assert cv_pattern("a1") == "V?"

    def test_repeated_char(self):
        assert has_repeated_char("zzzap")
        assert not has_repeated_char("zzap")

    def test_count_syllables(self):
        assert count_syllables("banana") == 3
        assert count_syllables("make") == 1
        assert count_syllables("the") == 1


class TestRadioTest:
    """Tests for radio_test."""

    def test_clean_name_passes(self):
        result = radio_test("zorvana.com")
        assert not result.flagged
        assert result.reason is None

    def test_overlong_name(self):
        assert radio_test("a" * 26 + ".com").reason == "excessive_length"

    def test_consonant_run(self):
        assert radio_test("xkcdqwrtz.com").reason == "consecutive_consonants"

    def test_digits_reset_consonant_run(self):
        # two runs of five, split by a digit
        assert radio_test("bcdfg1hjklm.com").reason == "low_vowel_ratio"

    def test_low_vowel_ratio(self):
        assert radio_test("bcdfagh.com").reason == "low_vowel_ratio"

    def test_penalty_only_applies_when_flagged(self):
        assert apply_radio_penalty(220, radio_test("bcdfghjklm.com")) == 77
        assert apply_radio_penalty(220, radio_test("zorvana.com")) == 220
        assert apply_radio_penalty(40, RadioTestResult(True, "low_vowel_ratio")) == 20
