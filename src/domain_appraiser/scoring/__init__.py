from .brandability import BrandabilityScorer, BrandabilityScore, score_brandability
from .fallback_pricer import FallbackResult, FallbackSignals, calculate_fallback_price
from .radio import RadioTestResult, apply_radio_penalty, radio_test

__all__ = [
    'BrandabilityScorer', 'BrandabilityScore', 'score_brandability',
    'FallbackResult', 'FallbackSignals', 'calculate_fallback_price',
    'RadioTestResult', 'apply_radio_penalty', 'radio_test',
]
