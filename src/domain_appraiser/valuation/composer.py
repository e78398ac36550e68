"""Turn a valuation plus brand quality into liquidity / market / buy-now prices."""

import math
from typing import Union

from ..scoring.brandability import BrandabilityScore
from ..scoring.fallback_pricer import FallbackResult
from .models import PriceTiers, ValuationResult

# Monotonic in label order: better brands sell for more
BRAND_MULTIPLIERS = {
    'Poor': 0.85,
    'Weak': 0.92,
    'Average': 1.00,
    'Strong': 1.05,
    'Premium': 1.18,
}

# Weights when the provider returned granular tiers
MARKETPLACE_WEIGHT = 0.7
BROKERAGE_WEIGHT = 0.3
TIERED_BUY_NOW_FACTOR = 1.18

# Ratios when only a single value is known
SCALAR_LIQUIDITY_FACTOR = 0.6
SCALAR_BUY_NOW_FACTOR = 1.5


def brand_multiplier(brand: Union[BrandabilityScore, str]) -> float:
    """Multiplier for a brandability result or bare label."""
    label = brand if isinstance(brand, str) else brand.label
    return BRAND_MULTIPLIERS[label]


def round_price(value: float) -> int:
    """Round half-up and clamp at zero."""
    return max(0, int(math.floor(value + 0.5)))


def compose_prices(
    valuation: Union[ValuationResult, FallbackResult],
    multiplier: float = 1.0
) -> PriceTiers:
    """Derive the three price tiers from one valuation."""
    tiers = getattr(valuation, 'tiers', None)

    if tiers is not None:
        liquidity = round_price(tiers.auction * multiplier)
        market = round_price(
            (MARKETPLACE_WEIGHT * tiers.marketplace + BROKERAGE_WEIGHT * tiers.brokerage) * multiplier
        )
        buy_now = round_price(market * TIERED_BUY_NOW_FACTOR)
    else:
        if isinstance(valuation, FallbackResult):
            value = valuation.fallback_price
        else:
            value = valuation.value
        market = round_price(value * multiplier)
        liquidity = round_price(market * SCALAR_LIQUIDITY_FACTOR)
        buy_now = round_price(market * SCALAR_BUY_NOW_FACTOR)

    return PriceTiers(
        liquidity_price=liquidity,
        market_price=market,
        buy_now_price=buy_now,
    )
