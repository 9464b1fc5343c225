"""
Fixed-point scaling between human amounts and on-chain integers.

Ostium stores USDC with 6 decimals, prices with 18, leverage and slippage
with 2 (100x leverage = 10000, 2% slippage = 200). Scaling truncates toward
zero and never raises: out-of-range inputs saturate at the target bounds, so
callers must validate ranges before scaling.
"""

import math
from decimal import Decimal, InvalidOperation, ROUND_DOWN

USDC_DECIMALS = 6
PRICE_DECIMALS = 18
LEVERAGE_DECIMALS = 2
SLIPPAGE_DECIMALS = 2

MIN_LEVERAGE = 2.0
MAX_LEVERAGE = 1000.0
MAX_SLIPPAGE = 100.0
DEFAULT_SLIPPAGE = 2.0

MAX_UINT16 = 2 ** 16 - 1
MAX_UINT32 = 2 ** 32 - 1
MAX_UINT64 = 2 ** 64 - 1
MAX_UINT192 = 2 ** 192 - 1
MAX_UINT256 = 2 ** 256 - 1


def scale_to_decimals(value: float, decimals: int, max_value: int = MAX_UINT256) -> int:
    """
    Multiply ``value`` by ``10**decimals`` and truncate to an unsigned integer.

    The multiplication is done on the decimal string form of ``value`` so
    ``scale_to_decimals(0.1, 6)`` is exactly 100000 rather than the float
    product. Results above ``max_value`` saturate to it; negative and NaN
    inputs saturate to 0.
    """
    if isinstance(value, float):
        if math.isnan(value):
            return 0
        if math.isinf(value):
            return max_value if value > 0 else 0

    try:
        scaled = (Decimal(str(value)) * (Decimal(10) ** decimals)).to_integral_value(rounding=ROUND_DOWN)
    except InvalidOperation:
        return 0

    if scaled <= 0:
        return 0
    if scaled >= max_value:
        return max_value
    return int(scaled)


def unscale_from_decimals(value: int, decimals: int) -> float:
    """Divide an on-chain integer by ``10**decimals``, clamping it to the uint256 range."""
    clamped = min(max(int(value), 0), MAX_UINT256)
    return clamped / 10 ** decimals


def to_uint192(value: int) -> int:
    """Keep the low 192 bits (prices are uint192 on-chain)."""
    return int(value) & MAX_UINT192


def scale_usdc(amount: float) -> int:
    """100 USDC -> 100_000_000"""
    return scale_to_decimals(amount, USDC_DECIMALS)


def unscale_usdc(value: int) -> float:
    return unscale_from_decimals(value, USDC_DECIMALS)


def scale_price(price: float) -> int:
    """Scale a price to 18 decimals"""
    return scale_to_decimals(price, PRICE_DECIMALS)


def unscale_price(value: int) -> float:
    return unscale_from_decimals(value, PRICE_DECIMALS)


def scale_leverage(leverage: float) -> int:
    """100x -> 10000 (uint32)"""
    return scale_to_decimals(leverage, LEVERAGE_DECIMALS, max_value=MAX_UINT32)


def unscale_leverage(value: int) -> float:
    return unscale_from_decimals(value, LEVERAGE_DECIMALS)


def scale_slippage(slippage_percent: float) -> int:
    """2% -> 200 (uint16)"""
    return scale_to_decimals(slippage_percent, SLIPPAGE_DECIMALS, max_value=MAX_UINT16)
