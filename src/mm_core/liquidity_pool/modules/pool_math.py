"""
Constant-product helpers.

Pure functions over reserves; no pool state is touched here.
"""

import math


def calculate_k(reserve_a: float, reserve_b: float) -> float:
    """Constant product invariant k = a * b."""
    return reserve_a * reserve_b


def calculate_price_from_reserves(reserve_a: float, reserve_b: float) -> float:
    """Price of A in units of B; 0 for an empty A reserve."""
    return reserve_b / reserve_a if reserve_a > 0 else 0.0


def amount_out_for(amount_in_after_fee: float, reserve_in: float, reserve_out: float) -> float:
    k = calculate_k(reserve_in, reserve_out)
    return reserve_out - k / (reserve_in + amount_in_after_fee)


def amount_in_for(amount_out: float, reserve_in: float, reserve_out: float, fee: float) -> float:
    """Gross input needed for ``amount_out``; requires amount_out < reserve_out."""
    return reserve_in * amount_out / ((reserve_out - amount_out) * (1 - fee))


def estimate_slippage(amount_in: float, reserve_in: float, reserve_out: float,
                      fee: float = 0.003) -> float:
    """Relative gap between execution price and spot price for a swap."""
    amount_in_after_fee = amount_in * (1 - fee)
    amount_out = (reserve_out * amount_in_after_fee) / (reserve_in + amount_in_after_fee)
    spot_price = reserve_out / reserve_in
    execution_price = amount_out / amount_in
    return abs(execution_price - spot_price) / spot_price


def impermanent_loss(price_ratio: float) -> float:
    """LP value relative to holding, minus one, for a price move of ``price_ratio``."""
    if price_ratio <= 0:
        raise ValueError(f"price_ratio must be positive, got {price_ratio}")
    hold_value = (1 + price_ratio) / 2
    lp_value = math.sqrt(price_ratio)
    return lp_value / hold_value - 1
