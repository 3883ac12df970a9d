"""
Pool data types.
"""

from dataclasses import dataclass
from enum import Enum


class Token(str, Enum):
    A = "A"
    B = "B"

    @property
    def other(self) -> 'Token':
        return Token.B if self is Token.A else Token.A


@dataclass(frozen=True)
class PoolState:
    token_a_reserve: float
    token_b_reserve: float
    total_liquidity: float
    lp_token_supply: float
    fee: float
    last_update: float


@dataclass(frozen=True)
class SwapResult:
    amount_in: float
    amount_out: float
    price_impact: float
    fee: float  # fee amount, in units of the input token
    new_price: float
    amount_in_after_fee: float


@dataclass(frozen=True)
class AddLiquidityResult:
    lp_tokens_received: float
    token_a_deposited: float
    token_b_deposited: float
    share_of_pool: float


@dataclass(frozen=True)
class RemoveLiquidityResult:
    lp_tokens_burned: float
    token_a_received: float
    token_b_received: float
    fee: float = 0.0


@dataclass(frozen=True)
class LiquidityPosition:
    """Read-only projection of an LP holding onto the current reserves"""
    lp_tokens: float
    share_of_pool: float
    token_a_amount: float
    token_b_amount: float
    entry_price: float
    current_value: float
    impermanent_loss: float
