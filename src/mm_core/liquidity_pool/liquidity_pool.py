"""
File: liquidity_pool.py
Constant-product AMM pool with LP share accounting.

Independent of the quoting and inventory state: the coordinator only
proxies calls into it.
"""

import math
from typing import Optional, Tuple, Union
import logging

from utils.clock import SystemClock

from .modules.exceptions import (
    AlreadyInitializedError,
    InitialLiquidityTooLowError,
    InsufficientLiquidityError,
    InvalidAmountError,
    InvalidFeeError,
    InvalidLpAmountError,
    SlippageExceededError,
)
from .modules.pool_math import (
    amount_in_for,
    amount_out_for,
    calculate_k,
    calculate_price_from_reserves,
    impermanent_loss,
)
from .modules.pool_types import (
    AddLiquidityResult,
    LiquidityPosition,
    PoolState,
    RemoveLiquidityResult,
    SwapResult,
    Token,
)

logger = logging.getLogger(__name__)

DEFAULT_POOL_FEE = 0.003
# Burned from the first deposit so the LP supply can never be drained to dust
MINIMUM_LIQUIDITY = 1000
# Absolute gap between the provided and pool B/A ratios below which a deposit
# needs no balancing swap
RATIO_TOLERANCE = 0.001

TokenLike = Union[Token, str]


def _token(value: TokenLike) -> Token:
    try:
        return Token(value)
    except ValueError:
        raise ValueError(f"Unknown token: {value!r}, expected 'A' or 'B'") from None


def _validate_fee(fee: float) -> float:
    if not 0 <= fee < 1:
        raise InvalidFeeError(f"Fee must be between 0 and 1, got {fee}")
    return fee


class LiquidityPool:
    """Two-token constant-product pool (x * y = k)"""

    def __init__(self, fee: float = DEFAULT_POOL_FEE, clock=None):
        self.fee = _validate_fee(fee)
        self.clock = clock if clock is not None else SystemClock()
        self.token_a_reserve = 0.0
        self.token_b_reserve = 0.0
        self.lp_token_supply = 0.0
        self.last_update = self.clock.now()

    @property
    def is_initialized(self) -> bool:
        return self.lp_token_supply > 0

    def _reserves(self, token_in: Token) -> Tuple[float, float]:
        """(reserve_in, reserve_out) for a swap paying in ``token_in``"""
        if token_in is Token.A:
            return self.token_a_reserve, self.token_b_reserve
        return self.token_b_reserve, self.token_a_reserve

    def _touch(self) -> None:
        self.last_update = self.clock.now()

    def initialize(self, token_a_amount: float, token_b_amount: float) -> AddLiquidityResult:
        """Seed an empty pool; the first MINIMUM_LIQUIDITY LP tokens are burned"""
        if self.lp_token_supply > 0:
            raise AlreadyInitializedError("Pool already initialized")

        if token_a_amount <= 0 or token_b_amount <= 0:
            raise InvalidAmountError(
                f"Invalid initial liquidity amounts: {token_a_amount}, {token_b_amount}"
            )

        initial_liquidity = math.sqrt(token_a_amount * token_b_amount)
        if initial_liquidity < MINIMUM_LIQUIDITY:
            raise InitialLiquidityTooLowError(
                f"Initial liquidity too low: {initial_liquidity:.4f} < {MINIMUM_LIQUIDITY}"
            )

        self.token_a_reserve = float(token_a_amount)
        self.token_b_reserve = float(token_b_amount)
        self.lp_token_supply = initial_liquidity - MINIMUM_LIQUIDITY
        self._touch()

        logger.info(f"Pool initialized: A={token_a_amount}, B={token_b_amount}, "
                    f"LP supply={self.lp_token_supply:.6f}")

        return AddLiquidityResult(
            lp_tokens_received=self.lp_token_supply,
            token_a_deposited=token_a_amount,
            token_b_deposited=token_b_amount,
            share_of_pool=1.0,
        )

    def get_state(self) -> PoolState:
        return PoolState(
            token_a_reserve=self.token_a_reserve,
            token_b_reserve=self.token_b_reserve,
            total_liquidity=math.sqrt(self.token_a_reserve * self.token_b_reserve),
            lp_token_supply=self.lp_token_supply,
            fee=self.fee,
            last_update=self.last_update,
        )

    def get_price(self) -> float:
        """Price of A in units of B"""
        return calculate_price_from_reserves(self.token_a_reserve, self.token_b_reserve)

    def get_spot_price(self, token_in: TokenLike) -> float:
        """Units of the other token per unit of ``token_in``"""
        reserve_in, reserve_out = self._reserves(_token(token_in))
        return reserve_out / reserve_in if reserve_in > 0 else 0.0

    def simulate_swap(self, amount_in: float, token_in: TokenLike) -> SwapResult:
        """Quote a swap without touching the reserves"""
        token_in = _token(token_in)
        if amount_in <= 0:
            raise InvalidAmountError(f"Invalid swap amount: {amount_in}")

        reserve_in, reserve_out = self._reserves(token_in)
        if reserve_in <= 0 or reserve_out <= 0:
            raise InsufficientLiquidityError("Pool has no liquidity")

        fee_amount = amount_in * self.fee
        amount_in_after_fee = amount_in - fee_amount
        amount_out = amount_out_for(amount_in_after_fee, reserve_in, reserve_out)

        spot_price_before = reserve_out / reserve_in
        execution_price = amount_out / amount_in
        price_impact = abs(execution_price - spot_price_before) / spot_price_before

        # the whole input stays in the pool; the fee accrues to LPs
        new_reserve_in = reserve_in + amount_in
        new_reserve_out = reserve_out - amount_out
        if token_in is Token.A:
            new_price = calculate_price_from_reserves(new_reserve_in, new_reserve_out)
        else:
            new_price = calculate_price_from_reserves(new_reserve_out, new_reserve_in)

        return SwapResult(
            amount_in=amount_in,
            amount_out=amount_out,
            price_impact=price_impact,
            fee=fee_amount,
            new_price=new_price,
            amount_in_after_fee=amount_in_after_fee,
        )

    def execute_swap(self, amount_in: float, token_in: TokenLike,
                     min_amount_out: float = 0) -> SwapResult:
        token_in = _token(token_in)
        result = self.simulate_swap(amount_in, token_in)

        if result.amount_out < min_amount_out:
            raise SlippageExceededError(min_amount_out, result.amount_out)

        if token_in is Token.A:
            self.token_a_reserve += amount_in
            self.token_b_reserve -= result.amount_out
        else:
            self.token_b_reserve += amount_in
            self.token_a_reserve -= result.amount_out
        self._touch()

        logger.debug(f"Swap {amount_in} {token_in.value} -> {result.amount_out:.6f} "
                     f"{token_in.other.value}, fee {result.fee:.6f}")
        return result

    def add_liquidity(self, token_a_amount: float, token_b_amount: float) -> AddLiquidityResult:
        """Deposit at the current pool ratio; the excess of the richer side is not taken"""
        if self.lp_token_supply == 0:
            return self.initialize(token_a_amount, token_b_amount)

        if token_a_amount <= 0 or token_b_amount <= 0:
            raise InvalidAmountError(
                f"Invalid liquidity amounts: {token_a_amount}, {token_b_amount}"
            )

        current_ratio = self.token_b_reserve / self.token_a_reserve
        provided_ratio = token_b_amount / token_a_amount

        if provided_ratio > current_ratio:
            actual_token_a = token_a_amount
            actual_token_b = token_a_amount * current_ratio
        else:
            actual_token_b = token_b_amount
            actual_token_a = token_b_amount / current_ratio

        lp_tokens_minted = min(
            actual_token_a * self.lp_token_supply / self.token_a_reserve,
            actual_token_b * self.lp_token_supply / self.token_b_reserve
        )

        self.token_a_reserve += actual_token_a
        self.token_b_reserve += actual_token_b
        self.lp_token_supply += lp_tokens_minted
        self._touch()

        logger.debug(f"Liquidity added: A={actual_token_a:.6f}, B={actual_token_b:.6f}, "
                     f"minted {lp_tokens_minted:.6f} LP")

        return AddLiquidityResult(
            lp_tokens_received=lp_tokens_minted,
            token_a_deposited=actual_token_a,
            token_b_deposited=actual_token_b,
            share_of_pool=lp_tokens_minted / self.lp_token_supply,
        )

    def remove_liquidity(self, lp_tokens: float) -> RemoveLiquidityResult:
        """Burn LP tokens for the pro-rata share of both reserves"""
        if lp_tokens <= 0 or lp_tokens > self.lp_token_supply:
            raise InvalidLpAmountError(
                f"Invalid LP token amount: {lp_tokens} (supply {self.lp_token_supply})"
            )

        share_ratio = lp_tokens / self.lp_token_supply
        token_a_amount = self.token_a_reserve * share_ratio
        token_b_amount = self.token_b_reserve * share_ratio

        if lp_tokens == self.lp_token_supply:
            # last holder out: leave a clean, uninitialized pool
            self.token_a_reserve = 0.0
            self.token_b_reserve = 0.0
            self.lp_token_supply = 0.0
        else:
            self.token_a_reserve -= token_a_amount
            self.token_b_reserve -= token_b_amount
            self.lp_token_supply -= lp_tokens
        self._touch()

        logger.debug(f"Liquidity removed: burned {lp_tokens:.6f} LP for "
                     f"A={token_a_amount:.6f}, B={token_b_amount:.6f}")

        return RemoveLiquidityResult(
            lp_tokens_burned=lp_tokens,
            token_a_received=token_a_amount,
            token_b_received=token_b_amount,
            fee=0.0,
        )

    def get_liquidity_position(self, lp_tokens: float,
                               entry_price: Optional[float] = None) -> LiquidityPosition:
        """Value an LP holding; impermanent loss is measured against entry_price when given"""
        if lp_tokens <= 0 or self.lp_token_supply == 0:
            return LiquidityPosition(
                lp_tokens=0.0,
                share_of_pool=0.0,
                token_a_amount=0.0,
                token_b_amount=0.0,
                entry_price=0.0,
                current_value=0.0,
                impermanent_loss=0.0,
            )

        share_of_pool = lp_tokens / self.lp_token_supply
        token_a_amount = self.token_a_reserve * share_of_pool
        token_b_amount = self.token_b_reserve * share_of_pool
        current_price = self.get_price()
        current_value = token_a_amount * current_price + token_b_amount

        if entry_price is None:
            entry_price = current_price
        loss = self.calculate_impermanent_loss(entry_price, current_price)

        return LiquidityPosition(
            lp_tokens=lp_tokens,
            share_of_pool=share_of_pool,
            token_a_amount=token_a_amount,
            token_b_amount=token_b_amount,
            entry_price=entry_price,
            current_value=current_value,
            impermanent_loss=loss,
        )

    def calculate_impermanent_loss(self, entry_price: float, current_price: float) -> float:
        if entry_price <= 0:
            raise ValueError(f"entry_price must be positive, got {entry_price}")
        return impermanent_loss(current_price / entry_price)

    def get_amount_out(self, amount_in: float, token_in: TokenLike) -> float:
        return self.simulate_swap(amount_in, token_in).amount_out

    def get_amount_in(self, amount_out: float, token_out: TokenLike) -> float:
        """Gross input of the other token needed to receive ``amount_out``"""
        token_out = _token(token_out)
        if amount_out <= 0:
            return 0.0

        reserve_in, reserve_out = self._reserves(token_out.other)

        if amount_out >= reserve_out:
            raise InsufficientLiquidityError(
                f"Insufficient liquidity: requested {amount_out}, reserve {reserve_out}"
            )

        return amount_in_for(amount_out, reserve_in, reserve_out, self.fee)

    def calculate_optimal_swap_amount(self, token_a_to_add: float,
                                      token_b_to_add: float) -> Optional[Tuple[float, Token]]:
        """Swap that brings a deposit close to the pool ratio; None when already balanced"""
        if not self.is_initialized:
            raise InsufficientLiquidityError("Pool has no liquidity")
        if token_a_to_add <= 0:
            raise InvalidAmountError(f"Invalid token A amount: {token_a_to_add}")

        current_ratio = self.token_b_reserve / self.token_a_reserve
        provided_ratio = token_b_to_add / token_a_to_add

        if abs(provided_ratio - current_ratio) < RATIO_TOLERANCE:
            return None

        if provided_ratio > current_ratio:
            excess_b = token_b_to_add - token_a_to_add * current_ratio
            swap_amount = excess_b / (2 * (1 + current_ratio * (1 - self.fee)))
            return swap_amount, Token.B

        excess_a = token_a_to_add - token_b_to_add / current_ratio
        swap_amount = excess_a / (2 * (1 + (1 - self.fee) / current_ratio))
        return swap_amount, Token.A

    def get_k(self) -> float:
        return calculate_k(self.token_a_reserve, self.token_b_reserve)

    def set_fee(self, fee: float) -> None:
        self.fee = _validate_fee(fee)

    def reset(self) -> None:
        self.token_a_reserve = 0.0
        self.token_b_reserve = 0.0
        self.lp_token_supply = 0.0
        self._touch()
