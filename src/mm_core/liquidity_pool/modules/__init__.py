"""
Liquidity Pool Modules

Modules:
- exceptions: typed pool failures
- pool_types: pool state and operation results
- pool_math: pure constant-product helpers
"""

from .exceptions import (
    LiquidityPoolError,
    AlreadyInitializedError,
    InvalidAmountError,
    InitialLiquidityTooLowError,
    SlippageExceededError,
    InvalidLpAmountError,
    InsufficientLiquidityError,
    InvalidFeeError
)
from .pool_types import (
    Token,
    PoolState,
    SwapResult,
    AddLiquidityResult,
    RemoveLiquidityResult,
    LiquidityPosition
)
from .pool_math import calculate_k, calculate_price_from_reserves, estimate_slippage, impermanent_loss

__all__ = [
    'LiquidityPoolError',
    'AlreadyInitializedError',
    'InvalidAmountError',
    'InitialLiquidityTooLowError',
    'SlippageExceededError',
    'InvalidLpAmountError',
    'InsufficientLiquidityError',
    'InvalidFeeError',
    'Token',
    'PoolState',
    'SwapResult',
    'AddLiquidityResult',
    'RemoveLiquidityResult',
    'LiquidityPosition',
    'calculate_k',
    'calculate_price_from_reserves',
    'estimate_slippage',
    'impermanent_loss'
]
