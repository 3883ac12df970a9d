"""
Liquidity Pool Package - Constant-product AMM
Reserve invariant, swap pricing and LP share accounting, independent of the
quoting and inventory state.

File: __init__.py
"""

from .liquidity_pool import LiquidityPool, DEFAULT_POOL_FEE, MINIMUM_LIQUIDITY
from .modules import (
    LiquidityPoolError,
    AlreadyInitializedError,
    InvalidAmountError,
    InitialLiquidityTooLowError,
    SlippageExceededError,
    InvalidLpAmountError,
    InsufficientLiquidityError,
    InvalidFeeError,
    Token,
    PoolState,
    SwapResult,
    AddLiquidityResult,
    RemoveLiquidityResult,
    LiquidityPosition,
    calculate_k,
    calculate_price_from_reserves,
    estimate_slippage
)

__all__ = [
    'LiquidityPool',
    'DEFAULT_POOL_FEE',
    'MINIMUM_LIQUIDITY',
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
    'estimate_slippage'
]
