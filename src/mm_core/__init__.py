"""
Market making pricing and risk core.

File: __init__.py
"""

from .market_maker import (
    MarketMakingCoordinator,
    MarketMakerConfig,
    SpreadConfig,
    InventoryConfig,
    MarketSnapshot,
    Side,
    OrderStatus,
    SpreadModel,
    InventoryLedger
)
from .liquidity_pool import LiquidityPool, LiquidityPoolError, Token

__all__ = [
    'MarketMakingCoordinator',
    'MarketMakerConfig',
    'SpreadConfig',
    'InventoryConfig',
    'MarketSnapshot',
    'Side',
    'OrderStatus',
    'SpreadModel',
    'InventoryLedger',
    'LiquidityPool',
    'LiquidityPoolError',
    'Token'
]
