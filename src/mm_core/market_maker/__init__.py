"""
Market Maker Package - Quoting, inventory and fill handling
Coordinator plus the spread model, inventory ledger, order table and
performance tracker it wires together.

File: __init__.py
"""

from .market_maker import MarketMakingCoordinator
from .modules import (
    SpreadConfig,
    InventoryConfig,
    MarketMakerConfig,
    DEFAULT_SPREAD_CONFIG,
    DEFAULT_INVENTORY_CONFIG,
    DEFAULT_MARKET_MAKER_CONFIG,
    Side,
    OrderStatus,
    MarketSnapshot,
    InventoryState,
    Position,
    Trade,
    Order,
    Quote,
    InventoryUpdate,
    FillResult,
    TradeStats,
    MMStats,
    SpreadModel,
    InventoryLedger
)

__all__ = [
    'MarketMakingCoordinator',
    'SpreadConfig',
    'InventoryConfig',
    'MarketMakerConfig',
    'DEFAULT_SPREAD_CONFIG',
    'DEFAULT_INVENTORY_CONFIG',
    'DEFAULT_MARKET_MAKER_CONFIG',
    'Side',
    'OrderStatus',
    'MarketSnapshot',
    'InventoryState',
    'Position',
    'Trade',
    'Order',
    'Quote',
    'InventoryUpdate',
    'FillResult',
    'TradeStats',
    'MMStats',
    'SpreadModel',
    'InventoryLedger'
]
