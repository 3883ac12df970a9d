"""
Market Making Modules

Modules:
- config: spread, inventory and market maker configuration
- data_types: snapshots, trades, orders, quotes and results
- spread_model: quote width and inventory skew
- inventory_ledger: position, average cost and limits
- order_manager: open-order table
- performance_tracker: trade history and realized PnL
"""

from .config import (
    SpreadConfig,
    InventoryConfig,
    MarketMakerConfig,
    DEFAULT_SPREAD_CONFIG,
    DEFAULT_INVENTORY_CONFIG,
    DEFAULT_MARKET_MAKER_CONFIG
)
from .data_types import (
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
    MMStats
)
from .spread_model import (
    SpreadModel,
    round_to_tick,
    calculate_effective_spread,
    calculate_mid_price,
    calculate_weighted_mid_price,
    estimate_volatility
)
from .inventory_ledger import (
    InventoryLedger,
    calculate_optimal_inventory_target,
    calculate_inventory_risk
)
from .order_manager import OrderManager
from .performance_tracker import PerformanceTracker

__all__ = [
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
    'round_to_tick',
    'calculate_effective_spread',
    'calculate_mid_price',
    'calculate_weighted_mid_price',
    'estimate_volatility',
    'InventoryLedger',
    'calculate_optimal_inventory_target',
    'calculate_inventory_risk',
    'OrderManager',
    'PerformanceTracker'
]
