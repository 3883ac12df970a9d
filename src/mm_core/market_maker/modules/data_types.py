"""
Data types shared by the market making modules.

Market snapshots, inventory snapshots, trades, orders and quotes are passed
between the spread model, the inventory ledger and the coordinator by value.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional


class Side(str, Enum):
    """Trade/order side"""
    BUY = "buy"
    SELL = "sell"

    @property
    def sign(self) -> int:
        return 1 if self is Side.BUY else -1


class OrderStatus(str, Enum):
    """Order status enumeration."""
    PENDING = "pending"
    PARTIAL = "partial"
    FILLED = "filled"
    CANCELLED = "cancelled"
    REJECTED = "rejected"


@dataclass(frozen=True)
class MarketSnapshot:
    """Market data for one symbol, produced outside the core"""
    symbol: str
    last_price: float
    bid_price: float
    ask_price: float
    volume_24h: float
    high_24h: float
    low_24h: float
    volatility: float

    @property
    def mid_price(self) -> float:
        return (self.bid_price + self.ask_price) / 2


@dataclass(frozen=True)
class InventoryState:
    current_inventory: float
    target_inventory: float
    inventory_ratio: float  # position normalised into [0, 1] across [min, max]
    skew_factor: float      # tanh-bounded deviation from target, (-1, 1)
    max_inventory: float
    min_inventory: float


@dataclass(frozen=True)
class Position:
    base_balance: float
    quote_balance: float
    net_exposure: float
    unrealized_pnl: float


@dataclass(frozen=True)
class Trade:
    """
    Executed fill.

    Attributes:
        id: Unique trade identifier
        side: Buy or sell
        price: Execution price, strictly positive
        size: Executed size, strictly positive
        timestamp: Clock reading at execution
        fee: Fee charged in quote currency
    """
    id: str
    side: Side
    price: float
    size: float
    timestamp: float
    fee: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, 'side', Side(self.side))
        if self.price <= 0:
            raise ValueError(f"Trade price must be positive, got {self.price}")
        if self.size <= 0:
            raise ValueError(f"Trade size must be positive, got {self.size}")
        if self.fee < 0:
            raise ValueError(f"Trade fee must be non-negative, got {self.fee}")

    @property
    def notional(self) -> float:
        return self.price * self.size


@dataclass
class Order:
    """
    Resting order owned by the coordinator's order table.

    filled_size never exceeds size; once an order is filled or cancelled
    it leaves the table and is not reopened.
    """
    id: str
    side: Side
    price: float
    size: float
    filled_size: float
    status: OrderStatus
    created_at: float
    updated_at: float

    @property
    def is_active(self) -> bool:
        """Check if order is still working."""
        return self.status in (OrderStatus.PENDING, OrderStatus.PARTIAL)

    @property
    def remaining_size(self) -> float:
        return max(0.0, self.size - self.filled_size)

    def snapshot(self) -> 'Order':
        return replace(self)


@dataclass(frozen=True)
class Quote:
    bid_price: float
    bid_size: float
    ask_price: float
    ask_size: float
    spread: float
    mid_price: float


@dataclass(frozen=True)
class InventoryUpdate:
    """Outcome of one inventory change; trade_id is None for direct adjustments"""
    trade_id: Optional[str]
    previous_inventory: float
    requested_inventory: float
    current_inventory: float

    @property
    def overshoot(self) -> float:
        """Signed amount cut off by the inventory limits"""
        return self.requested_inventory - self.current_inventory

    @property
    def clamped(self) -> bool:
        return self.overshoot != 0


@dataclass(frozen=True)
class FillResult:
    trade: Trade
    order: Order
    inventory_update: InventoryUpdate
    realized_pnl: float


@dataclass(frozen=True)
class TradeStats:
    count: int
    buy_volume: float
    sell_volume: float
    net_volume: float


@dataclass(frozen=True)
class MMStats:
    total_trades: int
    total_volume: float
    realized_pnl: float
    unrealized_pnl: float
    avg_spread: float
    inventory_turnover: float
    uptime: float
    total_fees: float = 0.0
    active_orders: int = 0
    last_price: Optional[float] = None
