"""
Spread model for the market making core.
Turns market data and the inventory ratio into bid/ask spreads and a quote.
"""

import numpy as np
from typing import Optional, Sequence, Tuple
import logging

from .config import SpreadConfig, DEFAULT_SPREAD_CONFIG
from .data_types import InventoryState, MarketSnapshot, Quote

logger = logging.getLogger(__name__)

# Volume at which the base spread is left unscaled
REFERENCE_VOLUME = 1_000_000
VOLATILITY_DEAD_ZONE = 0.01
DEFAULT_PRICE_TICK = 0.0001


def round_to_tick(value: float, tick_size: float) -> float:
    return round(value / tick_size) * tick_size


class SpreadModel:
    """Computes inventory-skewed spreads and quotes from market conditions"""

    def __init__(self, config: Optional[SpreadConfig] = None,
                 price_tick_size: float = DEFAULT_PRICE_TICK):
        self.config = config if config is not None else DEFAULT_SPREAD_CONFIG
        if price_tick_size <= 0:
            raise ValueError(f"price_tick_size must be positive, got {price_tick_size}")
        self.price_tick_size = price_tick_size

    def calculate_optimal_spread(self, market: MarketSnapshot,
                                 inventory: InventoryState) -> Tuple[float, float]:
        """Return (bid_spread, ask_spread) as fractions of the mid price"""
        base_spread = self._calculate_base_spread(market)
        volatility_adjustment = self._calculate_volatility_adjustment(market.volatility)
        inventory_skew = self._calculate_inventory_skew(inventory)

        total_spread = float(np.clip(base_spread + volatility_adjustment,
                                     self.config.min_spread, self.config.max_spread))

        half_spread = total_spread / 2
        floor = self.config.min_spread / 2
        bid_spread = max(half_spread * (1 + inventory_skew), floor)
        ask_spread = max(half_spread * (1 - inventory_skew), floor)

        logger.debug(f"Spread for {market.symbol}: total={total_spread:.6f}, "
                     f"skew={inventory_skew:.4f}, bid={bid_spread:.6f}, ask={ask_spread:.6f}")

        return bid_spread, ask_spread

    def _calculate_base_spread(self, market: MarketSnapshot) -> float:
        # thin markets widen the quote, deep markets tighten it
        volume_factor = float(np.clip(REFERENCE_VOLUME / (market.volume_24h + 1), 0.5, 2.0))
        return self.config.base_spread * volume_factor

    def _calculate_volatility_adjustment(self, volatility: float) -> float:
        normalized_volatility = max(0.0, volatility - VOLATILITY_DEAD_ZONE)
        return normalized_volatility * self.config.volatility_multiplier

    def _calculate_inventory_skew(self, inventory: InventoryState) -> float:
        deviation = inventory.inventory_ratio - 0.5
        return deviation * self.config.inventory_skew_multiplier * 2

    def generate_quote(self, mid_price: float, market: MarketSnapshot,
                       inventory: InventoryState, order_size: float) -> Quote:
        """Generate a two-sided quote around mid_price"""
        bid_spread, ask_spread = self.calculate_optimal_spread(market, inventory)

        bid_price = round_to_tick(mid_price * (1 - bid_spread), self.price_tick_size)
        ask_price = round_to_tick(mid_price * (1 + ask_spread), self.price_tick_size)

        return Quote(
            bid_price=bid_price,
            bid_size=self.adjust_order_size(order_size, inventory, 'bid'),
            ask_price=ask_price,
            ask_size=self.adjust_order_size(order_size, inventory, 'ask'),
            spread=ask_price - bid_price,
            mid_price=mid_price,
        )

    def adjust_order_size(self, base_size: float, inventory: InventoryState, side: str) -> float:
        """Shrink the side that grows the position, grow the side that reduces it"""
        ratio = inventory.inventory_ratio

        if side == 'bid':
            factor = 1 - (ratio - 0.5) * 0.8 if ratio > 0.5 else 1 + (0.5 - ratio) * 0.4
        elif side == 'ask':
            factor = 1 - (0.5 - ratio) * 0.8 if ratio < 0.5 else 1 + (ratio - 0.5) * 0.4
        else:
            raise ValueError(f"Unknown quote side: {side}")

        return base_size * float(np.clip(factor, 0.2, 1.5))

    def update_config(self, **overrides) -> SpreadConfig:
        self.config = self.config.merged(**overrides)
        return self.config

    def get_config(self) -> SpreadConfig:
        return self.config


def calculate_effective_spread(quote: Quote) -> float:
    return (quote.ask_price - quote.bid_price) / quote.mid_price


def calculate_mid_price(bid_price: float, ask_price: float) -> float:
    return (bid_price + ask_price) / 2


def calculate_weighted_mid_price(bid_price: float, bid_size: float,
                                 ask_price: float, ask_size: float) -> float:
    """Size-weighted mid (microprice); plain mid when both sides are empty"""
    total_size = bid_size + ask_size
    if total_size == 0:
        return (bid_price + ask_price) / 2
    return (bid_price * ask_size + ask_price * bid_size) / total_size


def estimate_volatility(prices: Sequence[float], period: int = 24) -> float:
    """Standard deviation of log returns scaled to ``period`` observations"""
    if len(prices) < 2:
        return 0.0

    returns = np.diff(np.log(np.asarray(prices, dtype=float)))
    return float(np.sqrt(np.var(returns) * period))
