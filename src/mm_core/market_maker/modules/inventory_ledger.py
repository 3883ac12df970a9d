"""
Inventory ledger for the market making core.
Tracks the signed position and its average entry price, enforces the
inventory limits and produces rebalancing signals.
"""

import numpy as np
from typing import Optional
import logging

from .config import InventoryConfig, DEFAULT_INVENTORY_CONFIG
from .data_types import InventoryState, InventoryUpdate, Position, Side, Trade

logger = logging.getLogger(__name__)


class InventoryLedger:
    """Position and average-cost tracker with hard inventory limits"""

    def __init__(self, config: Optional[InventoryConfig] = None):
        self.config = config if config is not None else DEFAULT_INVENTORY_CONFIG
        self.current_inventory = 0.0
        self._avg_entry_price = 0.0

    @property
    def avg_entry_price(self) -> float:
        return self._avg_entry_price

    def get_state(self) -> InventoryState:
        """Snapshot of the inventory normalised against the configured limits"""
        range_ = self.config.max_inventory - self.config.min_inventory
        normalized_inventory = self.current_inventory - self.config.min_inventory
        inventory_ratio = normalized_inventory / range_ if range_ > 0 else 0.5

        return InventoryState(
            current_inventory=self.current_inventory,
            target_inventory=self.config.target_inventory,
            inventory_ratio=float(np.clip(inventory_ratio, 0.0, 1.0)),
            skew_factor=self._calculate_skew_factor(),
            max_inventory=self.config.max_inventory,
            min_inventory=self.config.min_inventory,
        )

    def _calculate_skew_factor(self) -> float:
        deviation = self.current_inventory - self.config.target_inventory
        max_deviation = max(
            abs(self.config.max_inventory - self.config.target_inventory),
            abs(self.config.min_inventory - self.config.target_inventory)
        )

        if max_deviation == 0:
            return 0.0

        normalized_deviation = deviation / max_deviation
        return float(np.tanh(normalized_deviation * self.config.skew_sensitivity))

    def update_inventory(self, trade: Trade) -> InventoryUpdate:
        """Apply a fill; the resulting position is clamped to the limits"""
        previous_inventory = self.current_inventory
        requested_inventory = previous_inventory + trade.side.sign * trade.size
        current_inventory = self._clamp(requested_inventory)

        if current_inventory != requested_inventory:
            limit = 'max' if requested_inventory > current_inventory else 'min'
            logger.warning(f"Inventory {requested_inventory} breached {limit} limit, "
                           f"capped at {current_inventory} (trade {trade.id})")

        self._update_avg_entry_price(previous_inventory, current_inventory, trade.price)
        self.current_inventory = current_inventory

        logger.debug(f"Inventory updated: {trade.side.value} {trade.size} @ {trade.price}, "
                     f"inventory: {previous_inventory} -> {current_inventory}")

        return InventoryUpdate(
            trade_id=trade.id,
            previous_inventory=previous_inventory,
            requested_inventory=requested_inventory,
            current_inventory=current_inventory,
        )

    def _update_avg_entry_price(self, previous: float, current: float, price: float) -> None:
        if current == 0:
            self._avg_entry_price = 0.0
        elif previous == 0 or np.sign(previous) != np.sign(current):
            # opened from flat or flipped through zero: the old side's basis is gone
            self._avg_entry_price = price
        elif abs(current) > abs(previous):
            added = abs(current) - abs(previous)
            self._avg_entry_price = (
                self._avg_entry_price * abs(previous) + price * added
            ) / abs(current)
        # reducing the same side leaves the basis untouched

    def _clamp(self, inventory: float) -> float:
        return min(self.config.max_inventory, max(self.config.min_inventory, inventory))

    def needs_rebalancing(self) -> bool:
        deviation = abs(self.current_inventory - self.config.target_inventory)
        range_ = self.config.max_inventory - self.config.min_inventory
        return deviation / range_ > self.config.rebalance_threshold

    def get_rebalance_amount(self) -> float:
        """Signed size back to target; positive means buy"""
        return self.config.target_inventory - self.current_inventory

    def calculate_position(self, current_price: float) -> Position:
        net_exposure = self.current_inventory * current_price

        if self.current_inventory > 0:
            unrealized_pnl = self.current_inventory * (current_price - self._avg_entry_price)
        elif self.current_inventory < 0:
            unrealized_pnl = abs(self.current_inventory) * (self._avg_entry_price - current_price)
        else:
            unrealized_pnl = 0.0

        return Position(
            base_balance=self.current_inventory,
            quote_balance=-net_exposure,
            net_exposure=net_exposure,
            unrealized_pnl=unrealized_pnl,
        )

    def should_accept_order(self, side: Side, size: float) -> bool:
        if Side(side) is Side.BUY:
            return self.current_inventory + size <= self.config.max_inventory
        return self.current_inventory - size >= self.config.min_inventory

    def get_max_order_size(self, side: Side) -> float:
        if Side(side) is Side.BUY:
            return max(0.0, self.config.max_inventory - self.current_inventory)
        return max(0.0, self.current_inventory - self.config.min_inventory)

    def get_inventory_utilization(self) -> float:
        used = abs(self.current_inventory - self.config.target_inventory)
        available = max(
            abs(self.config.max_inventory - self.config.target_inventory),
            abs(self.config.min_inventory - self.config.target_inventory)
        )
        return used / available if available > 0 else 0.0

    def set_inventory(self, inventory: float) -> InventoryUpdate:
        """Move the position directly, clamped to the limits"""
        previous_inventory = self.current_inventory
        current_inventory = self._clamp(inventory)

        if current_inventory != inventory:
            logger.warning(f"Inventory {inventory} outside limits, capped at {current_inventory}")

        # a direct adjustment carries no price, so a new or flipped position has no basis
        if (current_inventory == 0 or previous_inventory == 0
                or np.sign(previous_inventory) != np.sign(current_inventory)):
            self._avg_entry_price = 0.0
        self.current_inventory = current_inventory

        return InventoryUpdate(
            trade_id=None,
            previous_inventory=previous_inventory,
            requested_inventory=inventory,
            current_inventory=current_inventory,
        )

    def update_config(self, **overrides) -> Optional[InventoryUpdate]:
        """Apply new limits; returns the re-clamp when the position had to move"""
        self.config = self.config.merged(**overrides)

        if self._clamp(self.current_inventory) == self.current_inventory:
            return None
        return self.set_inventory(self.current_inventory)

    def get_config(self) -> InventoryConfig:
        return self.config

    def reset(self) -> None:
        self.current_inventory = float(self.config.target_inventory)
        self._avg_entry_price = 0.0


def calculate_optimal_inventory_target(base_reserve: float, quote_reserve: float,
                                       target_ratio: float = 0.5) -> float:
    total_value = base_reserve + quote_reserve
    return (target_ratio - 0.5) * total_value


def calculate_inventory_risk(inventory: float, volatility: float,
                             time_horizon: float = 1) -> float:
    """Inventory exposure scaled by volatility over the horizon"""
    return float(abs(inventory) * volatility * np.sqrt(time_horizon))
