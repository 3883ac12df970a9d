"""
Configuration value objects for the market making core.

Every config is a frozen dataclass with all fields required. Partial
configuration is expressed by merging overrides over a named default
constant (``from_overrides``) or over an existing instance (``merged``).
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional, Union


def _check_fields(cls, overrides: Mapping[str, Any]) -> None:
    """Reject override keys that are not fields of ``cls``"""
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ValueError(f"Unknown {cls.__name__} field(s): {', '.join(unknown)}")


@dataclass(frozen=True)
class SpreadConfig:
    base_spread: float
    min_spread: float
    max_spread: float
    volatility_multiplier: float
    inventory_skew_multiplier: float

    def __post_init__(self):
        if self.min_spread <= 0:
            raise ValueError(f"min_spread must be positive, got {self.min_spread}")
        if self.min_spread > self.max_spread:
            raise ValueError(
                f"min_spread {self.min_spread} exceeds max_spread {self.max_spread}"
            )
        if self.base_spread < 0:
            raise ValueError(f"base_spread must be non-negative, got {self.base_spread}")
        if self.volatility_multiplier < 0:
            raise ValueError("volatility_multiplier must be non-negative")
        if self.inventory_skew_multiplier < 0:
            raise ValueError("inventory_skew_multiplier must be non-negative")

    @classmethod
    def from_overrides(cls, **overrides) -> 'SpreadConfig':
        return DEFAULT_SPREAD_CONFIG.merged(**overrides)

    def merged(self, **overrides) -> 'SpreadConfig':
        _check_fields(SpreadConfig, overrides)
        return replace(self, **overrides)


@dataclass(frozen=True)
class InventoryConfig:
    target_inventory: float
    max_inventory: float
    min_inventory: float
    rebalance_threshold: float
    skew_sensitivity: float

    def __post_init__(self):
        if self.min_inventory >= self.max_inventory:
            raise ValueError(
                f"min_inventory {self.min_inventory} must be below "
                f"max_inventory {self.max_inventory}"
            )
        if not self.min_inventory <= self.target_inventory <= self.max_inventory:
            raise ValueError(
                f"target_inventory {self.target_inventory} outside "
                f"[{self.min_inventory}, {self.max_inventory}]"
            )
        if self.rebalance_threshold <= 0:
            raise ValueError("rebalance_threshold must be positive")
        if self.skew_sensitivity < 0:
            raise ValueError("skew_sensitivity must be non-negative")

    @classmethod
    def from_overrides(cls, **overrides) -> 'InventoryConfig':
        return DEFAULT_INVENTORY_CONFIG.merged(**overrides)

    def merged(self, **overrides) -> 'InventoryConfig':
        _check_fields(InventoryConfig, overrides)
        return replace(self, **overrides)


SpreadOverrides = Union[SpreadConfig, Mapping[str, Any]]
InventoryOverrides = Union[InventoryConfig, Mapping[str, Any]]


@dataclass(frozen=True)
class MarketMakerConfig:
    spread: SpreadConfig
    inventory: InventoryConfig
    order_size: float
    max_order_size: float
    min_order_size: float
    price_tick_size: float
    size_tick_size: float
    update_interval_ms: int
    pool_fee: float
    fill_fee_rate: float
    trade_history_limit: int

    def __post_init__(self):
        if not 0 < self.min_order_size <= self.order_size <= self.max_order_size:
            raise ValueError(
                "Order sizes must satisfy 0 < min_order_size <= order_size <= max_order_size, "
                f"got {self.min_order_size}, {self.order_size}, {self.max_order_size}"
            )
        if self.price_tick_size <= 0 or self.size_tick_size <= 0:
            raise ValueError("Tick sizes must be positive")
        if self.update_interval_ms <= 0:
            raise ValueError("update_interval_ms must be positive")
        if not 0 <= self.pool_fee < 1:
            raise ValueError(f"pool_fee must be in [0, 1), got {self.pool_fee}")
        if self.fill_fee_rate < 0:
            raise ValueError("fill_fee_rate must be non-negative")
        if self.trade_history_limit < 1:
            raise ValueError("trade_history_limit must be at least 1")

    @classmethod
    def from_overrides(cls, **overrides) -> 'MarketMakerConfig':
        return DEFAULT_MARKET_MAKER_CONFIG.merged(**overrides)

    def merged(self, **overrides) -> 'MarketMakerConfig':
        """Replace only the supplied fields; nested spread/inventory may be partial dicts"""
        _check_fields(MarketMakerConfig, overrides)

        spread = overrides.pop('spread', None)
        inventory = overrides.pop('inventory', None)

        if spread is not None:
            overrides['spread'] = _merge_nested(self.spread, spread)
        if inventory is not None:
            overrides['inventory'] = _merge_nested(self.inventory, inventory)

        return replace(self, **overrides)

    def to_dict(self) -> Dict[str, Any]:
        result = {f.name: getattr(self, f.name) for f in fields(self)}
        result['spread'] = {f.name: getattr(self.spread, f.name) for f in fields(SpreadConfig)}
        result['inventory'] = {
            f.name: getattr(self.inventory, f.name) for f in fields(InventoryConfig)
        }
        return result


def _merge_nested(current, value: Optional[Union[SpreadOverrides, InventoryOverrides]]):
    if isinstance(value, (SpreadConfig, InventoryConfig)):
        return value
    return current.merged(**dict(value))


DEFAULT_SPREAD_CONFIG = SpreadConfig(
    base_spread=0.002,              # 0.2% base spread
    min_spread=0.0005,              # 0.05% minimum spread
    max_spread=0.02,                # 2% maximum spread
    volatility_multiplier=2.0,
    inventory_skew_multiplier=0.5,
)

DEFAULT_INVENTORY_CONFIG = InventoryConfig(
    target_inventory=0,
    max_inventory=1000,
    min_inventory=-1000,
    rebalance_threshold=0.3,        # 30% of the inventory range
    skew_sensitivity=1.5,
)

DEFAULT_MARKET_MAKER_CONFIG = MarketMakerConfig(
    spread=DEFAULT_SPREAD_CONFIG,
    inventory=DEFAULT_INVENTORY_CONFIG,
    order_size=100,
    max_order_size=500,
    min_order_size=10,
    price_tick_size=0.0001,
    size_tick_size=0.01,
    update_interval_ms=1000,
    pool_fee=0.003,
    fill_fee_rate=0.001,            # 0.1% charged on every fill
    trade_history_limit=1000,
)
