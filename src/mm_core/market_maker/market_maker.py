"""
File: market_maker.py
Market making coordinator.

Wires the spread model, inventory ledger and liquidity pool together and
owns the cross-cutting state: open orders, trade history, cumulative
volume and realized PnL. Sequence per tick:
quote -> place orders -> fill -> ledger update -> PnL update -> rebalance check.
"""

import math
from dataclasses import asdict
from typing import Dict, List, Optional, Tuple
import pandas as pd

from ..liquidity_pool import LiquidityPool
from ..liquidity_pool.modules.pool_types import (
    AddLiquidityResult,
    PoolState,
    RemoveLiquidityResult,
    SwapResult,
)
from utils.clock import SystemClock, UuidIdGenerator
from utils.logger import setup_logger, log_trade, log_position_update

from .modules.config import MarketMakerConfig, DEFAULT_MARKET_MAKER_CONFIG
from .modules.data_types import (
    FillResult,
    InventoryState,
    MarketSnapshot,
    MMStats,
    Order,
    Position,
    Quote,
    Side,
    Trade,
    TradeStats,
)
from .modules.spread_model import SpreadModel, round_to_tick
from .modules.inventory_ledger import InventoryLedger
from .modules.order_manager import OrderManager
from .modules.performance_tracker import PerformanceTracker

logger = setup_logger(__name__)


class MarketMakingCoordinator:
    """Market maker core: quoting, order/fill handling, inventory and PnL, AMM pool proxy"""

    def __init__(self, config: Optional[MarketMakerConfig] = None,
                 clock=None, id_generator=None, symbol: str = 'BASE-QUOTE', **overrides):
        base_config = config if config is not None else DEFAULT_MARKET_MAKER_CONFIG
        self.config = base_config.merged(**overrides) if overrides else base_config
        self.symbol = symbol

        self.clock = clock if clock is not None else SystemClock()
        self.id_generator = id_generator if id_generator is not None else UuidIdGenerator()

        # Initialize modules
        self.spread_model = SpreadModel(self.config.spread, self.config.price_tick_size)
        self.inventory_ledger = InventoryLedger(self.config.inventory)
        self.liquidity_pool = LiquidityPool(self.config.pool_fee, clock=self.clock)
        self.order_manager = OrderManager(self.clock, self.id_generator)
        self.performance_tracker = PerformanceTracker(self.config.trade_history_limit)

        self.is_running = False
        self.start_time = 0.0

    def start(self) -> None:
        if self.is_running:
            return
        self.is_running = True
        self.start_time = self.clock.now()
        logger.info(f"Market maker started for {self.symbol}")

    def stop(self) -> None:
        was_running = self.is_running
        self.is_running = False
        self.cancel_all_orders()
        if was_running:
            logger.info(f"Market maker stopped for {self.symbol}")

    def is_active(self) -> bool:
        return self.is_running

    # ------------------------------------------------------------------
    # Quoting and orders
    # ------------------------------------------------------------------

    def generate_quotes(self, market: MarketSnapshot) -> Quote:
        """Two-sided quote around the market mid, skewed by current inventory"""
        inventory_state = self.inventory_ledger.get_state()
        return self.spread_model.generate_quote(
            market.mid_price, market, inventory_state, self.config.order_size
        )

    def place_orders(self, quote: Quote) -> Tuple[Order, Order]:
        """Turn a quote into a resting bid and ask"""
        bid_order = self._create_order(Side.BUY, quote.bid_price, quote.bid_size)
        ask_order = self._create_order(Side.SELL, quote.ask_price, quote.ask_size)
        return bid_order, ask_order

    def _create_order(self, side: Side, price: float, size: float,
                      corrective: bool = False) -> Order:
        """
        Size, round and register an order.

        Corrective orders skip the min_order_size floor and never exceed the
        requested size, so a rebalance cannot overshoot its target.
        """
        min_size = 0.0 if corrective else self.config.min_order_size
        adjusted_size = min(self.config.max_order_size, max(min_size, size))

        # best effort: narrow to what the inventory limits still allow
        if not self.inventory_ledger.should_accept_order(side, adjusted_size):
            max_size = self.inventory_ledger.get_max_order_size(side)
            logger.debug(f"Narrowing {side.value} order from {adjusted_size} to {max_size}")
            adjusted_size = min(adjusted_size, max_size)

        tick = self.config.size_tick_size
        rounded_size = round_to_tick(adjusted_size, tick)
        size_limit = self.inventory_ledger.get_max_order_size(side)
        if corrective:
            size_limit = min(size_limit, adjusted_size)
        if rounded_size > size_limit:
            # rounding must not carry the order past the limit
            rounded_size = math.floor(size_limit / tick) * tick

        return self.order_manager.create_order(
            side,
            round_to_tick(price, self.config.price_tick_size),
            rounded_size,
        )

    def process_fill(self, order_id: str, filled_size: float,
                     fill_price: float) -> Optional[FillResult]:
        """
        Apply an exchange fill to an open order.

        Each call adds ``filled_size``; repeated calls are not deduplicated.
        The fill is capped at the order's remaining size.

        Returns:
            FillResult, or None when the order is unknown or already closed
        """
        if filled_size <= 0:
            raise ValueError(f"Fill size must be positive, got {filled_size}")
        if fill_price <= 0:
            raise ValueError(f"Fill price must be positive, got {fill_price}")

        order = self.order_manager.get_order(order_id)
        if order is None:
            logger.warning(f"Fill for unknown or closed order {order_id} ignored")
            return None

        size = min(filled_size, order.remaining_size)
        order = self.order_manager.apply_fill(order_id, size)

        trade = Trade(
            id=self.id_generator.next_id(),
            side=order.side,
            price=fill_price,
            size=size,
            timestamp=self.clock.now(),
            fee=size * fill_price * self.config.fill_fee_rate,
        )

        # realized PnL is measured against the pre-trade position and basis
        previous_inventory = self.inventory_ledger.current_inventory
        avg_entry_price = self.inventory_ledger.avg_entry_price

        inventory_update = self.inventory_ledger.update_inventory(trade)
        realized_pnl = self.performance_tracker.record_trade(
            trade, previous_inventory, avg_entry_price
        )

        log_trade(self.symbol, trade.side.value, trade.size, trade.price,
                  pnl=realized_pnl, reason=f"fill {order.id} ({order.status.value})")

        if inventory_update.clamped:
            log_position_update(self.symbol, 'clamped', {
                'requested': inventory_update.requested_inventory,
                'current': inventory_update.current_inventory,
                'overshoot': inventory_update.overshoot,
            })

        if self.inventory_ledger.needs_rebalancing():
            logger.info(f"Inventory rebalancing needed for {self.symbol}: "
                        f"{self.inventory_ledger.current_inventory}")

        return FillResult(
            trade=trade,
            order=order.snapshot(),
            inventory_update=inventory_update,
            realized_pnl=realized_pnl,
        )

    def cancel_order(self, order_id: str) -> bool:
        return self.order_manager.cancel_order(order_id)

    def cancel_all_orders(self) -> int:
        return self.order_manager.cancel_all_orders()

    def get_order(self, order_id: str) -> Optional[Order]:
        return self.order_manager.get_order(order_id)

    def get_active_orders(self) -> List[Order]:
        return self.order_manager.get_active_orders()

    # ------------------------------------------------------------------
    # Inventory and rebalancing
    # ------------------------------------------------------------------

    def get_inventory_state(self) -> InventoryState:
        return self.inventory_ledger.get_state()

    def needs_rebalancing(self) -> bool:
        return self.inventory_ledger.needs_rebalancing()

    def execute_rebalance(self, market: MarketSnapshot) -> Optional[FillResult]:
        """Cross the spread with a corrective order sized to bring inventory back to target"""
        if not self.needs_rebalancing():
            return None

        rebalance_amount = self.inventory_ledger.get_rebalance_amount()
        side = Side.BUY if rebalance_amount > 0 else Side.SELL
        price = market.ask_price if side is Side.BUY else market.bid_price

        order = self._create_order(side, price, abs(rebalance_amount), corrective=True)
        if not order.is_active:
            return None

        logger.info(f"Rebalancing {self.symbol}: {side.value} {order.size} @ {order.price}")
        return self.process_fill(order.id, order.size, order.price)

    def get_position(self) -> Position:
        last_trade = self.performance_tracker.last_trade
        last_price = last_trade.price if last_trade else 0.0
        return self.inventory_ledger.calculate_position(last_price)

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def get_stats(self) -> MMStats:
        last_trade = self.performance_tracker.last_trade
        last_price = last_trade.price if last_trade else None
        position = self.inventory_ledger.calculate_position(last_price or 0.0)

        trade_stats = self.performance_tracker.get_trade_stats()
        performance = self.performance_tracker.performance
        uptime = self.clock.now() - self.start_time if self.is_running else 0.0

        return MMStats(
            total_trades=performance['total_trades'],
            total_volume=performance['total_volume'],
            realized_pnl=performance['realized_pnl'],
            unrealized_pnl=position.unrealized_pnl,
            avg_spread=self.performance_tracker.calculate_avg_spread(),
            inventory_turnover=trade_stats.buy_volume + trade_stats.sell_volume,
            uptime=uptime,
            total_fees=performance['total_fees'],
            active_orders=len(self.order_manager.active_orders),
            last_price=last_price,
        )

    def get_trade_stats(self) -> TradeStats:
        return self.performance_tracker.get_trade_stats()

    def get_trade_history(self, limit: Optional[int] = None) -> List[Trade]:
        return self.performance_tracker.get_trade_history(limit)

    def get_trade_history_frame(self) -> pd.DataFrame:
        return self.performance_tracker.get_trade_frame()

    # ------------------------------------------------------------------
    # Liquidity pool proxy
    # ------------------------------------------------------------------

    def initialize_liquidity_pool(self, token_a: float, token_b: float) -> AddLiquidityResult:
        return self.liquidity_pool.initialize(token_a, token_b)

    def add_liquidity(self, token_a: float, token_b: float) -> AddLiquidityResult:
        return self.liquidity_pool.add_liquidity(token_a, token_b)

    def remove_liquidity(self, lp_tokens: float) -> RemoveLiquidityResult:
        return self.liquidity_pool.remove_liquidity(lp_tokens)

    def simulate_swap(self, amount_in: float, token_in: str) -> SwapResult:
        return self.liquidity_pool.simulate_swap(amount_in, token_in)

    def execute_swap(self, amount_in: float, token_in: str,
                     min_amount_out: float = 0) -> SwapResult:
        return self.liquidity_pool.execute_swap(amount_in, token_in, min_amount_out)

    def get_pool_state(self) -> PoolState:
        return self.liquidity_pool.get_state()

    def get_pool_price(self) -> float:
        return self.liquidity_pool.get_price()

    # ------------------------------------------------------------------
    # Configuration and lifecycle
    # ------------------------------------------------------------------

    def update_config(self, **overrides) -> MarketMakerConfig:
        """Replace only the supplied fields and push them down to the components"""
        self.config = self.config.merged(**overrides)

        if 'spread' in overrides:
            self.spread_model.config = self.config.spread
        if 'price_tick_size' in overrides:
            self.spread_model.price_tick_size = self.config.price_tick_size
        if 'inventory' in overrides:
            reclamp = self.inventory_ledger.update_config(**asdict(self.config.inventory))
            if reclamp is not None:
                log_position_update(self.symbol, 'reclamped', {
                    'previous': reclamp.previous_inventory,
                    'current': reclamp.current_inventory,
                })
        if 'pool_fee' in overrides:
            self.liquidity_pool.set_fee(self.config.pool_fee)
        if 'trade_history_limit' in overrides:
            self.performance_tracker.set_history_limit(self.config.trade_history_limit)

        logger.info(f"Configuration updated: {sorted(overrides)}")
        return self.config

    def get_config(self) -> MarketMakerConfig:
        return self.config

    def get_metrics(self) -> Dict:
        """Combined snapshot for dashboards and logs"""
        return {
            'symbol': self.symbol,
            'running': self.is_running,
            'performance': self.performance_tracker.get_performance_summary(),
            'inventory': self.inventory_ledger.get_state(),
            'orders': self.order_manager.get_order_metrics(),
            'pool': self.liquidity_pool.get_state(),
        }

    def reset(self) -> None:
        self.stop()
        self.order_manager.clear()
        self.performance_tracker.reset_metrics()
        self.inventory_ledger.reset()
        self.liquidity_pool.reset()
        self.start_time = 0.0
