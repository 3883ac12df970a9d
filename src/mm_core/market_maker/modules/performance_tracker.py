"""
Performance tracking module for the market making core.
Keeps the bounded trade history, cumulative volume/fees and realized PnL.
"""

import numpy as np
import pandas as pd
from typing import Dict, List, Optional
from collections import deque
from dataclasses import asdict
import logging

from .data_types import Side, Trade, TradeStats

logger = logging.getLogger(__name__)

SPREAD_WINDOW = 100


class PerformanceTracker:
    """Accumulates realized PnL and trade statistics for the coordinator"""

    def __init__(self, history_limit: int = 1000):
        # oldest trades are evicted first once the window is full
        self.trades = deque(maxlen=history_limit)
        self.performance = {
            'total_trades': 0,
            'total_volume': 0.0,
            'realized_pnl': 0.0,
            'total_fees': 0.0,
        }

    @property
    def history_limit(self) -> int:
        return self.trades.maxlen

    def set_history_limit(self, history_limit: int) -> None:
        if history_limit != self.trades.maxlen:
            self.trades = deque(self.trades, maxlen=history_limit)

    @staticmethod
    def calculate_realized_pnl(trade: Trade, previous_inventory: float,
                               avg_entry_price: float) -> float:
        """
        PnL realized by the part of ``trade`` that closes existing inventory.

        Only the closing share of the fee is charged here.
        """
        if trade.side is Side.SELL and previous_inventory > 0:
            closed = min(trade.size, previous_inventory)
            pnl = closed * (trade.price - avg_entry_price)
        elif trade.side is Side.BUY and previous_inventory < 0:
            closed = min(trade.size, abs(previous_inventory))
            pnl = closed * (avg_entry_price - trade.price)
        else:
            # opening or extending: only the cost basis moves
            return 0.0

        return pnl - trade.fee * closed / trade.size

    def record_trade(self, trade: Trade, previous_inventory: float,
                     avg_entry_price: float) -> float:
        """Append a trade to the history and return the PnL it realized"""
        realized = self.calculate_realized_pnl(trade, previous_inventory, avg_entry_price)

        self.trades.append(trade)
        self.performance['total_trades'] += 1
        self.performance['total_volume'] += trade.notional
        self.performance['realized_pnl'] += realized
        self.performance['total_fees'] += trade.fee

        logger.debug(f"Recorded trade {trade.id}: {trade.side.value} {trade.size} @ {trade.price}, "
                     f"realized {realized:.4f}")
        return realized

    @property
    def last_trade(self) -> Optional[Trade]:
        return self.trades[-1] if self.trades else None

    def get_trade_stats(self) -> TradeStats:
        """Volume statistics over the retained trade window"""
        buy_volume = sum(t.size for t in self.trades if t.side is Side.BUY)
        sell_volume = sum(t.size for t in self.trades if t.side is Side.SELL)

        return TradeStats(
            count=len(self.trades),
            buy_volume=buy_volume,
            sell_volume=sell_volume,
            net_volume=buy_volume - sell_volume,
        )

    def calculate_avg_spread(self, window: int = SPREAD_WINDOW) -> float:
        """Relative distance between average sell and buy prices of recent trades"""
        if len(self.trades) < 2:
            return 0.0

        recent = list(self.trades)[-window:]
        buy_prices = [t.price for t in recent if t.side is Side.BUY]
        sell_prices = [t.price for t in recent if t.side is Side.SELL]

        if not buy_prices or not sell_prices:
            return 0.0

        avg_buy = np.mean(buy_prices)
        avg_sell = np.mean(sell_prices)
        return float((avg_sell - avg_buy) / ((avg_sell + avg_buy) / 2))

    def get_trade_history(self, limit: Optional[int] = None) -> List[Trade]:
        trades = list(self.trades)
        return trades[-limit:] if limit else trades

    def get_trade_frame(self) -> pd.DataFrame:
        """Retained trades as a DataFrame, one row per trade"""
        columns = ['id', 'side', 'price', 'size', 'timestamp', 'fee']
        if not self.trades:
            return pd.DataFrame(columns=columns)

        records = []
        for trade in self.trades:
            record = asdict(trade)
            record['side'] = trade.side.value
            records.append(record)

        frame = pd.DataFrame.from_records(records, columns=columns)
        frame['notional'] = frame['price'] * frame['size']
        return frame

    def get_performance_summary(self) -> Dict:
        stats = self.get_trade_stats()
        return {
            **self.performance,
            'window_trades': stats.count,
            'buy_volume': stats.buy_volume,
            'sell_volume': stats.sell_volume,
            'avg_spread': self.calculate_avg_spread(),
        }

    def reset_metrics(self):
        """Reset performance metrics (use with caution)"""
        logger.warning("Resetting performance metrics")

        self.trades.clear()
        self.performance = {
            'total_trades': 0,
            'total_volume': 0.0,
            'realized_pnl': 0.0,
            'total_fees': 0.0,
        }
