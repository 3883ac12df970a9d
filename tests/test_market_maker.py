import unittest

from mm_core.market_maker import (
    MarketMakingCoordinator,
    DEFAULT_MARKET_MAKER_CONFIG,
    MarketSnapshot,
    OrderStatus,
    Side,
    Trade
)
from mm_core.liquidity_pool import SlippageExceededError
from utils.clock import ManualClock, SequentialIdGenerator


def make_market(bid=99.9, ask=100.1):
    return MarketSnapshot(
        symbol='TEST-USD',
        last_price=(bid + ask) / 2,
        bid_price=bid,
        ask_price=ask,
        volume_24h=1_000_000,
        high_24h=105.0,
        low_24h=95.0,
        volatility=0.01,
    )


class TestMarketMakingCoordinator(unittest.TestCase):
    """Test quoting, fills, rebalancing and stats"""

    def setUp(self):
        """Set up test environment"""
        self.clock = ManualClock(0.0)
        self.mm = self.make_coordinator()
        self.market = make_market()

    def make_coordinator(self, **overrides):
        return MarketMakingCoordinator(
            clock=self.clock,
            id_generator=SequentialIdGenerator('mm'),
            symbol='TEST-USD',
            **overrides
        )

    def seed_inventory(self, size, price=100.0):
        side = Side.BUY if size > 0 else Side.SELL
        self.mm.inventory_ledger.update_inventory(
            Trade(id='seed', side=side, price=price, size=abs(size), timestamp=0.0)
        )

    def test_initialization(self):
        """Test coordinator initialization"""
        self.assertEqual(self.mm.get_config(), DEFAULT_MARKET_MAKER_CONFIG)
        self.assertFalse(self.mm.is_active())
        self.assertEqual(self.mm.get_inventory_state().current_inventory, 0)
        self.assertEqual(self.mm.get_active_orders(), [])

    def test_constructor_overrides(self):
        mm = self.make_coordinator(order_size=50, spread={'base_spread': 0.004})

        self.assertEqual(mm.config.order_size, 50)
        self.assertEqual(mm.spread_model.get_config().base_spread, 0.004)
        self.assertEqual(mm.spread_model.get_config().max_spread, 0.02)

        with self.assertRaises(ValueError):
            self.make_coordinator(order_size=5000)

        with self.assertRaises(ValueError):
            self.make_coordinator(not_a_field=1)

    def test_start_stop(self):
        self.mm.start()
        self.assertTrue(self.mm.is_active())

        self.mm.place_orders(self.mm.generate_quotes(self.market))
        self.assertEqual(len(self.mm.get_active_orders()), 2)

        self.mm.stop()
        self.assertFalse(self.mm.is_active())
        self.assertEqual(self.mm.get_active_orders(), [])

    def test_generate_quotes(self):
        quote = self.mm.generate_quotes(self.market)

        self.assertAlmostEqual(quote.mid_price, 100.0)
        self.assertAlmostEqual(quote.bid_price, 99.9, places=6)
        self.assertAlmostEqual(quote.ask_price, 100.1, places=6)
        self.assertAlmostEqual(quote.bid_size, 100)
        self.assertAlmostEqual(quote.ask_size, 100)

    def test_place_orders(self):
        bid, ask = self.mm.place_orders(self.mm.generate_quotes(self.market))

        self.assertEqual(bid.id, 'mm-1')
        self.assertEqual(ask.id, 'mm-2')
        self.assertEqual(bid.side, Side.BUY)
        self.assertEqual(ask.side, Side.SELL)
        self.assertEqual(bid.status, OrderStatus.PENDING)
        self.assertAlmostEqual(bid.size, 100)
        self.assertIs(self.mm.get_order(bid.id), bid)

    def test_order_size_narrowed_to_inventory_headroom(self):
        """Best-effort sizing: a bid that would breach max is shrunk, not rejected"""
        self.mm.inventory_ledger.set_inventory(980)
        bid, ask = self.mm.place_orders(self.mm.generate_quotes(self.market))

        self.assertAlmostEqual(bid.size, 20)
        self.assertEqual(bid.status, OrderStatus.PENDING)
        self.assertGreater(ask.size, 100)

    def test_zero_size_order_rejected(self):
        self.mm.inventory_ledger.set_inventory(1000)

        with self.assertLogs('mm_core.market_maker.modules.order_manager', level='WARNING'):
            bid, ask = self.mm.place_orders(self.mm.generate_quotes(self.market))

        self.assertEqual(bid.status, OrderStatus.REJECTED)
        self.assertEqual(bid.size, 0)
        self.assertIsNone(self.mm.get_order(bid.id))
        self.assertEqual(ask.status, OrderStatus.PENDING)

    def test_partial_then_full_fill(self):
        bid, _ = self.mm.place_orders(self.mm.generate_quotes(self.market))

        with self.assertLogs('trades', level='INFO'):
            result = self.mm.process_fill(bid.id, 40, 99.9)

        self.assertEqual(result.order.status, OrderStatus.PARTIAL)
        self.assertEqual(result.trade.side, Side.BUY)
        self.assertEqual(result.trade.size, 40)
        self.assertAlmostEqual(result.trade.fee, 40 * 99.9 * 0.001)
        self.assertEqual(result.realized_pnl, 0.0)
        self.assertEqual(result.inventory_update.current_inventory, 40)
        self.assertFalse(result.inventory_update.clamped)

        result = self.mm.process_fill(bid.id, 60, 99.9)
        self.assertEqual(result.order.status, OrderStatus.FILLED)
        self.assertIsNone(self.mm.get_order(bid.id))
        self.assertEqual(self.mm.get_inventory_state().current_inventory, 100)

        # a closed order takes no more fills
        self.assertIsNone(self.mm.process_fill(bid.id, 10, 99.9))

    def test_fill_capped_at_remaining_size(self):
        bid, _ = self.mm.place_orders(self.mm.generate_quotes(self.market))
        self.mm.process_fill(bid.id, 70, 99.9)
        result = self.mm.process_fill(bid.id, 70, 99.9)

        self.assertAlmostEqual(result.trade.size, 30)
        self.assertEqual(self.mm.get_inventory_state().current_inventory, 100)

    def test_fill_validation(self):
        bid, _ = self.mm.place_orders(self.mm.generate_quotes(self.market))

        with self.assertRaises(ValueError):
            self.mm.process_fill(bid.id, 0, 99.9)
        with self.assertRaises(ValueError):
            self.mm.process_fill(bid.id, 10, -1)

        self.assertIsNone(self.mm.process_fill('unknown', 10, 99.9))

    def test_round_trip_realizes_pnl(self):
        bid, ask = self.mm.place_orders(self.mm.generate_quotes(self.market))
        self.mm.process_fill(bid.id, 100, 99.9)
        result = self.mm.process_fill(ask.id, 50, 100.1)

        expected = 50 * (100.1 - 99.9) - 50 * 100.1 * 0.001
        self.assertAlmostEqual(result.realized_pnl, expected)
        self.assertAlmostEqual(self.mm.get_stats().realized_pnl, expected)
        self.assertEqual(self.mm.get_inventory_state().current_inventory, 50)

    def test_fill_clamp_is_reported(self):
        """Two bids sized against the same headroom overshoot the max on fill"""
        self.mm.inventory_ledger.set_inventory(900)
        first_bid, _ = self.mm.place_orders(self.mm.generate_quotes(self.market))
        second_bid, _ = self.mm.place_orders(self.mm.generate_quotes(self.market))

        self.mm.process_fill(first_bid.id, first_bid.size, 99.9)
        with self.assertLogs('mm_core.market_maker.modules.inventory_ledger', level='WARNING'):
            result = self.mm.process_fill(second_bid.id, second_bid.size, 99.9)

        self.assertTrue(result.inventory_update.clamped)
        self.assertAlmostEqual(
            result.inventory_update.overshoot, 900 + first_bid.size + second_bid.size - 1000
        )
        self.assertEqual(self.mm.get_inventory_state().current_inventory, 1000)

    def test_cancel_orders(self):
        bid, ask = self.mm.place_orders(self.mm.generate_quotes(self.market))

        self.assertTrue(self.mm.cancel_order(bid.id))
        self.assertFalse(self.mm.cancel_order(bid.id))
        self.assertEqual(bid.status, OrderStatus.CANCELLED)

        self.assertEqual(self.mm.cancel_all_orders(), 1)
        self.assertEqual(ask.status, OrderStatus.CANCELLED)
        self.assertIsNone(self.mm.process_fill(ask.id, 10, 100.1))

    def test_no_rebalance_when_balanced(self):
        self.assertFalse(self.mm.needs_rebalancing())
        self.assertIsNone(self.mm.execute_rebalance(self.market))

    def test_execute_rebalance(self):
        """Long 700 sells at the bid, capped by max_order_size"""
        self.seed_inventory(700, price=100.0)
        self.assertTrue(self.mm.needs_rebalancing())

        result = self.mm.execute_rebalance(self.market)

        self.assertEqual(result.trade.side, Side.SELL)
        self.assertAlmostEqual(result.trade.size, 500)
        self.assertAlmostEqual(result.trade.price, 99.9)
        self.assertEqual(result.order.status, OrderStatus.FILLED)
        self.assertAlmostEqual(result.realized_pnl, 500 * (99.9 - 100.0) - 500 * 99.9 * 0.001)
        self.assertAlmostEqual(self.mm.get_inventory_state().current_inventory, 200)
        self.assertFalse(self.mm.needs_rebalancing())
        self.assertEqual(self.mm.get_active_orders(), [])
        self.assertEqual(self.mm.get_stats().total_trades, 1)

    def test_rebalance_below_min_order_size_lands_on_target(self):
        """A gap smaller than min_order_size is closed exactly, not overshot"""
        self.mm = self.make_coordinator(inventory={'rebalance_threshold': 0.002})
        self.seed_inventory(5, price=100.0)
        self.assertTrue(self.mm.needs_rebalancing())

        result = self.mm.execute_rebalance(self.market)

        self.assertEqual(result.trade.side, Side.SELL)
        self.assertAlmostEqual(result.trade.size, 5)
        self.assertEqual(self.mm.get_inventory_state().current_inventory, 0)
        self.assertFalse(self.mm.needs_rebalancing())
        self.assertIsNone(self.mm.execute_rebalance(self.market))

    def test_execute_rebalance_short_buys_at_ask(self):
        self.mm = self.make_coordinator(max_order_size=1000)
        self.seed_inventory(-700, price=100.0)

        result = self.mm.execute_rebalance(self.market)

        self.assertEqual(result.trade.side, Side.BUY)
        self.assertAlmostEqual(result.trade.price, 100.1)
        self.assertAlmostEqual(result.trade.size, 700)
        self.assertAlmostEqual(self.mm.get_inventory_state().current_inventory, 0)
        self.assertEqual(self.mm.inventory_ledger.avg_entry_price, 0.0)

    def test_get_stats(self):
        self.mm.start()
        bid, ask = self.mm.place_orders(self.mm.generate_quotes(self.market))
        self.mm.process_fill(bid.id, 100, 99.9)
        self.mm.process_fill(ask.id, 100, 100.1)
        self.clock.advance(5_000)

        stats = self.mm.get_stats()
        self.assertEqual(stats.total_trades, 2)
        self.assertAlmostEqual(stats.total_volume, 100 * 99.9 + 100 * 100.1)
        self.assertAlmostEqual(stats.realized_pnl, 100 * 0.2 - 100 * 100.1 * 0.001)
        self.assertAlmostEqual(stats.total_fees, 100 * 99.9 * 0.001 + 100 * 100.1 * 0.001)
        self.assertAlmostEqual(stats.avg_spread, 0.2 / 100.0)
        self.assertAlmostEqual(stats.inventory_turnover, 200)
        self.assertEqual(stats.unrealized_pnl, 0.0)
        self.assertEqual(stats.uptime, 5_000)
        self.assertEqual(stats.active_orders, 0)
        self.assertAlmostEqual(stats.last_price, 100.1)

        self.mm.stop()
        self.assertEqual(self.mm.get_stats().uptime, 0.0)

    def test_empty_stats(self):
        stats = self.mm.get_stats()
        self.assertEqual(stats.total_trades, 0)
        self.assertEqual(stats.avg_spread, 0.0)
        self.assertIsNone(stats.last_price)

    def test_position_and_history(self):
        bid, _ = self.mm.place_orders(self.mm.generate_quotes(self.market))
        self.mm.process_fill(bid.id, 100, 99.9)

        position = self.mm.get_position()
        self.assertEqual(position.base_balance, 100)
        self.assertAlmostEqual(position.net_exposure, 9990.0)

        history = self.mm.get_trade_history()
        self.assertEqual(len(history), 1)
        self.assertEqual(self.mm.get_trade_stats().buy_volume, 100)
        self.assertEqual(len(self.mm.get_trade_history_frame()), 1)

    def test_trade_history_limit(self):
        mm = self.make_coordinator(trade_history_limit=3)
        for _ in range(5):
            bid, _ = mm.place_orders(mm.generate_quotes(self.market))
            mm.process_fill(bid.id, 10, 99.9)

        self.assertEqual(len(mm.get_trade_history()), 3)
        self.assertEqual(mm.get_stats().total_trades, 5)

    def test_update_config(self):
        self.mm.inventory_ledger.set_inventory(800)

        with self.assertLogs('trades', level='INFO'):
            config = self.mm.update_config(inventory={'max_inventory': 500})
        self.assertEqual(config.inventory.max_inventory, 500)
        self.assertEqual(config.inventory.min_inventory, -1000)
        self.assertEqual(self.mm.inventory_ledger.get_config().max_inventory, 500)
        self.assertEqual(self.mm.get_inventory_state().current_inventory, 500)

        self.mm.update_config(spread={'base_spread': 0.004}, price_tick_size=0.01)
        self.assertEqual(self.mm.spread_model.get_config().base_spread, 0.004)
        self.assertEqual(self.mm.spread_model.price_tick_size, 0.01)

        self.mm.update_config(pool_fee=0.01, trade_history_limit=10)
        self.assertEqual(self.mm.liquidity_pool.fee, 0.01)
        self.assertEqual(self.mm.performance_tracker.history_limit, 10)
        self.assertEqual(self.mm.get_config().order_size, 100)

        with self.assertRaises(ValueError):
            self.mm.update_config(pool_fee=1.5)
        with self.assertRaises(ValueError):
            self.mm.update_config(unknown=1)

    def test_liquidity_pool_proxy(self):
        result = self.mm.initialize_liquidity_pool(10000, 15000)
        self.assertEqual(result.share_of_pool, 1.0)
        self.assertAlmostEqual(self.mm.get_pool_price(), 1.5)

        quote = self.mm.simulate_swap(100, 'A')
        swap = self.mm.execute_swap(100, 'A', min_amount_out=quote.amount_out)
        self.assertAlmostEqual(swap.amount_out, quote.amount_out)
        self.assertAlmostEqual(self.mm.get_pool_state().token_a_reserve, 10100)

        with self.assertRaises(SlippageExceededError):
            self.mm.execute_swap(100, 'A', min_amount_out=1000)

        added = self.mm.add_liquidity(1010, 5000)
        removed = self.mm.remove_liquidity(added.lp_tokens_received)
        self.assertAlmostEqual(removed.token_a_received, added.token_a_deposited)

    def test_get_metrics(self):
        metrics = self.mm.get_metrics()
        self.assertEqual(metrics['symbol'], 'TEST-USD')
        self.assertFalse(metrics['running'])
        self.assertEqual(metrics['orders']['total_active_orders'], 0)

    def test_reset(self):
        self.mm.start()
        bid, _ = self.mm.place_orders(self.mm.generate_quotes(self.market))
        self.mm.process_fill(bid.id, 50, 99.9)
        self.mm.initialize_liquidity_pool(10000, 15000)

        self.mm.reset()

        self.assertFalse(self.mm.is_active())
        self.assertEqual(self.mm.get_stats().total_trades, 0)
        self.assertEqual(self.mm.get_inventory_state().current_inventory, 0)
        self.assertEqual(self.mm.get_active_orders(), [])
        self.assertEqual(self.mm.get_pool_state().lp_token_supply, 0)


if __name__ == '__main__':
    unittest.main()
