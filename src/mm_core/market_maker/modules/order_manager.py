"""
Order management module for the market making core.
Holds the open-order table and drives order status transitions.
"""

from typing import Dict, List, Optional
import logging

from .data_types import Order, OrderStatus, Side

logger = logging.getLogger(__name__)


class OrderManager:
    """Manages the lifecycle of resting orders"""

    def __init__(self, clock, id_generator):
        self.clock = clock
        self.id_generator = id_generator
        self.active_orders: Dict[str, Order] = {}
        self.order_counts = {status: 0 for status in OrderStatus}

    def create_order(self, side: Side, price: float, size: float) -> Order:
        """Create an order; zero-size orders come back rejected and are not tracked"""
        now = self.clock.now()
        order = Order(
            id=self.id_generator.next_id(),
            side=Side(side),
            price=price,
            size=size,
            filled_size=0.0,
            status=OrderStatus.PENDING if size > 0 else OrderStatus.REJECTED,
            created_at=now,
            updated_at=now,
        )

        if order.status is OrderStatus.REJECTED:
            logger.warning(f"Rejected {order.side.value} order at {price}: no size available")
        else:
            self.active_orders[order.id] = order
            logger.debug(f"Placed {order.side.value} order {order.id}: {size} @ {price}")

        self.order_counts[order.status] += 1
        return order

    def get_order(self, order_id: str) -> Optional[Order]:
        return self.active_orders.get(order_id)

    def apply_fill(self, order_id: str, filled_size: float) -> Optional[Order]:
        """Add a fill to an open order; returns None for unknown or closed orders"""
        order = self.active_orders.get(order_id)
        if order is None:
            logger.warning(f"Fill for unknown order {order_id}")
            return None

        order.filled_size += filled_size
        order.updated_at = self.clock.now()

        if order.filled_size >= order.size:
            order.filled_size = order.size
            order.status = OrderStatus.FILLED
            del self.active_orders[order_id]
            self.order_counts[OrderStatus.FILLED] += 1
        elif order.status is OrderStatus.PENDING:
            order.status = OrderStatus.PARTIAL
            self.order_counts[OrderStatus.PARTIAL] += 1

        return order

    def cancel_order(self, order_id: str) -> bool:
        order = self.active_orders.pop(order_id, None)
        if order is None:
            return False

        order.status = OrderStatus.CANCELLED
        order.updated_at = self.clock.now()
        self.order_counts[OrderStatus.CANCELLED] += 1
        logger.debug(f"Cancelled order {order_id}")
        return True

    def cancel_all_orders(self) -> int:
        """Cancel all active orders"""
        cancelled = sum(1 for order_id in list(self.active_orders) if self.cancel_order(order_id))
        if cancelled:
            logger.info(f"Cancelled {cancelled} orders")
        return cancelled

    def get_active_orders(self) -> List[Order]:
        return list(self.active_orders.values())

    def get_order_metrics(self) -> Dict:
        """Get order management metrics"""
        return {
            'total_active_orders': len(self.active_orders),
            'status_counts': {status.value: count for status, count in self.order_counts.items()},
        }

    def clear(self) -> None:
        self.active_orders.clear()
        self.order_counts = {status: 0 for status in OrderStatus}
