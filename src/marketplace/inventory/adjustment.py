"""Inventory adjustment for a paid order.

Runs inside the unit of work of the command that settles the order. Every
product is loaded and checked before any stock is written, and any failure
propagates out of the unit of work so that the paid flag and all stock
writes are discarded together. Conflicting writers to one product are
caught by aggregate versioning on save (``ExpectedVersionError``).
"""

from collections import defaultdict
from dataclasses import dataclass

import structlog
from protean.utils.globals import current_domain

from marketplace.product.management import get_product
from marketplace.product.product import Product
from marketplace.shared.errors import InsufficientStockError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StockMovement:
    product_id: str
    quantity: int
    previous_count: int
    new_count: int


class InventoryAdjustment:
    def __init__(self, order):
        self.order = order

    def quantities(self) -> dict[str, int]:
        """Units to remove per product; lines for the same product are summed."""
        totals: dict[str, int] = defaultdict(int)
        for item in self.order.items:
            totals[str(item.product_id)] += item.quantity
        return dict(totals)

    def plan(self) -> list[tuple[Product, int]]:
        """Load and check every product. Raises before anything is written."""
        planned = []
        for product_id, quantity in self.quantities().items():
            product = get_product(product_id)
            if not product.can_supply(quantity):
                raise InsufficientStockError(
                    {"count_in_stock": [f"Insufficient stock for product {product_id}"]}
                )
            planned.append((product, quantity))
        return planned

    def apply(self) -> list[StockMovement]:
        repo = current_domain.repository_for(Product)

        movements = []
        for product, quantity in self.plan():
            previous = product.count_in_stock
            product.decrement_stock(quantity)
            repo.add(product)
            movements.append(
                StockMovement(
                    product_id=str(product.id),
                    quantity=quantity,
                    previous_count=previous,
                    new_count=product.count_in_stock,
                )
            )

        logger.info(
            "Stock adjusted for order",
            order_id=str(self.order.id),
            products=len(movements),
            units=sum(m.quantity for m in movements),
        )
        return movements
