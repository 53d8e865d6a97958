"""Product aggregate: the slice of a catalogue product the order core owns.

Each product belongs to exactly one vendor and carries the stock count that
is decremented when an order containing it is paid.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace
from marketplace.shared.errors import InsufficientStockError
from marketplace.shared.paging import scan


@marketplace.aggregate
class Product:
    vendor_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    slug = String(required=True, max_length=255)
    image = String(max_length=500)
    category = String(required=True, max_length=100)
    price = Float(required=True, min_value=0.0)
    count_in_stock = Integer(default=0)
    created_at = DateTime(default=lambda: datetime.now(UTC))

    @invariant.post
    def stock_cannot_be_negative(self):
        if self.count_in_stock is not None and self.count_in_stock < 0:
            raise ValidationError({"count_in_stock": ["Stock cannot be negative"]})

    def can_supply(self, quantity: int) -> bool:
        return (self.count_in_stock or 0) >= quantity

    def decrement_stock(self, quantity: int):
        if not self.can_supply(quantity):
            raise InsufficientStockError(
                {"count_in_stock": [f"Insufficient stock for {self.name}: {self.count_in_stock} < {quantity}"]}
            )
        self.count_in_stock -= quantity

    def restock(self, quantity: int):
        if quantity < 1:
            raise ValidationError({"quantity": ["Restock quantity must be positive"]})
        self.count_in_stock = (self.count_in_stock or 0) + quantity


@marketplace.repository(part_of=Product)
class ProductRepository:
    def ids_for_vendor(self, vendor_id) -> set[str]:
        """All product ids owned by one vendor."""
        return {str(product.id) for product in scan(self._dao.query.filter(vendor_id=str(vendor_id)))}
