from uuid import uuid4

import pytest
from protean.exceptions import ValidationError

from marketplace.product.product import Product
from marketplace.shared.errors import InsufficientStockError
from marketplace.vendor.vendor import Vendor, VendorStatus


def _product(stock=5):
    return Product(
        vendor_id=str(uuid4()),
        name="Lamp",
        slug="lamp",
        category="Home",
        price=25.0,
        count_in_stock=stock,
    )


class TestStock:
    def test_decrement(self):
        product = _product(stock=5)

        product.decrement_stock(3)

        assert product.count_in_stock == 2

    def test_decrement_to_zero(self):
        product = _product(stock=2)

        product.decrement_stock(2)

        assert product.count_in_stock == 0

    def test_cannot_oversell(self):
        product = _product(stock=1)

        with pytest.raises(InsufficientStockError):
            product.decrement_stock(2)

        assert product.count_in_stock == 1

    def test_insufficient_stock_is_a_validation_error(self):
        assert issubclass(InsufficientStockError, ValidationError)

    def test_restock(self):
        product = _product(stock=0)

        product.restock(4)

        assert product.count_in_stock == 4

    def test_restock_requires_positive_quantity(self):
        with pytest.raises(ValidationError):
            _product().restock(0)

    def test_negative_stock_is_rejected(self):
        with pytest.raises(ValidationError):
            _product(stock=-1)


class TestVendorStatus:
    def _vendor(self):
        return Vendor.register(user_id=str(uuid4()), brand_name="Acme", description="Acme storefront")

    def test_new_vendor_is_pending(self):
        vendor = self._vendor()

        assert vendor.status == VendorStatus.PENDING.value
        assert vendor.is_approved is False

    def test_approval(self):
        vendor = self._vendor()

        vendor.change_status("approved")

        assert vendor.is_approved is True
        assert vendor._events[-1].previous_status == "pending"

    def test_unknown_status_is_rejected(self):
        with pytest.raises(ValidationError):
            self._vendor().change_status("suspended")
