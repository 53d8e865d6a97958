import json
import os
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from unittest.mock import patch
from uuid import uuid4

import pytest

ADDRESS = {
    "full_name": "Ada Buyer",
    "street": "1 Market St",
    "city": "Springfield",
    "postal_code": "12345",
    "country": "US",
    "province": "IL",
    "phone": "555-0100",
}


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Fetch and activate the domain by pushing the associated domain_context. The activated domain can then be
    referred to elsewhere as `current_domain`
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env

    from marketplace.domain import marketplace

    marketplace.init()
    marketplace.domain_context().push()


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session", autouse=True)
def setup_db(request):
    from marketplace.domain import marketplace
    from marketplace.utils.db import drop_db, setup_db

    setup_db(marketplace)

    yield

    drop_db(marketplace)


@pytest.fixture(autouse=True)
def run_around_tests():
    """Fixture to automatically cleanup infrastructure after every test"""
    yield

    from protean import current_domain

    from marketplace.notification.channel import reset_email_channel
    from marketplace.payment.gateway import reset_gateway

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    current_domain.event_store.store._data_reset()

    reset_gateway()
    reset_email_channel()


@pytest.fixture
def override_settings(monkeypatch):
    """Replace marketplace settings for one test: ``override_settings(tax_rate=0.2)``."""
    from protean import current_domain

    def _override(**values):
        custom = dict(current_domain.config.get("custom") or {})
        custom["marketplace"] = {**(custom.get("marketplace") or {}), **values}
        monkeypatch.setitem(current_domain.config, "custom", custom)

    return _override


@contextmanager
def placed_at(moment: datetime):
    """Freeze the clock orders are stamped with."""
    with patch("marketplace.order.order.datetime") as clock:
        clock.now.return_value = moment
        yield


def cart_line(product_id, price=20.0, quantity=1, **overrides) -> dict:
    line = {
        "product_id": str(product_id),
        "name": overrides.pop("name", "Widget"),
        "slug": overrides.pop("slug", "widget"),
        "image": overrides.pop("image", "/images/widget.jpg"),
        "category": overrides.pop("category", "Gadgets"),
        "price": price,
        "quantity": quantity,
    }
    line.update(overrides)
    return line


class Shop:
    """Builds marketplace state through the same commands the API uses."""

    def account(self, name="Ada Buyer", email=None):
        from protean import current_domain

        from marketplace.account.registration import RegisterAccount

        email = email or f"buyer-{uuid4().hex[:8]}@example.com"
        return current_domain.process(RegisterAccount(name=name, email=email), asynchronous=False)

    def vendor(self, brand_name="Acme Goods", approve=True):
        from protean import current_domain

        from marketplace.vendor.registration import RegisterVendor, UpdateVendorStatus

        user_id = self.account(name=f"{brand_name} Owner")
        vendor_id = current_domain.process(
            RegisterVendor(user_id=user_id, brand_name=brand_name, description=f"{brand_name} storefront"),
            asynchronous=False,
        )
        if approve:
            current_domain.process(UpdateVendorStatus(vendor_id=vendor_id, status="approved"), asynchronous=False)
        return vendor_id

    def product(self, vendor_id, price=20.0, stock=10, name="Widget", category="Gadgets"):
        from protean import current_domain

        from marketplace.product.management import RegisterProduct

        return current_domain.process(
            RegisterProduct(
                vendor_id=vendor_id,
                name=name,
                slug=name.lower().replace(" ", "-"),
                image=f"/images/{name.lower().replace(' ', '-')}.jpg",
                category=category,
                price=price,
                count_in_stock=stock,
            ),
            asynchronous=False,
        )

    def guest_order(self, lines, name="Guest Buyer", email="guest@example.com", **options):
        from protean import current_domain

        from marketplace.order.placement import PlaceGuestOrder

        return current_domain.process(
            PlaceGuestOrder(
                guest_name=name,
                guest_email=email,
                items=json.dumps(lines),
                shipping_address=json.dumps(options.pop("shipping_address", ADDRESS)),
                **options,
            ),
            asynchronous=False,
        )

    def order(self, user_id, lines, **options):
        from protean import current_domain

        from marketplace.order.placement import PlaceOrder

        return current_domain.process(
            PlaceOrder(
                user_id=user_id,
                items=json.dumps(lines),
                shipping_address=json.dumps(options.pop("shipping_address", ADDRESS)),
                **options,
            ),
            asynchronous=False,
        )

    def pay(self, order_id, settled_by="operator"):
        from protean import current_domain

        from marketplace.order.settlement import MarkOrderPaid

        return current_domain.process(MarkOrderPaid(order_id=order_id, settled_by=settled_by), asynchronous=False)

    def deliver(self, order_id):
        from protean import current_domain

        from marketplace.order.settlement import MarkOrderDelivered

        return current_domain.process(MarkOrderDelivered(order_id=order_id), asynchronous=False)

    def stock(self, product_id):
        from protean import current_domain

        from marketplace.product.product import Product

        return current_domain.repository_for(Product).get(product_id).count_in_stock


@pytest.fixture
def shop():
    return Shop()


@pytest.fixture
def line():
    """Cart line builder: ``line(product_id, price=50.0, quantity=2)``."""
    return cart_line


@pytest.fixture
def clock():
    """``with clock(datetime(...)):`` stamps orders placed inside with that time."""
    return placed_at


@pytest.fixture
def address():
    return dict(ADDRESS)
