"""Shared BDD fixtures and step definitions for the marketplace."""

import pytest
from pytest_bdd import given, parsers, then

from marketplace.notification.channel import get_email_channel
from marketplace.order.queries import get_order


@pytest.fixture()
def catalogue():
    """Vendors and products created by Given steps, keyed by name."""
    return {"vendors": {}, "products": {}}


@pytest.fixture()
def outcome():
    """Result or error of the When step."""
    return {"result": None, "error": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('an approved vendor "{brand}" selling "{product}" at {price:f} with {stock:d} in stock'))
def _(shop, catalogue, brand, product, price, stock):
    vendor_id = shop.vendor(brand)
    catalogue["vendors"][brand] = vendor_id
    catalogue["products"][product] = {
        "id": shop.product(vendor_id, price=price, stock=stock, name=product),
        "price": price,
    }


@given(parsers.cfparse('a guest order for {quantity:d} "{product}"'), target_fixture="order_id")
def _(shop, line, catalogue, quantity, product):
    entry = catalogue["products"][product]
    return shop.guest_order([line(entry["id"], price=entry["price"], quantity=quantity, name=product)])


@given(
    parsers.cfparse('a guest order mixing {first_quantity:d} "{first}" with {second_quantity:d} "{second}"'),
    target_fixture="order_id",
)
def _(shop, line, catalogue, first_quantity, first, second_quantity, second):
    lines = []
    for name, quantity in ((first, first_quantity), (second, second_quantity)):
        entry = catalogue["products"][name]
        lines.append(line(entry["id"], price=entry["price"], quantity=quantity, name=name))
    return shop.guest_order(lines)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('"{product}" has {count:d} in stock'))
def _(shop, catalogue, product, count):
    assert shop.stock(catalogue["products"][product]["id"]) == count


@then("the order is paid")
def _(order_id):
    order = get_order(order_id)
    assert order.is_paid is True
    assert order.paid_at is not None


@then("the order is not paid")
def _(order_id):
    assert get_order(order_id).is_paid is False


@then("the buyer receives a purchase receipt")
def _(order_id):
    subjects = [email["subject"] for email in get_email_channel().sent_emails]
    assert subjects == [f"Order Confirmation - #{order_id}"]
