"""BDD tests for order settlement."""

from pytest_bdd import given, scenarios, then, when

from marketplace.shared.errors import AlreadyPaidError, NotPaidError, OrderNotCompletedError

scenarios("features/order_settlement.feature")


@given("the order has been paid")
def _(shop, order_id):
    shop.pay(order_id)


@when("the order is marked paid")
def _(shop, order_id, outcome):
    try:
        outcome["result"] = shop.pay(order_id)
    except (AlreadyPaidError, OrderNotCompletedError) as exc:
        outcome["error"] = exc


@when("the order is marked delivered")
def _(shop, order_id, outcome):
    try:
        outcome["result"] = shop.deliver(order_id)
    except NotPaidError as exc:
        outcome["error"] = exc


@then("the settlement is rejected as already paid")
def _(outcome):
    assert isinstance(outcome["error"], AlreadyPaidError)


@then("the settlement is rejected as not completed")
def _(outcome):
    assert isinstance(outcome["error"], OrderNotCompletedError)
    assert outcome["error"].messages == {"order": ["Order could not be completed, please try again"]}


@then("the delivery is rejected as not paid")
def _(outcome):
    assert isinstance(outcome["error"], NotPaidError)
