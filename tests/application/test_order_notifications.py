import pytest

from marketplace.notification.channel import get_email_channel
from marketplace.order.queries import get_order
from marketplace.shared.errors import OrderNotCompletedError


@pytest.fixture
def product_id(shop):
    return shop.product(shop.vendor(), price=30.0, stock=10)


class TestPurchaseReceipt:
    def test_guest_receives_receipt_on_payment(self, shop, line, product_id):
        order_id = shop.guest_order([line(product_id, price=30.0)], email="guest@example.com")

        shop.pay(order_id)

        sent = get_email_channel().sent_emails
        assert len(sent) == 1
        assert sent[0]["to"] == "guest@example.com"
        assert sent[0]["subject"] == f"Order Confirmation - #{order_id}"
        assert "Guest Buyer" in sent[0]["body"]

    def test_registered_buyer_receipt_uses_account_email(self, shop, line, product_id):
        user_id = shop.account(name="Reg Buyer", email="Reg@Example.com")
        order_id = shop.order(user_id, [line(product_id, price=30.0)])

        shop.pay(order_id)

        sent = get_email_channel().sent_emails
        assert [email["to"] for email in sent] == ["reg@example.com"]
        assert "Reg Buyer" in sent[0]["body"]

    def test_no_receipt_before_payment(self, shop, line, product_id):
        shop.guest_order([line(product_id)])

        assert get_email_channel().sent_emails == []

    def test_failed_settlement_sends_nothing(self, shop, line):
        scarce = shop.product(shop.vendor("Scarce Goods"), stock=0)
        order_id = shop.guest_order([line(scarce)])

        with pytest.raises(OrderNotCompletedError):
            shop.pay(order_id)

        assert get_email_channel().sent_emails == []

    def test_failed_delivery_does_not_block_payment(self, shop, line, product_id):
        get_email_channel().configure(should_succeed=False)
        order_id = shop.guest_order([line(product_id)])

        shop.pay(order_id)

        assert get_order(order_id).is_paid is True


class TestDeliveryNotice:
    def test_buyer_is_told_about_delivery(self, shop, line, product_id):
        order_id = shop.guest_order([line(product_id)])
        shop.pay(order_id)

        shop.deliver(order_id)

        subjects = [email["subject"] for email in get_email_channel().sent_emails]
        assert subjects == [f"Order Confirmation - #{order_id}", f"Your order #{order_id} has been delivered"]
