"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, String, Text

from marketplace.domain import marketplace


@marketplace.event(part_of="Order")
class OrderPlaced:
    __version__ = 1

    order_id = Identifier(required=True)
    buyer_kind = String(required=True)
    buyer_user_id = Identifier()
    items = Text(required=True)  # JSON list of line snapshots, each with its line id
    items_price = Float(required=True)
    shipping_price = Float(required=True)
    tax_price = Float(required=True)
    total_price = Float(required=True)
    payment_method = String(required=True)
    created_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderPaid:
    __version__ = 1

    order_id = Identifier(required=True)
    buyer_kind = String(required=True)
    buyer_user_id = Identifier()
    buyer_name = String()
    buyer_email = String()
    total_price = Float(required=True)
    payment_kind = String(required=True)
    transaction_id = String()
    paid_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderDelivered:
    __version__ = 1

    order_id = Identifier(required=True)
    buyer_kind = String(required=True)
    buyer_user_id = Identifier()
    buyer_name = String()
    buyer_email = String()
    delivered_at = DateTime(required=True)
