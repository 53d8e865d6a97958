"""Order aggregate: the single source of truth for a purchase.

An order is created once, from either a registered account or a guest, with
its prices frozen at purchase time. Afterwards it only moves forward through
two one-way flags: paid, then delivered.

Buyer and payment result are tagged unions stored as embedded value objects.
The ``kind`` discriminant decides which of the value object's fields are
populated, and invariants reject any mixed shape.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from marketplace.domain import marketplace
from marketplace.order.events import OrderDelivered, OrderPaid, OrderPlaced
from marketplace.shared.errors import AlreadyDeliveredError, AlreadyPaidError, NotPaidError

ORDER_SCHEMA_VERSION = 1


class BuyerKind(Enum):
    REGISTERED = "Registered"
    GUEST = "Guest"


class PaymentResultKind(Enum):
    GATEWAY = "Gateway"
    MANUAL = "Manual"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@marketplace.value_object(part_of="Order")
class Buyer:
    """Who placed the order.

    ``Registered`` carries only the account id; name and email live on the
    account. ``Guest`` carries name and email and has no account behind it.
    """

    kind = String(required=True, choices=BuyerKind)
    user_id = Identifier()
    name = String(max_length=100)
    email = String(max_length=254)

    @invariant.post
    def fields_match_kind(self):
        if self.kind == BuyerKind.REGISTERED.value:
            if not self.user_id:
                raise ValidationError({"buyer": ["Registered buyer requires a user id"]})
            if self.name or self.email:
                raise ValidationError({"buyer": ["Registered buyer cannot carry guest contact details"]})
        elif self.kind == BuyerKind.GUEST.value:
            if self.user_id:
                raise ValidationError({"buyer": ["Guest buyer cannot reference an account"]})
            if not self.name or not self.email:
                raise ValidationError({"buyer": ["Guest buyer requires a name and an email"]})
            if "@" not in self.email:
                raise ValidationError({"buyer": ["Invalid guest email address"]})

    @classmethod
    def registered(cls, user_id):
        return cls(kind=BuyerKind.REGISTERED.value, user_id=str(user_id))

    @classmethod
    def guest(cls, name, email):
        return cls(kind=BuyerKind.GUEST.value, name=name.strip(), email=email.strip().lower())

    @property
    def is_guest(self) -> bool:
        return self.kind == BuyerKind.GUEST.value


@marketplace.value_object(part_of="Order")
class ShippingAddress:
    """Where the order ships. Captured at checkout and never edited."""

    full_name = String(required=True, max_length=100)
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)
    province = String(max_length=100)
    phone = String(required=True, max_length=30)


@marketplace.value_object(part_of="Order")
class PaymentResult:
    """How the order was settled.

    ``Gateway`` records the payment provider's transaction; ``Manual`` records
    who settled it by hand (cash on delivery, operator action).
    """

    kind = String(required=True, choices=PaymentResultKind)
    transaction_id = String(max_length=255)
    status = String(max_length=50)
    email_address = String(max_length=254)
    settled_by = String(max_length=100)

    @invariant.post
    def fields_match_kind(self):
        if self.kind == PaymentResultKind.GATEWAY.value:
            if not self.transaction_id or not self.status:
                raise ValidationError({"payment_result": ["Gateway result requires transaction id and status"]})
            if self.settled_by:
                raise ValidationError({"payment_result": ["Gateway result cannot name a manual settler"]})
        elif self.kind == PaymentResultKind.MANUAL.value:
            if not self.settled_by:
                raise ValidationError({"payment_result": ["Manual settlement must name who settled it"]})
            if self.transaction_id:
                raise ValidationError({"payment_result": ["Manual settlement cannot carry a transaction id"]})

    @classmethod
    def gateway(cls, transaction_id, status, email_address=None):
        return cls(
            kind=PaymentResultKind.GATEWAY.value,
            transaction_id=transaction_id,
            status=status,
            email_address=email_address,
        )

    @classmethod
    def manual(cls, settled_by):
        return cls(kind=PaymentResultKind.MANUAL.value, settled_by=settled_by)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@marketplace.entity(part_of="Order")
class OrderLineItem:
    """One cart line, with the product's details as they were at purchase time."""

    product_id = Identifier(required=True)
    client_id = String(max_length=100)
    name = String(required=True, max_length=255)
    slug = String(required=True, max_length=255)
    image = String(max_length=500)
    category = String(required=True, max_length=100)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    size = String(max_length=50)
    color = String(max_length=50)

    @property
    def line_total(self) -> float:
        return self.price * self.quantity

    def snapshot(self) -> dict:
        return {
            "id": str(self.id),
            "product_id": str(self.product_id),
            "name": self.name,
            "slug": self.slug,
            "image": self.image,
            "category": self.category,
            "price": self.price,
            "quantity": self.quantity,
            "size": self.size,
            "color": self.color,
        }


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@marketplace.aggregate
class Order:
    buyer = ValueObject(Buyer, required=True)
    items = HasMany(OrderLineItem)
    shipping_address = ValueObject(ShippingAddress, required=True)
    delivery_option = String(max_length=100)
    expected_delivery_date = DateTime(required=True)
    payment_method = String(required=True, max_length=50)
    payment_result = ValueObject(PaymentResult)
    items_price = Float(required=True, min_value=0.0)
    shipping_price = Float(required=True, min_value=0.0)
    tax_price = Float(required=True, min_value=0.0)
    total_price = Float(required=True, min_value=0.0)
    is_paid = Boolean(default=False)
    paid_at = DateTime()
    is_delivered = Boolean(default=False)
    delivered_at = DateTime()
    schema_version = Integer(default=ORDER_SCHEMA_VERSION)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def paid_timestamp_matches_flag(self):
        if bool(self.is_paid) != (self.paid_at is not None):
            raise ValidationError({"paid_at": ["paid_at is set exactly when the order is paid"]})

    @invariant.post
    def delivery_requires_payment(self):
        if self.is_delivered and not self.is_paid:
            raise ValidationError({"is_delivered": ["An order cannot be delivered before it is paid"]})
        if bool(self.is_delivered) != (self.delivered_at is not None):
            raise ValidationError({"delivered_at": ["delivered_at is set exactly when the order is delivered"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, buyer, items, shipping_address, payment_method, pricing):
        """Create an unpaid order with prices frozen from ``pricing``.

        Args:
            buyer: a `Buyer` value object.
            items: `OrderLineItem` entities.
            shipping_address: a `ShippingAddress` value object.
            payment_method: name of the payment method chosen at checkout.
            pricing: a complete `PricingResult` for the same items and address.
        """
        if not items:
            raise ValidationError({"items": ["An order must contain at least one item"]})

        now = datetime.now(UTC)
        order = cls(
            buyer=buyer,
            items=items,
            shipping_address=shipping_address,
            delivery_option=pricing.delivery_option.name,
            expected_delivery_date=pricing.expected_delivery_date,
            payment_method=payment_method,
            items_price=pricing.items_price,
            shipping_price=pricing.shipping_price,
            tax_price=pricing.tax_price,
            total_price=pricing.total_price,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                buyer_kind=buyer.kind,
                buyer_user_id=buyer.user_id,
                items=json.dumps([item.snapshot() for item in order.items]),
                items_price=order.items_price,
                shipping_price=order.shipping_price,
                tax_price=order.tax_price,
                total_price=order.total_price,
                payment_method=payment_method,
                created_at=now,
            )
        )
        return order

    @property
    def is_guest(self) -> bool:
        return self.buyer.is_guest

    # -------------------------------------------------------------------
    # Lifecycle transitions
    # -------------------------------------------------------------------
    def mark_paid(self, payment_result, buyer_name=None, buyer_email=None):
        """Settle the order. A paid order can never be settled again."""
        if self.is_paid:
            raise AlreadyPaidError({"order_id": [f"Order {self.id} is already paid"]})

        now = datetime.now(UTC)
        with atomic_change(self):
            self.is_paid = True
            self.paid_at = now
            self.payment_result = payment_result
            self.updated_at = now

        self.raise_(
            OrderPaid(
                order_id=str(self.id),
                buyer_kind=self.buyer.kind,
                buyer_user_id=self.buyer.user_id,
                buyer_name=buyer_name,
                buyer_email=buyer_email,
                total_price=self.total_price,
                payment_kind=payment_result.kind,
                transaction_id=payment_result.transaction_id,
                paid_at=now,
            )
        )

    def mark_delivered(self, buyer_name=None, buyer_email=None):
        if not self.is_paid:
            raise NotPaidError({"order_id": [f"Order {self.id} must be paid before it is delivered"]})
        if self.is_delivered:
            raise AlreadyDeliveredError({"order_id": [f"Order {self.id} is already delivered"]})

        now = datetime.now(UTC)
        with atomic_change(self):
            self.is_delivered = True
            self.delivered_at = now
            self.updated_at = now

        self.raise_(
            OrderDelivered(
                order_id=str(self.id),
                buyer_kind=self.buyer.kind,
                buyer_user_id=self.buyer.user_id,
                buyer_name=buyer_name,
                buyer_email=buyer_email,
                delivered_at=now,
            )
        )
