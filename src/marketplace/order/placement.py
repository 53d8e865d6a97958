"""Order placement for registered and guest checkout.

Both commands carry the cart as JSON text, the way a checkout form posts it.
The cart is validated, product references are normalised and the order is
priced with the current marketplace settings before anything is persisted.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from marketplace.account.account import Account
from marketplace.domain import marketplace
from marketplace.order.order import Buyer, Order, OrderLineItem, ShippingAddress
from marketplace.pricing.calculator import calculate_pricing
from marketplace.shared.identifiers import normalize_product_ref
from marketplace.shared.settings import MarketplaceSettings, current_settings

logger = structlog.get_logger(__name__)

_LINE_FIELDS = ("client_id", "name", "slug", "image", "category", "price", "quantity", "size", "color")
_ADDRESS_FIELDS = ("full_name", "street", "city", "postal_code", "country", "province", "phone")


@marketplace.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier(required=True)
    items = Text(required=True)  # JSON list of cart lines
    shipping_address = Text(required=True)  # JSON object
    payment_method = String(max_length=50)
    delivery_option_index = Integer(min_value=0)


@marketplace.command(part_of="Order")
class PlaceGuestOrder:
    guest_name = String(required=True, max_length=100)
    guest_email = String(required=True, max_length=254)
    items = Text(required=True)
    shipping_address = Text(required=True)
    payment_method = String(max_length=50)
    delivery_option_index = Integer(min_value=0)


def _decode(raw: str, field: str, expected: type):
    try:
        value = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as exc:
        raise ValidationError({field: ["Malformed JSON"]}) from exc
    if not isinstance(value, expected):
        raise ValidationError({field: [f"Expected a JSON {expected.__name__}"]})
    return value


def build_line_items(items_data: list) -> list[OrderLineItem]:
    if not items_data:
        raise ValidationError({"items": ["Cart is empty"]})

    lines = []
    for position, line in enumerate(items_data):
        if not isinstance(line, dict):
            raise ValidationError({"items": [f"Line {position} is not an object"]})
        product_ref = line.get("product_id", line.get("product"))
        lines.append(
            OrderLineItem(
                product_id=normalize_product_ref(product_ref, field=f"items[{position}].product_id"),
                **{key: line[key] for key in _LINE_FIELDS if line.get(key) is not None},
            )
        )
    return lines


def build_shipping_address(address_data: dict) -> ShippingAddress:
    return ShippingAddress(**{key: address_data.get(key) for key in _ADDRESS_FIELDS})


def resolve_payment_method(payment_method: str | None, settings: MarketplaceSettings) -> str:
    method = payment_method or settings.default_payment_method
    if method not in settings.payment_methods:
        raise ValidationError({"payment_method": [f"Unsupported payment method '{method}'"]})
    return method


def place_order(buyer: Buyer, command) -> Order:
    """Validate, price and persist a new order for ``buyer``."""
    settings = current_settings()

    items = build_line_items(_decode(command.items, "items", list))
    shipping_address = build_shipping_address(_decode(command.shipping_address, "shipping_address", dict))
    payment_method = resolve_payment_method(command.payment_method, settings)

    pricing = calculate_pricing(
        items,
        settings,
        shipping_address=shipping_address,
        delivery_option_index=command.delivery_option_index,
    )

    order = Order.place(
        buyer=buyer,
        items=items,
        shipping_address=shipping_address,
        payment_method=payment_method,
        pricing=pricing,
    )
    current_domain.repository_for(Order).add(order)

    logger.info(
        "Order placed",
        order_id=str(order.id),
        buyer_kind=buyer.kind,
        line_count=len(items),
        total_price=order.total_price,
    )
    return order


@marketplace.command_handler(part_of=Order)
class OrderPlacementHandler:
    @handle(PlaceOrder)
    def place_registered_order(self, command):
        try:
            current_domain.repository_for(Account).get(command.user_id)
        except ObjectNotFoundError as exc:
            raise ValidationError({"user_id": ["Unknown account"]}) from exc

        order = place_order(Buyer.registered(command.user_id), command)
        return str(order.id)

    @handle(PlaceGuestOrder)
    def place_guest_order(self, command):
        order = place_order(Buyer.guest(command.guest_name, command.guest_email), command)
        return str(order.id)
