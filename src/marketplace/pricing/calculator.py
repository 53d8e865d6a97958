"""Pricing calculator: item, shipping, tax and total for a cart.

A pure function of its inputs. Only the reported figures are rounded; sums
are carried at full precision until then. Shipping and tax stay ``None``
until a shipping address is known, which is a valid intermediate state for
cart previews.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from protean.exceptions import ValidationError

from marketplace.shared.money import round2
from marketplace.shared.settings import DeliveryOption, MarketplaceSettings


@dataclass(frozen=True)
class PricingResult:
    items_price: float
    shipping_price: float | None
    tax_price: float | None
    total_price: float
    delivery_option_index: int
    delivery_option: DeliveryOption
    expected_delivery_date: datetime

    @property
    def is_complete(self) -> bool:
        return self.shipping_price is not None and self.tax_price is not None


def _line_value(item) -> tuple[float, int]:
    if isinstance(item, Mapping):
        return item["price"], item["quantity"]
    return item.price, item.quantity


def select_delivery_option(settings: MarketplaceSettings, index: int | None) -> tuple[int, DeliveryOption]:
    """Return the chosen option, defaulting to the last (slowest) one."""
    options = settings.delivery_options
    if index is None:
        index = len(options) - 1
    if not 0 <= index < len(options):
        raise ValidationError({"delivery_option_index": [f"Unknown delivery option {index}"]})
    return index, options[index]


def calculate_pricing(
    items: Iterable,
    settings: MarketplaceSettings,
    shipping_address=None,
    delivery_option_index: int | None = None,
    now: datetime | None = None,
) -> PricingResult:
    """Price a cart.

    Args:
        items: line items exposing ``price`` and ``quantity`` (mappings or objects).
        settings: delivery options and tax rate to price with.
        shipping_address: any truthy value; shipping and tax are only priced once present.
        delivery_option_index: index into ``settings.delivery_options``; last option when omitted.
        now: reference time for the expected delivery date.
    """
    items_total = 0.0
    for item in items:
        price, quantity = _line_value(item)
        items_total += price * quantity
    items_price = round2(items_total)

    index, option = select_delivery_option(settings, delivery_option_index)

    shipping_price = None
    tax_price = None
    if shipping_address:
        threshold = option.free_shipping_min_price
        shipping_price = 0.0 if threshold > 0 and items_price >= threshold else round2(option.shipping_price)
        tax_price = round2(items_price * settings.tax_rate)

    total_price = round2(items_price + (shipping_price or 0.0) + (tax_price or 0.0))

    reference = now or datetime.now(UTC)
    return PricingResult(
        items_price=items_price,
        shipping_price=shipping_price,
        tax_price=tax_price,
        total_price=total_price,
        delivery_option_index=index,
        delivery_option=option,
        expected_delivery_date=reference + timedelta(days=option.days_to_deliver),
    )
