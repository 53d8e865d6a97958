"""Marketplace settings: delivery options, tax, paging and policy switches.

Settings are an explicit value handed to the pricing calculator, the vendor
partitioner and the analytics aggregator. `current_settings()` rebuilds the
object from the active domain's configuration on every call; nothing is
cached between operations, so editing `[custom.marketplace]` (or the
domain's config dict at runtime) takes effect on the next operation.
"""

from collections.abc import Mapping
from typing import Any

from protean.exceptions import ValidationError as ProteanValidationError
from protean.utils.globals import current_domain
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator


class DeliveryOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    days_to_deliver: int = Field(ge=0)
    shipping_price: float = Field(ge=0)
    free_shipping_min_price: float = Field(default=0.0, ge=0)


DEFAULT_DELIVERY_OPTIONS = (
    DeliveryOption(name="Tomorrow", days_to_deliver=1, shipping_price=12.9, free_shipping_min_price=0),
    DeliveryOption(name="Next 3 Days", days_to_deliver=3, shipping_price=6.9, free_shipping_min_price=0),
    DeliveryOption(name="Next 5 Days", days_to_deliver=5, shipping_price=4.9, free_shipping_min_price=35),
)


class MarketplaceSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    delivery_options: tuple[DeliveryOption, ...] = DEFAULT_DELIVERY_OPTIONS
    tax_rate: float = Field(default=0.15, ge=0, le=1)
    page_size: int = Field(default=9, ge=1)
    payment_methods: tuple[str, ...] = ("PayPal", "Stripe", "Cash On Delivery")
    default_payment_method: str = "PayPal"
    adjust_inventory_on_payment: bool = True
    expose_buyer_contact_to_vendors: bool = False
    analytics_months: int = Field(default=6, ge=1)
    top_products_limit: int = Field(default=5, ge=1)

    @model_validator(mode="after")
    def _check_consistency(self) -> "MarketplaceSettings":
        if not self.delivery_options:
            raise ValueError("At least one delivery option is required")
        if self.default_payment_method not in self.payment_methods:
            raise ValueError("Default payment method must be one of the payment methods")
        return self

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "MarketplaceSettings":
        """Build settings from a plain mapping, reporting problems as a domain ValidationError."""
        try:
            return cls.model_validate(dict(data or {}))
        except ValidationError as exc:
            raise ProteanValidationError(
                {"settings": [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]}
            ) from exc


def current_settings() -> MarketplaceSettings:
    """Read the settings of the active domain. Re-evaluated on every call."""
    custom = current_domain.config.get("custom") or {}
    return MarketplaceSettings.from_mapping(custom.get("marketplace"))
