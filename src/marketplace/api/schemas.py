"""Pydantic request/response schemas for the marketplace API.

These are external contracts, separate from the domain's commands and
read models.
"""

import json
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class ShippingAddressSchema(BaseModel):
    full_name: str
    street: str
    city: str
    postal_code: str
    country: str
    province: str | None = None
    phone: str


class CartItemSchema(BaseModel):
    product_id: str
    client_id: str | None = None
    name: str
    slug: str
    image: str | None = None
    category: str
    price: float = Field(ge=0)
    quantity: int = Field(ge=1)
    size: str | None = None
    color: str | None = None


class CartSchema(BaseModel):
    items: list[CartItemSchema] = Field(min_length=1)
    shipping_address: ShippingAddressSchema
    payment_method: str | None = None
    delivery_option_index: int | None = Field(default=None, ge=0)

    def items_json(self) -> str:
        return json.dumps([item.model_dump(exclude_none=True) for item in self.items])

    def address_json(self) -> str:
        return json.dumps(self.shipping_address.model_dump())


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------
class PlaceOrderRequest(CartSchema):
    user_id: str


class PlaceGuestOrderRequest(CartSchema):
    name: str = Field(min_length=1, max_length=100)
    email: str = Field(pattern=EMAIL_PATTERN)


class QuoteRequest(BaseModel):
    items: list[CartItemSchema] = Field(min_length=1)
    shipping_address: ShippingAddressSchema | None = None
    delivery_option_index: int | None = Field(default=None, ge=0)


class MarkPaidRequest(BaseModel):
    settled_by: str = "operator"


class ConfirmPaymentRequest(BaseModel):
    payment_reference: str


class RegisterAccountRequest(BaseModel):
    name: str
    email: str = Field(pattern=EMAIL_PATTERN)


class RegisterVendorRequest(BaseModel):
    user_id: str
    brand_name: str
    description: str
    logo: str | None = None
    banner: str | None = None


class UpdateVendorStatusRequest(BaseModel):
    status: str


class UpdateVendorProfileRequest(BaseModel):
    brand_name: str | None = None
    description: str | None = None
    logo: str | None = None
    banner: str | None = None


class RegisterProductRequest(BaseModel):
    vendor_id: str
    name: str
    slug: str
    image: str | None = None
    category: str
    price: float = Field(ge=0)
    count_in_stock: int = Field(default=0, ge=0)


class RestockRequest(BaseModel):
    quantity: int = Field(ge=1)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------
class IdResponse(BaseModel):
    id: str


class OrderIdResponse(BaseModel):
    order_id: str


class StatusResponse(BaseModel):
    status: str = "ok"


class QuoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    items_price: float
    shipping_price: float | None
    tax_price: float | None
    total_price: float
    delivery_option_index: int
    expected_delivery_date: datetime


class PaymentIntentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    reference: str
    order_id: str
    amount: float
    currency: str
    client_secret: str | None = None


class BuyerSchema(BaseModel):
    kind: str
    is_guest: bool
    user_id: str | None = None
    name: str | None = None
    email: str | None = None


class PaymentResultSchema(BaseModel):
    kind: str
    transaction_id: str | None = None
    status: str | None = None
    email_address: str | None = None
    settled_by: str | None = None


class OrderLineSchema(BaseModel):
    id: str
    product_id: str
    name: str
    slug: str
    image: str | None = None
    category: str
    price: float
    quantity: int
    size: str | None = None
    color: str | None = None


class OrderResponse(BaseModel):
    id: str
    buyer: BuyerSchema
    items: list[OrderLineSchema]
    shipping_address: ShippingAddressSchema
    delivery_option: str | None
    expected_delivery_date: datetime
    payment_method: str
    payment_result: PaymentResultSchema | None = None
    items_price: float
    shipping_price: float
    tax_price: float
    total_price: float
    is_paid: bool
    paid_at: datetime | None = None
    is_delivered: bool
    delivered_at: datetime | None = None
    created_at: datetime

    @classmethod
    def from_order(cls, order) -> "OrderResponse":
        buyer = order.buyer
        address = order.shipping_address
        result = order.payment_result
        return cls(
            id=str(order.id),
            buyer=BuyerSchema(
                kind=buyer.kind,
                is_guest=buyer.is_guest,
                user_id=str(buyer.user_id) if buyer.user_id else None,
                name=buyer.name,
                email=buyer.email,
            ),
            items=[OrderLineSchema(**item.snapshot()) for item in order.items],
            shipping_address=ShippingAddressSchema(
                full_name=address.full_name,
                street=address.street,
                city=address.city,
                postal_code=address.postal_code,
                country=address.country,
                province=address.province,
                phone=address.phone,
            ),
            delivery_option=order.delivery_option,
            expected_delivery_date=order.expected_delivery_date,
            payment_method=order.payment_method,
            payment_result=(
                PaymentResultSchema(
                    kind=result.kind,
                    transaction_id=result.transaction_id,
                    status=result.status,
                    email_address=result.email_address,
                    settled_by=result.settled_by,
                )
                if result
                else None
            ),
            items_price=order.items_price,
            shipping_price=order.shipping_price,
            tax_price=order.tax_price,
            total_price=order.total_price,
            is_paid=bool(order.is_paid),
            paid_at=order.paid_at,
            is_delivered=bool(order.is_delivered),
            delivered_at=order.delivered_at,
            created_at=order.created_at,
        )


class OrderPageResponse(BaseModel):
    orders: list[OrderResponse]
    total_orders: int
    total_pages: int
    page: int

    @classmethod
    def from_page(cls, page) -> "OrderPageResponse":
        return cls(
            orders=[OrderResponse.from_order(order) for order in page.orders],
            total_orders=page.total_orders,
            total_pages=page.total_pages,
            page=page.page,
        )


class VendorLineSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    line_id: str
    product_id: str
    name: str
    slug: str
    image: str | None = None
    category: str
    price: float
    quantity: int
    size: str | None = None
    color: str | None = None


class VendorOrderSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    order_id: str
    created_at: datetime
    items: list[VendorLineSchema]
    vendor_items_price: float
    order_total_price: float
    is_paid: bool
    paid_at: datetime | None = None
    is_delivered: bool
    delivered_at: datetime | None = None
    expected_delivery_date: datetime
    payment_method: str
    shipping_address: dict
    is_guest: bool
    buyer_name: str | None = None
    buyer_email: str | None = None


class VendorOrderPageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    orders: list[VendorOrderSchema]
    total_orders: int
    total_pages: int
    page: int
    page_size: int


class MonthlySalesSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    month: str
    amount: float


class TopProductSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: str
    name: str | None = None
    image: str | None = None
    total_sold: int
    total_revenue: float


class SalesReportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    vendor_id: str | None = None
    date_from: datetime
    date_to: datetime
    monthly_sales: list[MonthlySalesSchema]
    total_revenue: float
    total_orders: int
    top_products: list[TopProductSchema]
    source: str | None = None


class DailySalesSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: str
    amount: float


class CategorySalesSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    category: str
    total_sold: int


class StoreSummaryResponse(BaseModel):
    date_from: datetime
    date_to: datetime
    orders_count: int
    products_count: int
    accounts_count: int
    total_sales: float
    monthly_sales: list[MonthlySalesSchema]
    daily_sales: list[DailySalesSchema]
    top_categories: list[CategorySalesSchema]
    top_products: list[TopProductSchema]
    latest_orders: list[OrderResponse]

    @classmethod
    def from_summary(cls, summary) -> "StoreSummaryResponse":
        return cls(
            date_from=summary.date_from,
            date_to=summary.date_to,
            orders_count=summary.orders_count,
            products_count=summary.products_count,
            accounts_count=summary.accounts_count,
            total_sales=summary.total_sales,
            monthly_sales=[MonthlySalesSchema.model_validate(m) for m in summary.monthly_sales],
            daily_sales=[DailySalesSchema.model_validate(d) for d in summary.daily_sales],
            top_categories=[CategorySalesSchema.model_validate(c) for c in summary.top_categories],
            top_products=[TopProductSchema.model_validate(p) for p in summary.top_products],
            latest_orders=[OrderResponse.from_order(order) for order in summary.latest_orders],
        )


class VendorResponse(BaseModel):
    id: str
    user_id: str
    brand_name: str
    description: str
    logo: str | None = None
    banner: str | None = None
    status: str

    @classmethod
    def from_vendor(cls, vendor) -> "VendorResponse":
        return cls(
            id=str(vendor.id),
            user_id=str(vendor.user_id),
            brand_name=vendor.brand_name,
            description=vendor.description,
            logo=vendor.logo,
            banner=vendor.banner,
            status=vendor.status,
        )
