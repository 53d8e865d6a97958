"""FastAPI routes for the marketplace: orders, checkout, vendors and analytics."""

from datetime import date

from fastapi import APIRouter, Query
from protean.utils.globals import current_domain

from marketplace.account.registration import RegisterAccount
from marketplace.analytics.sales import sales_report
from marketplace.analytics.summary import store_summary
from marketplace.api.schemas import (
    ConfirmPaymentRequest,
    IdResponse,
    MarkPaidRequest,
    OrderIdResponse,
    OrderPageResponse,
    OrderResponse,
    PaymentIntentResponse,
    PlaceGuestOrderRequest,
    PlaceOrderRequest,
    QuoteRequest,
    QuoteResponse,
    RegisterAccountRequest,
    RegisterProductRequest,
    RegisterVendorRequest,
    RestockRequest,
    SalesReportResponse,
    StatusResponse,
    StoreSummaryResponse,
    UpdateVendorProfileRequest,
    UpdateVendorStatusRequest,
    VendorOrderPageResponse,
    VendorOrderSchema,
    VendorResponse,
)
from marketplace.order.placement import PlaceGuestOrder, PlaceOrder
from marketplace.order.queries import find_guest_order, get_order, list_orders, list_orders_for_buyer
from marketplace.order.settlement import MarkOrderDelivered, MarkOrderPaid
from marketplace.payment.confirmation import ConfirmGatewayPayment, open_payment_intent
from marketplace.pricing.calculator import calculate_pricing
from marketplace.product.management import RegisterProduct, RestockProduct
from marketplace.shared.settings import current_settings
from marketplace.vendor.partitioner import order_for_vendor, partition_for_vendor
from marketplace.vendor.registration import RegisterVendor, UpdateVendorProfile, UpdateVendorStatus
from marketplace.vendor.vendor import get_vendor, list_vendors

# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def place_order(body: PlaceOrderRequest) -> OrderIdResponse:
    command = PlaceOrder(
        user_id=body.user_id,
        items=body.items_json(),
        shipping_address=body.address_json(),
        payment_method=body.payment_method,
        delivery_option_index=body.delivery_option_index,
    )
    result = current_domain.process(command, asynchronous=False)
    return OrderIdResponse(order_id=result)


@order_router.post("/guest", status_code=201, response_model=OrderIdResponse)
async def place_guest_order(body: PlaceGuestOrderRequest) -> OrderIdResponse:
    command = PlaceGuestOrder(
        guest_name=body.name,
        guest_email=body.email,
        items=body.items_json(),
        shipping_address=body.address_json(),
        payment_method=body.payment_method,
        delivery_option_index=body.delivery_option_index,
    )
    result = current_domain.process(command, asynchronous=False)
    return OrderIdResponse(order_id=result)


@order_router.get("", response_model=OrderPageResponse)
async def all_orders(page: int = Query(1, ge=1), page_size: int | None = Query(None, ge=1)) -> OrderPageResponse:
    page_size = page_size or current_settings().page_size
    return OrderPageResponse.from_page(list_orders(page=page, page_size=page_size))


@order_router.get("/mine/{user_id}", response_model=OrderPageResponse)
async def my_orders(
    user_id: str, page: int = Query(1, ge=1), page_size: int | None = Query(None, ge=1)
) -> OrderPageResponse:
    page_size = page_size or current_settings().page_size
    return OrderPageResponse.from_page(list_orders_for_buyer(user_id, page=page, page_size=page_size))


@order_router.get("/guest/{order_id}", response_model=OrderResponse)
async def guest_order(order_id: str, email: str) -> OrderResponse:
    return OrderResponse.from_order(find_guest_order(order_id, email))


@order_router.get("/{order_id}", response_model=OrderResponse)
async def order_detail(order_id: str) -> OrderResponse:
    return OrderResponse.from_order(get_order(order_id))


@order_router.put("/{order_id}/pay", response_model=StatusResponse)
async def mark_paid(order_id: str, body: MarkPaidRequest | None = None) -> StatusResponse:
    settled_by = body.settled_by if body else "operator"
    current_domain.process(MarkOrderPaid(order_id=order_id, settled_by=settled_by), asynchronous=False)
    return StatusResponse(status="paid")


@order_router.put("/{order_id}/deliver", response_model=StatusResponse)
async def mark_delivered(order_id: str) -> StatusResponse:
    current_domain.process(MarkOrderDelivered(order_id=order_id), asynchronous=False)
    return StatusResponse(status="delivered")


@order_router.post("/{order_id}/payment-intent", status_code=201, response_model=PaymentIntentResponse)
async def create_payment_intent(order_id: str) -> PaymentIntentResponse:
    return PaymentIntentResponse.model_validate(open_payment_intent(order_id))


@order_router.post("/{order_id}/confirm-payment", response_model=StatusResponse)
async def confirm_payment(order_id: str, body: ConfirmPaymentRequest) -> StatusResponse:
    command = ConfirmGatewayPayment(order_id=order_id, payment_reference=body.payment_reference)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="paid")


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post("/quote", response_model=QuoteResponse)
async def quote(body: QuoteRequest) -> QuoteResponse:
    pricing = calculate_pricing(
        [item.model_dump() for item in body.items],
        current_settings(),
        shipping_address=body.shipping_address,
        delivery_option_index=body.delivery_option_index,
    )
    return QuoteResponse.model_validate(pricing)


# ---------------------------------------------------------------------------
# Vendor Router
# ---------------------------------------------------------------------------
vendor_router = APIRouter(prefix="/vendors", tags=["vendors"])


@vendor_router.post("", status_code=201, response_model=IdResponse)
async def register_vendor(body: RegisterVendorRequest) -> IdResponse:
    command = RegisterVendor(
        user_id=body.user_id,
        brand_name=body.brand_name,
        description=body.description,
        logo=body.logo,
        banner=body.banner,
    )
    return IdResponse(id=current_domain.process(command, asynchronous=False))


@vendor_router.get("", response_model=list[VendorResponse])
async def vendors(status: str | None = None) -> list[VendorResponse]:
    return [VendorResponse.from_vendor(vendor) for vendor in list_vendors(status)]


@vendor_router.get("/{vendor_id}", response_model=VendorResponse)
async def vendor_detail(vendor_id: str) -> VendorResponse:
    return VendorResponse.from_vendor(get_vendor(vendor_id))


@vendor_router.put("/{vendor_id}/status", response_model=StatusResponse)
async def update_vendor_status(vendor_id: str, body: UpdateVendorStatusRequest) -> StatusResponse:
    status = current_domain.process(
        UpdateVendorStatus(vendor_id=vendor_id, status=body.status), asynchronous=False
    )
    return StatusResponse(status=status)


@vendor_router.put("/{vendor_id}", response_model=StatusResponse)
async def update_vendor_profile(vendor_id: str, body: UpdateVendorProfileRequest) -> StatusResponse:
    command = UpdateVendorProfile(vendor_id=vendor_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@vendor_router.get("/{vendor_id}/orders", response_model=VendorOrderPageResponse)
async def vendor_orders(
    vendor_id: str, page: int = Query(1, ge=1), page_size: int | None = Query(None, ge=1)
) -> VendorOrderPageResponse:
    get_vendor(vendor_id)
    result = partition_for_vendor(vendor_id, current_settings(), page=page, page_size=page_size)
    return VendorOrderPageResponse.model_validate(result)


@vendor_router.get("/{vendor_id}/orders/{order_id}", response_model=VendorOrderSchema)
async def vendor_order(vendor_id: str, order_id: str) -> VendorOrderSchema:
    get_vendor(vendor_id)
    return VendorOrderSchema.model_validate(order_for_vendor(vendor_id, order_id, current_settings()))


@vendor_router.get("/{vendor_id}/analytics", response_model=SalesReportResponse)
async def vendor_analytics(
    vendor_id: str,
    date_from: date | None = None,
    date_to: date | None = None,
    top: int | None = Query(None, ge=1),
) -> SalesReportResponse:
    get_vendor(vendor_id)
    report = sales_report(current_settings(), vendor_id=vendor_id, date_from=date_from, date_to=date_to, top_n=top)
    return SalesReportResponse.model_validate(report)


# ---------------------------------------------------------------------------
# Account / Product Routers
# ---------------------------------------------------------------------------
account_router = APIRouter(prefix="/accounts", tags=["accounts"])


@account_router.post("", status_code=201, response_model=IdResponse)
async def register_account(body: RegisterAccountRequest) -> IdResponse:
    account_id = current_domain.process(RegisterAccount(name=body.name, email=body.email), asynchronous=False)
    return IdResponse(id=account_id)


product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.post("", status_code=201, response_model=IdResponse)
async def register_product(body: RegisterProductRequest) -> IdResponse:
    product_id = current_domain.process(RegisterProduct(**body.model_dump()), asynchronous=False)
    return IdResponse(id=product_id)


@product_router.put("/{product_id}/restock", response_model=StatusResponse)
async def restock_product(product_id: str, body: RestockRequest) -> StatusResponse:
    current_domain.process(RestockProduct(product_id=product_id, quantity=body.quantity), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Analytics Router
# ---------------------------------------------------------------------------
analytics_router = APIRouter(prefix="/analytics", tags=["analytics"])


@analytics_router.get("/sales", response_model=SalesReportResponse)
async def store_sales(
    date_from: date | None = None,
    date_to: date | None = None,
    top: int | None = Query(None, ge=1),
) -> SalesReportResponse:
    report = sales_report(current_settings(), date_from=date_from, date_to=date_to, top_n=top)
    return SalesReportResponse.model_validate(report)


@analytics_router.get("/summary", response_model=StoreSummaryResponse)
async def summary(date_from: date | None = None, date_to: date | None = None) -> StoreSummaryResponse:
    return StoreSummaryResponse.from_summary(store_summary(current_settings(), date_from=date_from, date_to=date_to))
