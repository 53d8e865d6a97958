"""Settling and delivering orders.

`settle_order` is the single path to the paid state, shared by manual
settlement here and by gateway confirmation. It re-reads the order at the
start of the handler's unit of work, so a retried confirmation observes the
earlier payment and fails with `AlreadyPaidError` instead of charging or
decrementing stock twice.
"""

import structlog
from protean import handle
from protean.exceptions import ExpectedVersionError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.inventory.adjustment import InventoryAdjustment
from marketplace.order.order import Order, PaymentResult
from marketplace.order.queries import get_order, resolve_buyer_contact
from marketplace.shared.errors import (
    AlreadyPaidError,
    InsufficientStockError,
    NotFoundError,
    OrderNotCompletedError,
)
from marketplace.shared.settings import current_settings

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class MarkOrderPaid:
    order_id = Identifier(required=True)
    settled_by = String(max_length=100, default="operator")


@marketplace.command(part_of="Order")
class MarkOrderDelivered:
    order_id = Identifier(required=True)


def settle_order(order_id, payment_result: PaymentResult) -> Order:
    settings = current_settings()
    order = get_order(order_id)

    contact = resolve_buyer_contact(order.buyer)
    order.mark_paid(
        payment_result,
        buyer_name=contact.name if contact else None,
        buyer_email=contact.email if contact else None,
    )

    movements = []
    if settings.adjust_inventory_on_payment:
        try:
            movements = InventoryAdjustment(order).apply()
        except (NotFoundError, InsufficientStockError, ExpectedVersionError) as exc:
            logger.error(
                "Inventory adjustment failed, settlement rolled back",
                order_id=str(order_id),
                reason=str(getattr(exc, "messages", exc)),
            )
            raise OrderNotCompletedError(order_id=str(order_id)) from exc

    try:
        current_domain.repository_for(Order).add(order)
    except ExpectedVersionError as exc:
        # Settlement is the only change an unpaid order accepts, so a version
        # conflict means a concurrent settlement won.
        raise AlreadyPaidError({"order_id": [f"Order {order_id} is already paid"]}) from exc

    logger.info(
        "Order paid",
        order_id=str(order.id),
        payment_kind=payment_result.kind,
        total_price=order.total_price,
        units_removed=sum(movement.quantity for movement in movements),
    )
    return order


@marketplace.command_handler(part_of=Order)
class OrderSettlementHandler:
    @handle(MarkOrderPaid)
    def mark_paid(self, command):
        order = settle_order(command.order_id, PaymentResult.manual(command.settled_by or "operator"))
        return str(order.id)

    @handle(MarkOrderDelivered)
    def mark_delivered(self, command):
        order = get_order(command.order_id)
        contact = resolve_buyer_contact(order.buyer)
        order.mark_delivered(
            buyer_name=contact.name if contact else None,
            buyer_email=contact.email if contact else None,
        )
        current_domain.repository_for(Order).add(order)

        logger.info("Order delivered", order_id=str(order.id))
        return str(order.id)
