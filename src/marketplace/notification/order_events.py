"""Buyer notifications driven by order events.

Receipts go out only after the settlement's unit of work commits. Orders
whose buyer has no resolvable email are skipped.
"""

import structlog
from protean.utils.mixins import handle

from marketplace.domain import marketplace
from marketplace.notification.channel import get_email_channel
from marketplace.notification.templates import DeliveryNoticeTemplate, PurchaseReceiptTemplate
from marketplace.order.events import OrderDelivered, OrderPaid
from marketplace.order.order import Order

logger = structlog.get_logger(__name__)


def _send(template, event, **context) -> dict | None:
    if not event.buyer_email:
        logger.info(
            "Buyer has no email, skipping notification",
            order_id=str(event.order_id),
            notification=template.__name__,
        )
        return None

    message = template.render({"order_id": str(event.order_id), "name": event.buyer_name, **context})
    result = get_email_channel().send(to=event.buyer_email, subject=message["subject"], body=message["body"])
    if result.get("status") != "sent":
        logger.warning(
            "Notification delivery failed",
            order_id=str(event.order_id),
            error=result.get("error"),
        )
    return result


@marketplace.event_handler(part_of=Order)
class OrderNotificationsHandler:
    @handle(OrderPaid)
    def on_order_paid(self, event: OrderPaid) -> None:
        _send(PurchaseReceiptTemplate, event, total_price=event.total_price)

    @handle(OrderDelivered)
    def on_order_delivered(self, event: OrderDelivered) -> None:
        _send(DeliveryNoticeTemplate, event)
