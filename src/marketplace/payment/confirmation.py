"""Gateway payment confirmation.

The buyer returns from the payment provider with a payment reference. The
gateway's own record is authoritative: it must be linked to this order and
report success before the order is settled. Anything else leaves the order
untouched and raises `PaymentMismatchError`, which the HTTP layer turns into
a redirect back to the payment step.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String

from marketplace.domain import marketplace
from marketplace.order.order import Order, PaymentResult
from marketplace.order.queries import get_order
from marketplace.order.settlement import settle_order
from marketplace.payment.gateway import get_gateway
from marketplace.shared.errors import AlreadyPaidError, PaymentMismatchError

logger = structlog.get_logger(__name__)


def open_payment_intent(order_id, currency: str = "USD"):
    """Ask the gateway for a payment intent covering the order total."""
    order = get_order(order_id)
    if order.is_paid:
        raise AlreadyPaidError({"order_id": [f"Order {order_id} is already paid"]})
    return get_gateway().create_payment_intent(str(order.id), order.total_price, currency)


@marketplace.command(part_of="Order")
class ConfirmGatewayPayment:
    order_id = Identifier(required=True)
    payment_reference = String(required=True, max_length=255)


def verify_gateway_payment(order_id: str, payment_reference: str):
    """Return the gateway record when it confirms payment of ``order_id``."""
    record = get_gateway().retrieve_payment(payment_reference)

    if record is None:
        reason = "Unknown payment reference"
    elif str(record.order_id) != str(order_id):
        reason = "Payment belongs to a different order"
    elif not record.succeeded:
        reason = f"Payment status is '{record.status}'"
    else:
        return record

    logger.warning(
        "Payment confirmation rejected",
        order_id=str(order_id),
        payment_reference=payment_reference,
        reason=reason,
    )
    raise PaymentMismatchError({"payment_reference": [reason]}, order_id=str(order_id))


@marketplace.command_handler(part_of=Order)
class PaymentConfirmationHandler:
    @handle(ConfirmGatewayPayment)
    def confirm_gateway_payment(self, command):
        get_order(command.order_id)
        record = verify_gateway_payment(command.order_id, command.payment_reference)

        order = settle_order(
            command.order_id,
            PaymentResult.gateway(
                transaction_id=record.reference,
                status=record.status,
                email_address=record.payer_email,
            ),
        )
        return str(order.id)
