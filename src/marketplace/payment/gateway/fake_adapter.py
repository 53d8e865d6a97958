"""Configurable fake payment gateway for development and testing.

Intents are kept in memory. By default a retrieved intent reports
``succeeded``; tests can configure a different status or tamper with the
order id an intent is linked to, simulating a payment made for another order.
"""

from uuid import uuid4

from marketplace.payment.gateway.port import SUCCEEDED, GatewayPaymentRecord, PaymentGateway, PaymentIntent


class FakeGateway(PaymentGateway):
    """In-memory payment gateway."""

    def __init__(self) -> None:
        self.status: str = SUCCEEDED
        self.payer_email: str | None = "payer@example.com"
        self.intents: dict[str, PaymentIntent] = {}
        self.overrides: dict[str, dict] = {}
        self.calls: list[dict] = []

    def configure(self, status: str = SUCCEEDED, payer_email: str | None = "payer@example.com") -> None:
        """Configure the status reported for every retrieved payment."""
        self.status = status
        self.payer_email = payer_email

    def override(self, reference: str, **fields) -> None:
        """Force fields (``order_id``, ``status``) on one payment's record."""
        self.overrides.setdefault(reference, {}).update(fields)

    def create_payment_intent(self, order_id: str, amount: float, currency: str = "USD") -> PaymentIntent:
        self.calls.append({"method": "create_payment_intent", "order_id": order_id, "amount": amount})

        reference = f"pi_fake_{uuid4().hex[:16]}"
        intent = PaymentIntent(
            reference=reference,
            order_id=str(order_id),
            amount=amount,
            currency=currency,
            client_secret=f"{reference}_secret",
        )
        self.intents[reference] = intent
        return intent

    def retrieve_payment(self, reference: str) -> GatewayPaymentRecord | None:
        self.calls.append({"method": "retrieve_payment", "reference": reference})

        intent = self.intents.get(reference)
        if intent is None:
            return None

        fields = {
            "reference": reference,
            "order_id": intent.order_id,
            "status": self.status,
            "amount": intent.amount,
            "payer_email": self.payer_email,
        }
        fields.update(self.overrides.get(reference, {}))
        return GatewayPaymentRecord(**fields)
