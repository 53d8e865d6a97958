"""Payment gateway port (abstract interface).

The order core never talks to a payment provider directly. It creates a
payment intent tied to an order and later asks the gateway for its
authoritative record of that payment.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

SUCCEEDED = "succeeded"


@dataclass(frozen=True)
class PaymentIntent:
    """A payment the buyer has been asked to complete."""

    reference: str
    order_id: str
    amount: float
    currency: str
    client_secret: str | None = None


@dataclass(frozen=True)
class GatewayPaymentRecord:
    """The gateway's view of a payment."""

    reference: str
    order_id: str | None
    status: str
    amount: float | None = None
    payer_email: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == SUCCEEDED


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_payment_intent(self, order_id: str, amount: float, currency: str = "USD") -> PaymentIntent:
        """Open a payment for an order; the order id travels in the intent's metadata."""
        ...

    @abstractmethod
    def retrieve_payment(self, reference: str) -> GatewayPaymentRecord | None:
        """Fetch the gateway's record for a payment reference, or None when unknown."""
        ...
