"""The payment gateway the order core talks to.

Until a provider adapter is installed with `set_gateway`, an in-memory
`FakeGateway` is created on first use. `reset_gateway` drops whatever is
installed, so the next caller starts from a fresh fake.
"""

from marketplace.payment.gateway.fake_adapter import FakeGateway
from marketplace.payment.gateway.port import PaymentGateway

_installed: PaymentGateway | None = None


def get_gateway() -> PaymentGateway:
    global _installed
    _installed = _installed or FakeGateway()
    return _installed


def set_gateway(gateway: PaymentGateway) -> None:
    global _installed
    _installed = gateway


def reset_gateway() -> None:
    set_gateway(None)
