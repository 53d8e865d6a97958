"""Marketplace error taxonomy.

Every error is a Protean exception so the framework's unit of work rolls
back on it and the HTTP layer can map it by base class. Messages follow the
Protean convention of a ``{field: [reasons]}`` dict. Protean only attaches
``messages`` to validation errors, so the not-found and conflict bases here
keep them too.
"""

from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError


class NotFoundError(ObjectNotFoundError):
    """An order, product or vendor id that does not exist."""

    def __init__(self, messages):
        super().__init__(messages)
        self.messages = messages


class OrderNotFoundError(NotFoundError):
    pass


class ProductNotFoundError(NotFoundError):
    pass


class VendorNotFoundError(NotFoundError):
    pass


class MarketplaceConflictError(InvalidOperationError):
    """A state change the order's current state does not allow."""

    def __init__(self, messages):
        super().__init__(messages)
        self.messages = messages


class AlreadyPaidError(MarketplaceConflictError):
    """Raised when settling an order that is already paid."""


class NotPaidError(MarketplaceConflictError):
    """Raised when delivering an order that has not been paid."""


class AlreadyDeliveredError(MarketplaceConflictError):
    pass


class PaymentMismatchError(MarketplaceConflictError):
    """The gateway record does not confirm payment of this order."""

    def __init__(self, messages, order_id=None):
        super().__init__(messages)
        self.order_id = order_id


class InsufficientStockError(ValidationError):
    pass


class OrderNotCompletedError(MarketplaceConflictError):
    """Generic failure surfaced to buyers when settlement had to be rolled back."""

    MESSAGE = "Order could not be completed, please try again"

    def __init__(self, order_id=None):
        super().__init__({"order": [self.MESSAGE]})
        self.order_id = order_id
