"""Domain initialization and configuration.

The marketplace is a single bounded context: orders, products, vendors and
accounts share one domain so that settling an order and adjusting stock run
inside the same unit of work.
"""

from protean.domain import Domain

from marketplace.utils.logging import configure_logging

# Configure logging for the application
configure_logging()

# Domain Composition Root
marketplace = Domain(name="marketplace")
