"""Sales ledger projection: one row per order line.

This is the pre-aggregated read model behind vendor order lookups and the
sales analytics. Rows are written when an order is placed and never change;
prices are the frozen purchase-time prices.
"""

import json

from protean.core.projector import on
from protean.fields import DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.events import OrderPlaced
from marketplace.order.order import Order
from marketplace.shared.paging import scan


@marketplace.projection
class SalesLedgerEntry:
    line_id = Identifier(identifier=True, required=True)
    order_id = Identifier(required=True)
    product_id = Identifier(required=True)
    name = String(max_length=255)
    image = String(max_length=500)
    category = String(max_length=100)
    price = Float(default=0.0)
    quantity = Integer(default=0)
    month = String(max_length=7)  # YYYY-MM
    created_at = DateTime(required=True)


@marketplace.projector(projector_for=SalesLedgerEntry, aggregates=[Order])
class SalesLedgerProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        repo = current_domain.repository_for(SalesLedgerEntry)
        for line in json.loads(event.items):
            repo.add(
                SalesLedgerEntry(
                    line_id=line["id"],
                    order_id=str(event.order_id),
                    product_id=line["product_id"],
                    name=line.get("name"),
                    image=line.get("image"),
                    category=line.get("category"),
                    price=line["price"],
                    quantity=line["quantity"],
                    month=event.created_at.strftime("%Y-%m"),
                    created_at=event.created_at,
                )
            )


def ledger_entries(product_ids=None, start=None, end=None):
    """Ledger rows, optionally restricted to products and a created_at window."""
    criteria = {}
    if product_ids is not None:
        criteria["product_id__in"] = sorted(product_ids)
    if start is not None:
        criteria["created_at__gte"] = start
    if end is not None:
        criteria["created_at__lte"] = end

    query = current_domain.repository_for(SalesLedgerEntry)._dao.query
    if criteria:
        query = query.filter(**criteria)
    return scan(query)


def order_ids_for_products(product_ids) -> set[str]:
    return {str(entry.order_id) for entry in ledger_entries(product_ids=product_ids)}
