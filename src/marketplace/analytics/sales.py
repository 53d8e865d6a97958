"""Sales analytics: monthly revenue, totals and best-selling products.

Reports are built from the sales ledger projection. When the ledger cannot
be read (or the caller asks for it) the same figures are computed by
scanning the orders themselves. Both paths feed identical line records
through one summarising function, so their totals agree for the same data.

Top products are ranked by units sold, then revenue, then product id.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

import structlog
from protean.utils.globals import current_domain

from marketplace.analytics.periods import as_utc, month_keys, trailing_months
from marketplace.analytics.sales_ledger import ledger_entries
from marketplace.order.order import Order
from marketplace.product.product import Product
from marketplace.shared.money import round2
from marketplace.shared.paging import scan
from marketplace.shared.settings import MarketplaceSettings

logger = structlog.get_logger(__name__)

LEDGER = "ledger"
ORDERS = "orders"


@dataclass(frozen=True)
class SaleLine:
    line_id: str
    order_id: str
    product_id: str
    name: str | None
    image: str | None
    category: str | None
    price: float
    quantity: int
    created_at: datetime

    @property
    def revenue(self) -> float:
        return self.price * self.quantity

    @property
    def month(self) -> str:
        return self.created_at.strftime("%Y-%m")


@dataclass(frozen=True)
class MonthlySales:
    month: str
    amount: float


@dataclass(frozen=True)
class TopProduct:
    product_id: str
    name: str | None
    image: str | None
    total_sold: int
    total_revenue: float


@dataclass(frozen=True)
class SalesReport:
    vendor_id: str | None
    date_from: datetime
    date_to: datetime
    monthly_sales: list[MonthlySales]
    total_revenue: float
    total_orders: int
    top_products: list[TopProduct]
    source: str | None


def resolve_range(settings: MarketplaceSettings, date_from=None, date_to=None, now=None) -> tuple[datetime, datetime]:
    default_start, default_end = trailing_months(settings.analytics_months, now)
    start = as_utc(date_from) or default_start
    end = as_utc(date_to, end_of_day=True) or default_end
    return start, end


def lines_from_ledger(product_ids, start, end) -> list[SaleLine]:
    return [
        SaleLine(
            line_id=str(entry.line_id),
            order_id=str(entry.order_id),
            product_id=str(entry.product_id),
            name=entry.name,
            image=entry.image,
            category=entry.category,
            price=entry.price,
            quantity=entry.quantity,
            created_at=as_utc(entry.created_at),
        )
        for entry in ledger_entries(product_ids=product_ids, start=start, end=end)
    ]


def lines_from_orders(product_ids, start, end) -> list[SaleLine]:
    query = current_domain.repository_for(Order)._dao.query.filter(created_at__gte=start, created_at__lte=end)
    lines = []
    for order in scan(query):
        for item in order.items:
            if product_ids is not None and str(item.product_id) not in product_ids:
                continue
            lines.append(
                SaleLine(
                    line_id=str(item.id),
                    order_id=str(order.id),
                    product_id=str(item.product_id),
                    name=item.name,
                    image=item.image,
                    category=item.category,
                    price=item.price,
                    quantity=item.quantity,
                    created_at=as_utc(order.created_at),
                )
            )
    return lines


def rank_products(lines: Iterable[SaleLine], limit: int) -> list[TopProduct]:
    sold: dict[str, int] = {}
    revenue: dict[str, float] = {}
    details: dict[str, SaleLine] = {}
    for line in lines:
        sold[line.product_id] = sold.get(line.product_id, 0) + line.quantity
        revenue[line.product_id] = revenue.get(line.product_id, 0.0) + line.revenue
        details.setdefault(line.product_id, line)

    ranked = sorted(sold, key=lambda pid: (-sold[pid], -revenue[pid], pid))
    return [
        TopProduct(
            product_id=pid,
            name=details[pid].name,
            image=details[pid].image,
            total_sold=sold[pid],
            total_revenue=round2(revenue[pid]),
        )
        for pid in ranked[:limit]
    ]


def summarize(
    lines: Iterable[SaleLine],
    months: list[str],
    top_n: int,
    vendor_id=None,
    start=None,
    end=None,
    source: str | None = None,
) -> SalesReport:
    # A fixed summation order keeps float totals identical across sources
    ordered = sorted(lines, key=lambda line: (line.order_id, line.line_id))

    monthly = dict.fromkeys(months, 0.0)
    total = 0.0
    for line in ordered:
        if line.month in monthly:
            monthly[line.month] += line.revenue
        total += line.revenue

    return SalesReport(
        vendor_id=str(vendor_id) if vendor_id is not None else None,
        date_from=start,
        date_to=end,
        monthly_sales=[MonthlySales(month=month, amount=round2(amount)) for month, amount in monthly.items()],
        total_revenue=round2(total),
        total_orders=len({line.order_id for line in ordered}),
        top_products=rank_products(ordered, top_n),
        source=source,
    )


def sales_report(
    settings: MarketplaceSettings,
    vendor_id=None,
    date_from=None,
    date_to=None,
    top_n: int | None = None,
    source: str | None = None,
    now=None,
) -> SalesReport:
    """Revenue report for one vendor, or store-wide when ``vendor_id`` is None.

    Args:
        settings: supplies the default window (``analytics_months``) and top-N.
        date_from / date_to: optional window; dates cover whole days.
        source: force ``"ledger"`` or ``"orders"``; by default the ledger is
            tried first and the orders are scanned if it fails.
    """
    start, end = resolve_range(settings, date_from, date_to, now)
    months = month_keys(start, end)
    top_n = top_n or settings.top_products_limit
    report = dict(months=months, top_n=top_n, vendor_id=vendor_id, start=start, end=end)

    product_ids = None
    if vendor_id is not None:
        product_ids = current_domain.repository_for(Product).ids_for_vendor(vendor_id)
        if not product_ids:
            return summarize([], **report)

    if source != ORDERS:
        try:
            return summarize(lines_from_ledger(product_ids, start, end), source=LEDGER, **report)
        except Exception:
            if source == LEDGER:
                raise
            logger.warning("Sales ledger unavailable, summing orders directly", vendor_id=vendor_id, exc_info=True)

    return summarize(lines_from_orders(product_ids, start, end), source=ORDERS, **report)
