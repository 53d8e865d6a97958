"""Store-wide dashboard summary for operators."""

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime

from protean.utils.globals import current_domain

from marketplace.account.account import Account
from marketplace.analytics.periods import as_utc, month_keys
from marketplace.analytics.sales import MonthlySales, SaleLine, TopProduct, resolve_range
from marketplace.order.order import Order
from marketplace.product.product import Product
from marketplace.shared.money import round2
from marketplace.shared.paging import scan
from marketplace.shared.settings import MarketplaceSettings

TOP_CATEGORIES = 5
TOP_PRODUCTS = 6


@dataclass(frozen=True)
class DailySales:
    date: str
    amount: float


@dataclass(frozen=True)
class CategorySales:
    category: str
    total_sold: int


@dataclass(frozen=True)
class StoreSummary:
    date_from: datetime
    date_to: datetime
    orders_count: int
    products_count: int
    accounts_count: int
    total_sales: float
    monthly_sales: list[MonthlySales]
    daily_sales: list[DailySales]
    top_categories: list[CategorySales]
    top_products: list[TopProduct]
    latest_orders: list


def _count_created(aggregate_cls, field: str, start, end) -> int:
    query = current_domain.repository_for(aggregate_cls)._dao.query.filter(
        **{f"{field}__gte": start, f"{field}__lte": end}
    )
    return query.all().total


def store_summary(settings: MarketplaceSettings, date_from=None, date_to=None, now=None) -> StoreSummary:
    start, end = resolve_range(settings, date_from, date_to, now)

    query = (
        current_domain.repository_for(Order)
        ._dao.query.filter(created_at__gte=start, created_at__lte=end)
        .order_by("-created_at")
    )
    orders = list(scan(query))

    monthly = dict.fromkeys(month_keys(start, end), 0.0)
    daily: dict[str, float] = defaultdict(float)
    category_units: dict[str, int] = defaultdict(int)
    lines = []
    total_sales = 0.0
    for order in orders:
        created = as_utc(order.created_at)
        total_sales += order.total_price
        monthly[created.strftime("%Y-%m")] += order.total_price
        daily[created.strftime("%Y-%m-%d")] += order.total_price
        for item in order.items:
            category_units[item.category] += item.quantity
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
                    created_at=created,
                )
            )

    return StoreSummary(
        date_from=start,
        date_to=end,
        orders_count=len(orders),
        products_count=_count_created(Product, "created_at", start, end),
        accounts_count=_count_created(Account, "registered_at", start, end),
        total_sales=round2(total_sales),
        monthly_sales=[MonthlySales(month=month, amount=round2(amount)) for month, amount in monthly.items()],
        daily_sales=[DailySales(date=day, amount=round2(daily[day])) for day in sorted(daily)],
        top_categories=[
            CategorySales(category=category, total_sold=units)
            for category, units in sorted(category_units.items(), key=lambda kv: (-kv[1], kv[0]))[:TOP_CATEGORIES]
        ],
        top_products=_top_by_revenue(lines),
        latest_orders=orders[: settings.page_size],
    )


def _top_by_revenue(lines: list[SaleLine]) -> list[TopProduct]:
    revenue: dict[str, float] = defaultdict(float)
    sold: dict[str, int] = defaultdict(int)
    details: dict[str, SaleLine] = {}
    for line in sorted(lines, key=lambda line: (line.order_id, line.line_id)):
        revenue[line.product_id] += line.revenue
        sold[line.product_id] += line.quantity
        details.setdefault(line.product_id, line)

    ranked = sorted(revenue, key=lambda pid: (-revenue[pid], -sold[pid], pid))[:TOP_PRODUCTS]
    return [
        TopProduct(
            product_id=pid,
            name=details[pid].name,
            image=details[pid].image,
            total_sold=sold[pid],
            total_revenue=round2(revenue[pid]),
        )
        for pid in ranked
    ]
