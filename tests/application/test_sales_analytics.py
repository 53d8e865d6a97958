from datetime import UTC, date, datetime
from unittest.mock import patch

import pytest

from marketplace.analytics.sales import ORDERS, sales_report
from marketplace.analytics.summary import store_summary
from marketplace.shared.settings import MarketplaceSettings

SETTINGS = MarketplaceSettings()
WINDOW = {"date_from": date(2026, 1, 1), "date_to": date(2026, 6, 30)}


@pytest.fixture
def catalogue(shop):
    first = shop.vendor("First Goods")
    second = shop.vendor("Second Goods")
    return {
        "first": first,
        "second": second,
        "lamp": shop.product(first, price=20.0, name="Lamp", category="Lighting"),
        "rug": shop.product(first, price=35.5, name="Rug", category="Textiles"),
        "chair": shop.product(second, price=50.0, name="Chair", category="Furniture"),
    }


@pytest.fixture
def history(shop, line, clock, catalogue):
    """Three orders in February and May; the first vendor sells in both months."""
    with clock(datetime(2026, 2, 10, 9, tzinfo=UTC)):
        shop.guest_order(
            [
                line(catalogue["lamp"], price=20.0, quantity=2, name="Lamp", category="Lighting"),
                line(catalogue["chair"], price=50.0, quantity=1, name="Chair", category="Furniture"),
            ]
        )
    with clock(datetime(2026, 5, 3, 18, tzinfo=UTC)):
        shop.guest_order([line(catalogue["rug"], price=35.5, quantity=1, name="Rug", category="Textiles")])
    with clock(datetime(2026, 5, 20, 8, tzinfo=UTC)):
        shop.guest_order([line(catalogue["lamp"], price=20.0, quantity=1, name="Lamp", category="Lighting")])
    return catalogue


class TestVendorReport:
    def test_monthly_buckets_cover_the_window(self, history):
        report = sales_report(SETTINGS, vendor_id=history["first"], **WINDOW)

        assert [bucket.month for bucket in report.monthly_sales] == [
            "2026-01",
            "2026-02",
            "2026-03",
            "2026-04",
            "2026-05",
            "2026-06",
        ]
        assert [bucket.amount for bucket in report.monthly_sales] == [0.0, 40.0, 0.0, 0.0, 55.5, 0.0]

    def test_totals_only_count_vendor_lines(self, history):
        report = sales_report(SETTINGS, vendor_id=history["first"], **WINDOW)

        assert report.total_revenue == 95.5
        assert report.total_orders == 3
        assert report.source == "ledger"

    def test_top_products(self, history):
        report = sales_report(SETTINGS, vendor_id=history["first"], **WINDOW)

        assert [(p.name, p.total_sold, p.total_revenue) for p in report.top_products] == [
            ("Lamp", 3, 60.0),
            ("Rug", 1, 35.5),
        ]

    def test_window_excludes_older_sales(self, history):
        report = sales_report(SETTINGS, vendor_id=history["first"], date_from=date(2026, 3, 1), date_to=WINDOW["date_to"])

        assert report.total_revenue == 55.5
        assert report.total_orders == 2
        assert len(report.monthly_sales) == 4

    def test_default_window_is_trailing_months(self, history):
        report = sales_report(SETTINGS, vendor_id=history["first"], now=datetime(2026, 6, 15, tzinfo=UTC))

        assert len(report.monthly_sales) == SETTINGS.analytics_months
        assert report.monthly_sales[0].month == "2026-01"
        assert report.monthly_sales[-1].month == "2026-06"

    def test_vendor_without_products_gets_an_empty_report(self, shop):
        report = sales_report(SETTINGS, vendor_id=shop.vendor("Idle Goods"), **WINDOW)

        assert report.total_revenue == 0.0
        assert report.total_orders == 0
        assert report.top_products == []
        assert all(bucket.amount == 0.0 for bucket in report.monthly_sales)
        assert len(report.monthly_sales) == 6


class TestRanking:
    def test_ties_on_units_break_on_revenue_then_id(self, shop, line, clock):
        vendor = shop.vendor()
        cheap = shop.product(vendor, price=5.0, name="Cheap")
        dear = shop.product(vendor, price=9.0, name="Dear")
        twin_a = shop.product(vendor, price=1.0, name="Twin")
        twin_b = shop.product(vendor, price=1.0, name="Twin")
        with clock(datetime(2026, 4, 1, tzinfo=UTC)):
            shop.guest_order(
                [
                    line(cheap, price=5.0, quantity=2),
                    line(dear, price=9.0, quantity=2),
                    line(twin_a, price=1.0, quantity=2),
                    line(twin_b, price=1.0, quantity=2),
                ]
            )

        report = sales_report(SETTINGS, vendor_id=vendor, **WINDOW)

        assert [p.product_id for p in report.top_products] == [dear, cheap, *sorted([twin_a, twin_b])]

    def test_top_n_limits_the_list(self, history):
        report = sales_report(SETTINGS, vendor_id=history["first"], top_n=1, **WINDOW)

        assert [p.name for p in report.top_products] == ["Lamp"]


class TestSources:
    def test_order_scan_agrees_with_ledger(self, history):
        ledger = sales_report(SETTINGS, vendor_id=history["first"], **WINDOW)
        scanned = sales_report(SETTINGS, vendor_id=history["first"], source=ORDERS, **WINDOW)

        assert scanned.source == "orders"
        assert scanned.monthly_sales == ledger.monthly_sales
        assert scanned.total_revenue == ledger.total_revenue
        assert scanned.total_orders == ledger.total_orders
        assert scanned.top_products == ledger.top_products

    def test_falls_back_to_orders_when_ledger_fails(self, history):
        with patch("marketplace.analytics.sales.lines_from_ledger", side_effect=RuntimeError("ledger offline")):
            report = sales_report(SETTINGS, vendor_id=history["first"], **WINDOW)

        assert report.source == "orders"
        assert report.total_revenue == 95.5

    def test_forced_ledger_source_propagates_failures(self, history):
        with patch("marketplace.analytics.sales.lines_from_ledger", side_effect=RuntimeError("ledger offline")):
            with pytest.raises(RuntimeError):
                sales_report(SETTINGS, vendor_id=history["first"], source="ledger", **WINDOW)


class TestStoreWide:
    def test_store_report_includes_every_vendor(self, history):
        report = sales_report(SETTINGS, **WINDOW)

        assert report.vendor_id is None
        assert report.total_revenue == 145.5
        assert report.total_orders == 3

    def test_store_summary(self, history):
        summary = store_summary(SETTINGS, **WINDOW)

        assert summary.orders_count == 3
        assert [bucket.month for bucket in summary.monthly_sales][0] == "2026-01"
        assert [day.date for day in summary.daily_sales] == ["2026-02-10", "2026-05-03", "2026-05-20"]
        assert summary.top_categories[0].category == "Lighting"
        assert summary.top_categories[0].total_sold == 3
        assert summary.top_products[0].name == "Lamp"
        assert len(summary.latest_orders) == 3
        assert str(summary.latest_orders[0].created_at.date()) == "2026-05-20"
