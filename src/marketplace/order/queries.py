"""Read side of the order ledger: lookups and paginated listings."""

from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.account.account import Account
from marketplace.order.order import Order
from marketplace.shared.errors import OrderNotFoundError
from marketplace.shared.paging import page_offset, scan, total_pages


@dataclass(frozen=True)
class OrderPage:
    orders: list
    total_orders: int
    total_pages: int
    page: int
    page_size: int


@dataclass(frozen=True)
class BuyerContact:
    name: str
    email: str


def get_order(order_id) -> Order:
    try:
        return current_domain.repository_for(Order).get(str(order_id))
    except ObjectNotFoundError as exc:
        raise OrderNotFoundError({"order_id": [f"Order {order_id} not found"]}) from exc


def list_orders(page: int = 1, page_size: int = 10) -> OrderPage:
    """All orders, newest first."""
    query = current_domain.repository_for(Order)._dao.query.order_by("-created_at")
    result = query.offset(page_offset(page, page_size)).limit(page_size).all()
    return OrderPage(
        orders=list(result.items),
        total_orders=result.total,
        total_pages=total_pages(result.total, page_size),
        page=page,
        page_size=page_size,
    )


def list_orders_for_buyer(user_id, page: int = 1, page_size: int = 10) -> OrderPage:
    """Orders placed by one registered account, newest first. Guest orders never match."""
    query = current_domain.repository_for(Order)._dao.query.order_by("-created_at")
    mine = [
        order
        for order in scan(query)
        if not order.buyer.is_guest and str(order.buyer.user_id) == str(user_id)
    ]
    start = page_offset(page, page_size)
    return OrderPage(
        orders=mine[start : start + page_size],
        total_orders=len(mine),
        total_pages=total_pages(len(mine), page_size),
        page=page,
        page_size=page_size,
    )


def find_guest_order(order_id, email: str) -> Order:
    """Guest order tracking: the order id plus the email it was placed with."""
    order = get_order(order_id)
    if not order.buyer.is_guest or order.buyer.email != (email or "").strip().lower():
        raise OrderNotFoundError({"order_id": [f"Order {order_id} not found"]})
    return order


def resolve_buyer_contact(buyer) -> BuyerContact | None:
    """Name and email to reach the buyer, or None when there is no address to write to."""
    if buyer.is_guest:
        return BuyerContact(name=buyer.name, email=buyer.email)

    try:
        account = current_domain.repository_for(Account).get(str(buyer.user_id))
    except ObjectNotFoundError:
        return None
    if not account.email:
        return None
    return BuyerContact(name=account.name, email=account.email)
