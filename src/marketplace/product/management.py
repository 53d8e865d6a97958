"""Product registration and restocking."""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.product.product import Product
from marketplace.shared.errors import ProductNotFoundError
from marketplace.vendor.vendor import get_vendor

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Product")
class RegisterProduct:
    vendor_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    slug = String(required=True, max_length=255)
    image = String(max_length=500)
    category = String(required=True, max_length=100)
    price = Float(required=True, min_value=0.0)
    count_in_stock = Integer(default=0, min_value=0)


@marketplace.command(part_of="Product")
class RestockProduct:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


def get_product(product_id) -> Product:
    try:
        return current_domain.repository_for(Product).get(str(product_id))
    except ObjectNotFoundError as exc:
        raise ProductNotFoundError({"product_id": [f"Product {product_id} not found"]}) from exc


@marketplace.command_handler(part_of=Product)
class ProductManagementHandler:
    @handle(RegisterProduct)
    def register_product(self, command):
        get_vendor(command.vendor_id)

        product = Product(
            vendor_id=command.vendor_id,
            name=command.name,
            slug=command.slug,
            image=command.image,
            category=command.category,
            price=command.price,
            count_in_stock=command.count_in_stock or 0,
        )
        current_domain.repository_for(Product).add(product)

        logger.info("Product registered", product_id=str(product.id), vendor_id=str(command.vendor_id))
        return str(product.id)

    @handle(RestockProduct)
    def restock_product(self, command):
        product = get_product(command.product_id)
        product.restock(command.quantity)
        current_domain.repository_for(Product).add(product)
        return product.count_in_stock
