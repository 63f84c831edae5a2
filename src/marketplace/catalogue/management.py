"""Administrative product management: commands and handler."""

import structlog
from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.catalogue.queries import get_product
from marketplace.domain import marketplace

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Product")
class AddProduct:
    name = String(required=True, max_length=100)
    category = String(required=True, max_length=20)
    price = Float(required=True)
    stock = Integer(default=0)
    description = String(max_length=500)
    is_available = Boolean(default=True)
    created_by = String(max_length=255)


@marketplace.command(part_of="Product")
class UpdateProduct:
    product_id = Identifier(required=True)
    name = String(max_length=100)
    category = String(max_length=20)
    price = Float()
    description = String(max_length=500)


@marketplace.command(part_of="Product")
class SetProductStock:
    product_id = Identifier(required=True)
    stock = Integer(required=True)


@marketplace.command(part_of="Product")
class SetProductAvailability:
    product_id = Identifier(required=True)
    is_available = Boolean(required=True)


@marketplace.command(part_of="Product")
class RemoveProduct:
    product_id = Identifier(required=True)


@marketplace.command_handler(part_of=Product)
class ManageProductsHandler:
    @handle(AddProduct)
    def add_product(self, command):
        product = Product.create(
            name=command.name,
            category=command.category,
            price=command.price,
            stock=command.stock or 0,
            description=command.description,
            created_by=command.created_by,
            is_available=command.is_available,
        )
        current_domain.repository_for(Product).add(product)
        logger.info("Product added", product_id=str(product.id), created_by=command.created_by)
        return str(product.id)

    @handle(UpdateProduct)
    def update_product(self, command):
        product = get_product(command.product_id)
        product.update_details(
            name=command.name,
            category=command.category,
            price=command.price,
            description=command.description,
        )
        current_domain.repository_for(Product).add(product)

    @handle(SetProductStock)
    def set_product_stock(self, command):
        product = get_product(command.product_id)
        product.set_stock(command.stock)
        current_domain.repository_for(Product).add(product)

    @handle(SetProductAvailability)
    def set_product_availability(self, command):
        product = get_product(command.product_id)
        product.set_availability(command.is_available)
        current_domain.repository_for(Product).add(product)

    @handle(RemoveProduct)
    def remove_product(self, command):
        product = get_product(command.product_id)
        current_domain.repository_for(Product)._dao.delete(product)
        logger.info("Product removed", product_id=str(command.product_id))
