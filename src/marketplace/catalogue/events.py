"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Identifier, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Product")
class ProductSoldOut:
    """The last unit of a product was reserved; it is now unavailable."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    sold_out_at = DateTime(required=True)
