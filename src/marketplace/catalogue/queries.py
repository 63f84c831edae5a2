"""Read-side access to the catalogue."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product, ProductCategory
from marketplace.errors import NotFoundError
from marketplace.utils.queries import Page, fetch_page


def find_product(product_id) -> Product | None:
    try:
        return current_domain.repository_for(Product).get(str(product_id))
    except ObjectNotFoundError:
        return None


def get_product(product_id) -> Product:
    product = find_product(product_id)
    if product is None:
        raise NotFoundError("Product not found", entity="Product", entity_id=str(product_id))
    return product


def list_products(
    category: str | None = None,
    available: bool | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
    search: str | None = None,
    page: int | None = None,
    limit: int | None = None,
) -> Page:
    """Newest-first page of products; an unknown category is ignored rather than matching nothing."""
    criteria = {}
    if category and category in {c.value for c in ProductCategory}:
        criteria["category"] = category
    if available is not None:
        criteria["is_available"] = available
    if min_price is not None:
        criteria["price__gte"] = min_price
    if max_price is not None:
        criteria["price__lte"] = max_price
    if search and search.strip():
        criteria["name__icontains"] = search.strip()

    queryset = current_domain.repository_for(Product)._dao.query.filter(**criteria).order_by("-created_at")
    return fetch_page(queryset, page, limit)
