"""Cart reads: resolved cart view, item count and the pre-checkout validation gate."""

from dataclasses import dataclass, field
from datetime import datetime

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart
from marketplace.catalogue.queries import find_product
from marketplace.utils import money

logger = structlog.get_logger(__name__)


@dataclass
class CartLine:
    item_id: str
    product_id: str
    name: str
    category: str
    price: float
    quantity: int
    stock: int
    is_available: bool
    added_at: datetime | None = None

    @property
    def subtotal(self) -> float:
        return money.as_float(money.line_total(self.price, self.quantity))


@dataclass
class CartView:
    user_id: str
    items: list[CartLine] = field(default_factory=list)
    persisted: bool = False
    updated_at: datetime | None = None

    @property
    def total_items(self) -> int:
        return sum(line.quantity for line in self.items)

    @property
    def total_amount(self) -> float:
        return money.as_float(money.total(line.subtotal for line in self.items))


def find_cart(user_id) -> Cart | None:
    try:
        return current_domain.repository_for(Cart).get(str(user_id))
    except ObjectNotFoundError:
        return None


def load_cart(user_id) -> CartView:
    """The user's cart with product details resolved.

    Lines whose product was deleted or switched off are dropped, and the
    trimmed cart is saved. A user without a cart gets an empty, unsaved view.
    """
    cart = find_cart(user_id)
    if cart is None:
        return CartView(user_id=str(user_id))

    lines = []
    stale = []
    for item in cart.items:
        product = find_product(item.product_id)
        if product is None or not product.is_available:
            stale.append(item.product_id)
            continue
        lines.append(
            CartLine(
                item_id=str(item.id),
                product_id=str(product.id),
                name=product.name,
                category=product.category,
                price=product.price,
                quantity=item.quantity,
                stock=product.stock,
                is_available=product.is_available,
                added_at=item.added_at,
            )
        )

    if stale:
        cart.prune(stale)
        current_domain.repository_for(Cart).add(cart)
        logger.info("Pruned stale cart lines", user_id=str(user_id), removed=len(stale))

    return CartView(user_id=str(user_id), items=lines, persisted=True, updated_at=cart.updated_at)


def item_count(user_id) -> int:
    cart = find_cart(user_id)
    return cart.item_count if cart else 0


@dataclass(frozen=True)
class CartProblem:
    product_id: str
    message: str
    stock_shortage: bool = False


def inspect_cart(cart: Cart) -> list[CartProblem]:
    problems = []
    for item in cart.items:
        product = find_product(item.product_id)
        if product is None:
            problems.append(CartProblem(str(item.product_id), "Product no longer exists"))
        elif not product.is_available:
            problems.append(CartProblem(str(item.product_id), f"{product.name} is no longer available"))
        elif item.quantity > product.stock:
            problems.append(
                CartProblem(
                    str(item.product_id),
                    f"{product.name}: Only {product.stock} available, you have {item.quantity} in cart",
                    stock_shortage=True,
                )
            )
    return problems


def validate_cart(user_id) -> list[str]:
    """Human-readable problems that would block checkout; an empty list means the cart is good to go."""
    cart = find_cart(user_id)
    if cart is None:
        return []
    return [problem.message for problem in inspect_cart(cart)]
