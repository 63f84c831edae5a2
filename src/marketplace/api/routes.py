"""FastAPI routes for the marketplace: catalogue, carts, orders and admin."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Query
from protean.utils.globals import current_domain

from marketplace.api.dependencies import AdminUser, CurrentUser, GuestCarts, GuestSession
from marketplace.api.schemas import (
    AddProductRequest,
    AddToCartRequest,
    CartResponse,
    CartValidationResponse,
    CountResponse,
    CreateOrderRequest,
    CustomerOrderStatsResponse,
    DeliverySlotResponse,
    GuestCartResponse,
    MergeCartResponse,
    OrderListResponse,
    OrderResponse,
    OrderStatsResponse,
    ProductAvailabilityRequest,
    ProductIdResponse,
    ProductListResponse,
    ProductResponse,
    ProductStockRequest,
    StatusResponse,
    UpdateCartQuantityRequest,
    UpdateOrderStatusRequest,
    UpdateProductRequest,
)
from marketplace.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartQuantity
from marketplace.cart.queries import item_count, load_cart, validate_cart
from marketplace.catalogue.management import (
    AddProduct,
    RemoveProduct,
    SetProductAvailability,
    SetProductStock,
    UpdateProduct,
)
from marketplace.catalogue.queries import get_product, list_products
from marketplace.checkout.placement import PlaceOrder, place_order
from marketplace.delivery.window import available_slots
from marketplace.order.administration import RecordPayment, UpdateOrderStatus
from marketplace.order.cancellation import CancelOrder
from marketplace.order.queries import (
    customer_order_stats,
    get_order,
    get_user_order,
    list_all_orders,
    list_user_orders,
    order_statistics,
)

# ---------------------------------------------------------------------------
# Product Router (public catalogue)
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.get("", response_model=ProductListResponse)
async def browse_products(
    category: str | None = None,
    is_available: bool | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> ProductListResponse:
    result = list_products(
        category=category,
        available=is_available,
        min_price=min_price,
        max_price=max_price,
        search=search,
        page=page,
        limit=limit,
    )
    return ProductListResponse.from_page(result)


@product_router.get("/{product_id}", response_model=ProductResponse)
async def product_detail(product_id: str) -> ProductResponse:
    return ProductResponse.from_product(get_product(product_id))


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.post("/add", response_model=CartResponse)
async def add_to_cart(body: AddToCartRequest, user_id: CurrentUser) -> CartResponse:
    command = AddToCart(
        user_id=user_id,
        product_id=body.product_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return CartResponse.from_view(load_cart(user_id))


@cart_router.get("", response_model=CartResponse)
async def view_cart(user_id: CurrentUser) -> CartResponse:
    return CartResponse.from_view(load_cart(user_id))


@cart_router.get("/count", response_model=CountResponse)
async def cart_count(user_id: CurrentUser) -> CountResponse:
    return CountResponse(count=item_count(user_id))


@cart_router.get("/validate", response_model=CartValidationResponse)
async def check_cart(user_id: CurrentUser) -> CartValidationResponse:
    errors = validate_cart(user_id)
    return CartValidationResponse(valid=not errors, errors=errors)


@cart_router.put("/update/{item_id}", response_model=CartResponse)
async def update_cart_item(item_id: str, body: UpdateCartQuantityRequest, user_id: CurrentUser) -> CartResponse:
    command = UpdateCartQuantity(
        user_id=user_id,
        item_id=item_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return CartResponse.from_view(load_cart(user_id))


@cart_router.delete("/remove/{item_id}", response_model=CartResponse)
async def remove_cart_item(item_id: str, user_id: CurrentUser) -> CartResponse:
    current_domain.process(RemoveFromCart(user_id=user_id, item_id=item_id), asynchronous=False)
    return CartResponse.from_view(load_cart(user_id))


@cart_router.delete("/clear", response_model=CartResponse)
async def clear_cart(user_id: CurrentUser) -> CartResponse:
    current_domain.process(ClearCart(user_id=user_id), asynchronous=False)
    return CartResponse.from_view(load_cart(user_id))


@cart_router.post("/merge", response_model=MergeCartResponse)
async def merge_guest_cart(user_id: CurrentUser, session_id: GuestSession, guest_carts: GuestCarts) -> MergeCartResponse:
    """Fold the caller's guest cart into their cart after sign-in."""
    merged = guest_carts.merge_into_user_cart(session_id, user_id)
    return MergeCartResponse(merged=merged, cart=CartResponse.from_view(load_cart(user_id)))


# ---------------------------------------------------------------------------
# Guest Cart Router
# ---------------------------------------------------------------------------
guest_cart_router = APIRouter(prefix="/guest-cart", tags=["guest-cart"])


@guest_cart_router.get("", response_model=GuestCartResponse)
async def view_guest_cart(session_id: GuestSession, guest_carts: GuestCarts) -> GuestCartResponse:
    return GuestCartResponse(**guest_carts.get_cart(session_id))


@guest_cart_router.get("/count", response_model=CountResponse)
async def guest_cart_count(session_id: GuestSession, guest_carts: GuestCarts) -> CountResponse:
    return CountResponse(count=guest_carts.item_count(session_id))


@guest_cart_router.post("/add", response_model=GuestCartResponse)
async def add_to_guest_cart(
    body: AddToCartRequest, session_id: GuestSession, guest_carts: GuestCarts
) -> GuestCartResponse:
    return GuestCartResponse(**guest_carts.add_item(session_id, body.product_id, body.quantity))


@guest_cart_router.put("/update/{product_id}", response_model=GuestCartResponse)
async def update_guest_cart_item(
    product_id: str, body: UpdateCartQuantityRequest, session_id: GuestSession, guest_carts: GuestCarts
) -> GuestCartResponse:
    return GuestCartResponse(**guest_carts.update_item(session_id, product_id, body.quantity))


@guest_cart_router.delete("/remove/{product_id}", response_model=GuestCartResponse)
async def remove_guest_cart_item(product_id: str, session_id: GuestSession, guest_carts: GuestCarts) -> GuestCartResponse:
    return GuestCartResponse(**guest_carts.remove_item(session_id, product_id))


@guest_cart_router.delete("/clear", response_model=GuestCartResponse)
async def clear_guest_cart(session_id: GuestSession, guest_carts: GuestCarts) -> GuestCartResponse:
    return GuestCartResponse(**guest_carts.clear(session_id))


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("/create", status_code=201, response_model=OrderResponse)
async def create_order(body: CreateOrderRequest, user_id: CurrentUser) -> OrderResponse:
    command = PlaceOrder(
        user_id=user_id,
        address=body.delivery_details.address,
        phone=body.delivery_details.phone,
        delivery_date=body.delivery_details.delivery_date,
        delivery_slot=body.delivery_details.delivery_time,
        order_notes=body.order_notes,
        payment_method=body.payment_method,
    )
    order_id = place_order(command)
    return OrderResponse.from_order(get_order(order_id))


@order_router.get("", response_model=OrderListResponse)
async def my_orders(
    user_id: CurrentUser,
    status: str | None = None,
    page: int = 1,
    limit: int = 20,
) -> OrderListResponse:
    return OrderListResponse.from_page(list_user_orders(user_id, status=status, page=page, limit=limit))


@order_router.get("/stats", response_model=CustomerOrderStatsResponse)
async def my_order_stats(user_id: CurrentUser) -> CustomerOrderStatsResponse:
    return CustomerOrderStatsResponse(**customer_order_stats(user_id))


@order_router.get("/delivery-slots", response_model=list[DeliverySlotResponse])
async def delivery_slots(delivery_date: Annotated[date, Query(alias="date")]) -> list[DeliverySlotResponse]:
    return [DeliverySlotResponse(**slot) for slot in available_slots(delivery_date)]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def my_order(order_id: str, user_id: CurrentUser) -> OrderResponse:
    return OrderResponse.from_order(get_user_order(user_id, order_id))


@order_router.put("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(order_id: str, user_id: CurrentUser) -> OrderResponse:
    current_domain.process(CancelOrder(user_id=user_id, order_id=order_id), asynchronous=False)
    return OrderResponse.from_order(get_order(order_id))


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_router = APIRouter(prefix="/admin", tags=["admin"])


@admin_router.get("/orders", response_model=OrderListResponse)
async def all_orders(
    admin_id: AdminUser,
    status: str | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 20,
) -> OrderListResponse:
    return OrderListResponse.from_page(list_all_orders(status=status, search=search, page=page, limit=limit))


@admin_router.get("/orders/stats", response_model=OrderStatsResponse)
async def dashboard_order_stats(admin_id: AdminUser) -> OrderStatsResponse:
    return OrderStatsResponse(**order_statistics())


@admin_router.put("/orders/{order_id}/status", response_model=OrderResponse)
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest, admin_id: AdminUser) -> OrderResponse:
    current_domain.process(UpdateOrderStatus(order_id=order_id, status=body.status), asynchronous=False)
    return OrderResponse.from_order(get_order(order_id))


@admin_router.put("/orders/{order_id}/payment", response_model=OrderResponse)
async def record_order_payment(order_id: str, admin_id: AdminUser) -> OrderResponse:
    current_domain.process(RecordPayment(order_id=order_id), asynchronous=False)
    return OrderResponse.from_order(get_order(order_id))


@admin_router.post("/products", status_code=201, response_model=ProductIdResponse)
async def add_product(body: AddProductRequest, admin_id: AdminUser) -> ProductIdResponse:
    command = AddProduct(
        name=body.name,
        category=body.category,
        price=body.price,
        stock=body.stock,
        description=body.description,
        is_available=body.is_available,
        created_by=admin_id,
    )
    product_id = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=product_id)


@admin_router.put("/products/{product_id}", response_model=ProductResponse)
async def update_product(product_id: str, body: UpdateProductRequest, admin_id: AdminUser) -> ProductResponse:
    command = UpdateProduct(
        product_id=product_id,
        name=body.name,
        category=body.category,
        price=body.price,
        description=body.description,
    )
    current_domain.process(command, asynchronous=False)
    return ProductResponse.from_product(get_product(product_id))


@admin_router.put("/products/{product_id}/stock", response_model=ProductResponse)
async def set_product_stock(product_id: str, body: ProductStockRequest, admin_id: AdminUser) -> ProductResponse:
    current_domain.process(SetProductStock(product_id=product_id, stock=body.stock), asynchronous=False)
    return ProductResponse.from_product(get_product(product_id))


@admin_router.put("/products/{product_id}/availability", response_model=ProductResponse)
async def set_product_availability(
    product_id: str, body: ProductAvailabilityRequest, admin_id: AdminUser
) -> ProductResponse:
    command = SetProductAvailability(product_id=product_id, is_available=body.is_available)
    current_domain.process(command, asynchronous=False)
    return ProductResponse.from_product(get_product(product_id))


@admin_router.delete("/products/{product_id}", response_model=StatusResponse)
async def remove_product(product_id: str, admin_id: AdminUser) -> StatusResponse:
    current_domain.process(RemoveProduct(product_id=product_id), asynchronous=False)
    return StatusResponse()
