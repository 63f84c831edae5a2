"""Pydantic request/response schemas for the marketplace API.

These are the external contract, kept separate from the Protean commands.
JSON uses camelCase (``productId``, ``deliveryDetails``...) while Python code
uses snake_case; both spellings are accepted on input.
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from marketplace.cart.queries import CartView
from marketplace.catalogue.product import Product
from marketplace.order.order import Order
from marketplace.utils.queries import Page


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StatusResponse(CamelModel):
    status: str = "ok"


class CountResponse(CamelModel):
    count: int


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
class ProductResponse(CamelModel):
    id: str
    name: str
    category: str
    price: float
    stock: int
    is_available: bool
    description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_product(cls, product: Product) -> "ProductResponse":
        return cls(
            id=str(product.id),
            name=product.name,
            category=product.category,
            price=product.price,
            stock=product.stock,
            is_available=product.is_available,
            description=product.description,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


class ProductListResponse(CamelModel):
    products: list[ProductResponse]
    total: int
    page: int
    pages: int

    @classmethod
    def from_page(cls, page: Page) -> "ProductListResponse":
        return cls(
            products=[ProductResponse.from_product(p) for p in page.items],
            total=page.total,
            page=page.page,
            pages=page.pages,
        )


class AddProductRequest(CamelModel):
    name: str
    category: str
    price: float
    stock: int = 0
    description: str | None = None
    is_available: bool = True

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "name": "Seer Fish",
                    "category": "Fish",
                    "price": 450.0,
                    "stock": 25,
                    "description": "Fresh seer fish, cleaned and cut",
                }
            ]
        },
    )


class UpdateProductRequest(CamelModel):
    name: str | None = None
    category: str | None = None
    price: float | None = None
    description: str | None = None


class ProductStockRequest(CamelModel):
    stock: int


class ProductAvailabilityRequest(CamelModel):
    is_available: bool


class ProductIdResponse(CamelModel):
    product_id: str


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(CamelModel):
    product_id: str
    quantity: int = 1


class UpdateCartQuantityRequest(CamelModel):
    quantity: int


class CartItemResponse(CamelModel):
    item_id: str
    product_id: str
    name: str
    category: str
    price: float
    quantity: int
    stock: int
    is_available: bool
    subtotal: float
    added_at: datetime | None = None


class CartResponse(CamelModel):
    user_id: str
    items: list[CartItemResponse]
    total_items: int
    total_amount: float

    @classmethod
    def from_view(cls, view: CartView) -> "CartResponse":
        return cls(
            user_id=view.user_id,
            items=[
                CartItemResponse(
                    item_id=line.item_id,
                    product_id=line.product_id,
                    name=line.name,
                    category=line.category,
                    price=line.price,
                    quantity=line.quantity,
                    stock=line.stock,
                    is_available=line.is_available,
                    subtotal=line.subtotal,
                    added_at=line.added_at,
                )
                for line in view.items
            ],
            total_items=view.total_items,
            total_amount=view.total_amount,
        )


class CartValidationResponse(CamelModel):
    valid: bool
    errors: list[str]


class MergeCartResponse(CamelModel):
    merged: int
    cart: CartResponse


class GuestCartItemResponse(CamelModel):
    product_id: str
    name: str
    category: str
    price: float
    quantity: int
    stock: int
    subtotal: float
    added_at: str | None = None


class GuestCartResponse(CamelModel):
    session_id: str
    items: list[GuestCartItemResponse]
    total_items: int
    total_amount: float


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class DeliveryDetailsSchema(CamelModel):
    address: str
    phone: str
    delivery_date: date
    delivery_time: str


class CreateOrderRequest(CamelModel):
    delivery_details: DeliveryDetailsSchema
    order_notes: str | None = None
    payment_method: str | None = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "deliveryDetails": {
                        "address": "12 Beach Road, Fort Kochi, Kerala",
                        "phone": "9876543210",
                        "deliveryDate": "2025-12-07",
                        "deliveryTime": "08:00-12:00",
                    },
                    "orderNotes": "Please clean and cut into curry pieces",
                    "paymentMethod": "cod",
                }
            ]
        },
    )


class OrderItemResponse(CamelModel):
    product_id: str
    name: str
    price: float
    quantity: int
    subtotal: float


class PaymentResponse(CamelModel):
    method: str
    status: str
    paid_at: datetime | None = None
    amount: float | None = None


class OrderResponse(CamelModel):
    order_id: str
    user_id: str
    items: list[OrderItemResponse]
    delivery_details: DeliveryDetailsSchema
    order_notes: str | None = None
    total_amount: float
    status: str
    payment: PaymentResponse | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    cancelled_at: datetime | None = None

    @classmethod
    def from_order(cls, order: Order) -> "OrderResponse":
        return cls(
            order_id=order.order_id,
            user_id=str(order.user_id),
            items=[
                OrderItemResponse(
                    product_id=str(item.product_id),
                    name=item.name,
                    price=item.price,
                    quantity=item.quantity,
                    subtotal=item.subtotal,
                )
                for item in order.items
            ],
            delivery_details=DeliveryDetailsSchema(
                address=order.delivery.address,
                phone=order.delivery.phone,
                delivery_date=order.delivery.delivery_date,
                delivery_time=order.delivery.delivery_slot,
            ),
            order_notes=order.order_notes,
            total_amount=order.total_amount,
            status=order.status,
            payment=(
                PaymentResponse(
                    method=order.payment.method,
                    status=order.payment.status,
                    paid_at=order.payment.paid_at,
                    amount=order.payment.amount,
                )
                if order.payment
                else None
            ),
            created_at=order.created_at,
            updated_at=order.updated_at,
            cancelled_at=order.cancelled_at,
        )


class OrderListResponse(CamelModel):
    orders: list[OrderResponse]
    total: int
    page: int
    pages: int

    @classmethod
    def from_page(cls, page: Page) -> "OrderListResponse":
        return cls(
            orders=[OrderResponse.from_order(o) for o in page.items],
            total=page.total,
            page=page.page,
            pages=page.pages,
        )


class CustomerOrderStatsResponse(CamelModel):
    total_orders: int
    by_status: dict[str, int]
    total_spent: float


class OrderStatsResponse(CamelModel):
    total_orders: int
    by_status: dict[str, int]
    total_revenue: float
    today_orders: int


class DeliverySlotResponse(CamelModel):
    slot: str
    available: bool
    reason: str


class UpdateOrderStatusRequest(CamelModel):
    status: str = Field(examples=["confirmed"])
