# storefront/schemas/order.py
from datetime import datetime
from typing import Any

from pydantic import ConfigDict, model_validator
from sqlmodel import SQLModel, Field

from storefront.schemas.common import DeliveryTier, OrderStatus, PaymentStatus

# The API is not consistent about money field names; the canonical
# names are total_amount and delivery_cost.
_MONEY_ALIASES = {
    "total": "total_amount",
    "delivery_fee": "delivery_cost",
}


def _canonical_money_fields(data: Any) -> Any:
    if not isinstance(data, dict):
        return data
    data = dict(data)
    for alias, canonical in _MONEY_ALIASES.items():
        if alias in data and canonical not in data:
            data[canonical] = data.pop(alias)
    # some order endpoints say "status" for order_status
    if "status" in data and "order_status" not in data:
        data["order_status"] = data.pop("status")
    return data


class OrderItem(SQLModel):
    """
    Representation of a single order line item.
    """

    id: int | None = None
    product_id: int | None = None
    product_name: str
    sku: str
    unit_price: float
    quantity: int
    line_total: float

    @model_validator(mode="before")
    @classmethod
    def fill_line_total(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("line_total") is None:
            data = dict(data)
            data["line_total"] = float(data.get("unit_price", 0)) * int(data.get("quantity", 0))
        return data


class Order(SQLModel):
    """
    Read-only projection of an order as the API reports it.

    The storefront never changes status locally; it only reflects
    server state.
    """

    id: int
    order_number: str
    order_status: OrderStatus = "pending"
    payment_status: PaymentStatus = "unpaid"
    items: list[OrderItem] = Field(default_factory=list)
    subtotal: float = 0.0
    delivery_cost: float = 0.0
    total_amount: float = 0.0
    delivery_address: str | None = None
    delivery_city: str | None = None
    delivery_postal_code: str | None = None
    recipient_name: str | None = None
    recipient_phone: str | None = None
    guest_email: str | None = None
    guest_phone: str | None = None
    customer_notes: str | None = None
    item_count: int | None = None
    created_at: datetime | None = None
    paid_at: datetime | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def canonical_fields(cls, data: Any) -> Any:
        return _canonical_money_fields(data)


class OrderView(Order):
    """Order with display labels attached for the browser."""

    order_status_label: str
    order_status_color: str
    payment_status_label: str
    payment_status_color: str
    total_display: str
    placed_on: str | None = None
    placed_at: str | None = None
    placed_ago: str | None = None
    delivery_display: str | None = None


class OrderStatusUpdate(SQLModel):
    """
    Owner payload to change order status.
    """

    model_config = ConfigDict(extra="forbid")

    order_status: OrderStatus
    admin_notes: str | None = None


class OrderListParams(SQLModel):
    order_status: OrderStatus | None = None
    payment_status: PaymentStatus | None = None
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1, le=100)


# -------- checkout & payment --------


class CheckoutItem(SQLModel):
    product_id: int
    quantity: int = Field(gt=0)


class CheckoutRequest(SQLModel):
    """
    Body of POST /orders/checkout/.
    Built by the checkout wizard from the cart and the draft.
    """

    items: list[CheckoutItem]
    delivery_address: str
    delivery_city: str
    delivery_postal_code: str = ""
    recipient_name: str
    recipient_phone: str
    delivery_type: DeliveryTier
    guest_email: str | None = None
    guest_phone: str | None = None
    customer_notes: str | None = None


class CheckoutResponse(SQLModel):
    id: int
    order_number: str
    subtotal: float = 0.0
    delivery_cost: float = 0.0
    total_amount: float = 0.0
    order_status: str | None = None
    created_at: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def canonical_fields(cls, data: Any) -> Any:
        return _canonical_money_fields(data)


class STKPushRequest(SQLModel):
    order_id: int
    phone_number: str | None = None


class STKPushResponse(SQLModel):
    success: bool = True
    merchant_request_id: str | None = None
    checkout_request_id: str | None = None
    response_code: str | None = None
    response_description: str | None = None


class PaymentStatusResponse(SQLModel):
    order_id: int
    order_number: str
    payment_status: PaymentStatus
    order_status: OrderStatus
    total_amount: float = 0.0
    paid_at: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def canonical_fields(cls, data: Any) -> Any:
        return _canonical_money_fields(data)
