# storefront/services/order_service.py
from fastapi import HTTPException, status

from storefront.constants import ORDER_STATUS, PAYMENT_STATUS
from storefront.core.api_client import ApiGateway
from storefront.schemas.common import Page
from storefront.schemas.order import Order, OrderListParams, OrderView, PaymentStatusResponse
from storefront.utils.formatting import (
    format_address,
    format_date,
    format_ksh,
    format_relative_time,
    format_time,
    slug_to_title,
    status_color,
)


def _label(table: dict, key: str) -> tuple[str, str]:
    entry = table.get(key)
    label = entry["label"] if entry else slug_to_title(key.replace("_", "-"))
    return label, status_color(key)


def to_view(order: Order) -> OrderView:
    """Attach status labels, colours, dates and the formatted total."""
    order_label, order_color = _label(ORDER_STATUS, order.order_status)
    payment_label, payment_color = _label(PAYMENT_STATUS, order.payment_status)
    placed = order.created_at
    return OrderView(
        **order.model_dump(),
        order_status_label=order_label,
        order_status_color=order_color,
        payment_status_label=payment_label,
        payment_status_color=payment_color,
        total_display=format_ksh(order.total_amount),
        placed_on=format_date(placed, "long") if placed else None,
        placed_at=format_time(placed) if placed else None,
        placed_ago=format_relative_time(placed) if placed else None,
        delivery_display=(
            format_address(order.delivery_address, order.delivery_city or "", order.delivery_postal_code or "")
            if order.delivery_address
            else None
        ),
    )


class OrderService:
    """
    Order history and payment status for the logged-in shopper.

    Orders are read-only here; status only ever changes upstream.
    """

    def list_my_orders(self, gateway: ApiGateway, params: OrderListParams) -> Page[OrderView]:
        page = gateway.get_orders(params.model_dump(exclude_none=True))
        return Page[OrderView](
            count=page.count,
            next=page.next,
            previous=page.previous,
            results=[to_view(o) for o in page.results],
        )

    def get_order(self, gateway: ApiGateway, order_number: str) -> OrderView:
        order_number = order_number.strip()
        if not order_number:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Order number is required",
            )
        return to_view(gateway.get_order_detail(order_number))

    def payment_status(self, gateway: ApiGateway, order_id: int) -> PaymentStatusResponse:
        return gateway.check_payment_status(order_id)
