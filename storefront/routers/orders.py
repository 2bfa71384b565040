# storefront/routers/orders.py
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from storefront.core.api_client import ApiGateway
from storefront.core.auth import get_gateway, require_auth
from storefront.schemas.common import Page
from storefront.schemas.order import OrderListParams, OrderView, PaymentStatusResponse
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])

service = OrderService()


@router.get(
    "/me",
    response_model=Page[OrderView],
    dependencies=[Depends(require_auth)],
)
def list_my_orders(
    params: Annotated[OrderListParams, Query()],
    gateway: ApiGateway = Depends(get_gateway),
):
    """
    The logged-in shopper's orders, newest first.

    Query params (optional):
      - order_status, payment_status: filter
      - page, page_size
    """
    return service.list_my_orders(gateway, params)


@router.get("/{order_number}", response_model=OrderView)
def get_order(
    order_number: str,
    gateway: ApiGateway = Depends(get_gateway),
):
    """
    Order detail by order number.

    Guests can look up the order they just placed; ownership is
    enforced upstream.
    """
    return service.get_order(gateway, order_number)


@router.get("/payments/{order_id}/status", response_model=PaymentStatusResponse)
def get_payment_status(
    order_id: int,
    gateway: ApiGateway = Depends(get_gateway),
):
    """
    Poll the M-Pesa payment status of an order.
    """
    return service.payment_status(gateway, order_id)
