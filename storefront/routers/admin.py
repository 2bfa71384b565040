# storefront/routers/admin.py
from fastapi import APIRouter, Depends, Query, status

from storefront.core.api_client import ApiGateway
from storefront.core.auth import get_gateway, require_owner
from storefront.schemas.admin import (
    AdminDashboard,
    AdminOrdersView,
    AdminProductsView,
    LowStockAlert,
    ProfitLine,
    RevenueAnalytics,
    StatusCount,
    TopProduct,
)
from storefront.schemas.catalog import Product, ProductCreate, ProductUpdate
from storefront.schemas.common import OrderStatus
from storefront.schemas.order import Order, OrderStatusUpdate
from storefront.services.admin_service import AdminService

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(require_owner)],
)

service = AdminService()


# -------- analytics --------


@router.get("/dashboard", response_model=AdminDashboard)
def get_dashboard(gateway: ApiGateway = Depends(get_gateway)):
    """
    Headline numbers, revenue, top 5 products and low-stock alerts.

    Only accessible to the store owner.
    """
    return service.dashboard(gateway)


@router.get("/analytics/revenue", response_model=RevenueAnalytics)
def get_revenue(
    period: str | None = None,
    gateway: ApiGateway = Depends(get_gateway),
):
    return service.revenue(gateway, period)


@router.get("/analytics/top-products", response_model=list[TopProduct])
def get_top_products(
    limit: int = Query(default=10, ge=1, le=100),
    gateway: ApiGateway = Depends(get_gateway),
):
    return service.top_products(gateway, limit)


@router.get("/analytics/low-stock", response_model=list[LowStockAlert])
def get_low_stock(gateway: ApiGateway = Depends(get_gateway)):
    return service.low_stock(gateway)


@router.get("/analytics/order-status", response_model=list[StatusCount])
def get_order_status_distribution(gateway: ApiGateway = Depends(get_gateway)):
    return service.order_status_distribution(gateway)


@router.get("/analytics/payment-status", response_model=list[StatusCount])
def get_payment_status_distribution(gateway: ApiGateway = Depends(get_gateway)):
    return service.payment_status_distribution(gateway)


@router.get("/analytics/profit", response_model=list[ProfitLine])
def get_profit(
    period: str | None = None,
    gateway: ApiGateway = Depends(get_gateway),
):
    return service.profit(gateway, period)


# -------- orders --------


@router.get("/orders", response_model=AdminOrdersView)
def list_orders(
    order_status: OrderStatus | None = None,
    gateway: ApiGateway = Depends(get_gateway),
):
    """
    All orders, optionally filtered by status.

    `status_counts` always covers every order so filter tabs can show
    their totals.
    """
    return service.orders(gateway, order_status)


@router.patch("/orders/{order_id}", response_model=Order)
def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    gateway: ApiGateway = Depends(get_gateway),
):
    return service.update_order_status(gateway, order_id, payload)


# -------- products --------


@router.get("/products", response_model=AdminProductsView)
def list_products(
    q: str | None = None,
    gateway: ApiGateway = Depends(get_gateway),
):
    """
    Product table with a name / SKU search.
    """
    return service.products(gateway, q)


@router.post("/products", response_model=Product, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: ProductCreate,
    gateway: ApiGateway = Depends(get_gateway),
):
    return service.create_product(gateway, payload)


@router.patch("/products/{product_id}", response_model=Product)
def update_product(
    product_id: int,
    payload: ProductUpdate,
    gateway: ApiGateway = Depends(get_gateway),
):
    return service.update_product(gateway, product_id, payload)


@router.delete("/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: int,
    gateway: ApiGateway = Depends(get_gateway),
):
    service.delete_product(gateway, product_id)
