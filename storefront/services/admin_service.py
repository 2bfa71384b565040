# storefront/services/admin_service.py
import logging
from collections import Counter

from storefront.constants import ORDER_STATUS
from storefront.core.api_client import ApiGateway
from storefront.schemas.admin import AdminDashboard, AdminOrdersView, AdminProductsView
from storefront.schemas.catalog import Product, ProductCreate, ProductUpdate
from storefront.schemas.order import Order, OrderStatusUpdate
from storefront.services.catalog_service import filter_products

logger = logging.getLogger(__name__)


def status_counts(orders: list[Order]) -> dict[str, int]:
    """Per-status counts over the fetched orders; every status is present."""
    counts = Counter(o.order_status for o in orders)
    return {"all": len(orders), **{s: counts.get(s, 0) for s in ORDER_STATUS}}


def filter_orders(orders: list[Order], order_status: str | None) -> list[Order]:
    if not order_status or order_status == "all":
        return list(orders)
    return [o for o in orders if o.order_status == order_status]


class AdminService:
    """
    Owner panel.

    Analytics are passed through from the API. Order and product
    tables are fetched once and filtered locally.
    """

    # ---- analytics ----

    def dashboard(self, gateway: ApiGateway) -> AdminDashboard:
        return AdminDashboard(
            summary=gateway.admin_get_dashboard(),
            revenue=gateway.admin_get_revenue_analytics(),
            top_products=gateway.admin_get_top_products({"limit": 5}),
            low_stock=gateway.admin_get_low_stock_alerts(),
        )

    def revenue(self, gateway: ApiGateway, period: str | None = None):
        return gateway.admin_get_revenue_analytics({"period": period})

    def top_products(self, gateway: ApiGateway, limit: int = 10):
        return gateway.admin_get_top_products({"limit": limit})

    def low_stock(self, gateway: ApiGateway):
        return gateway.admin_get_low_stock_alerts()

    def order_status_distribution(self, gateway: ApiGateway):
        return gateway.admin_get_order_status_distribution()

    def payment_status_distribution(self, gateway: ApiGateway):
        return gateway.admin_get_payment_status_distribution()

    def profit(self, gateway: ApiGateway, period: str | None = None):
        return gateway.admin_get_profit_analysis({"period": period})

    # ---- orders ----

    def orders(self, gateway: ApiGateway, order_status: str | None = None) -> AdminOrdersView:
        """
        All orders with a local status filter.

        Counts are always computed over the unfiltered list so the
        filter tabs keep their numbers.
        """
        page = gateway.admin_get_orders()
        filtered = filter_orders(page.results, order_status)
        return AdminOrdersView(
            orders=filtered,
            total=len(filtered),
            status_counts=status_counts(page.results),
            filter_status=order_status or "all",
        )

    def update_order_status(
        self, gateway: ApiGateway, order_id: int, payload: OrderStatusUpdate
    ) -> Order:
        order = gateway.admin_update_order_status(order_id, payload)
        logger.info(f"Order {order.order_number} set to {payload.order_status}")
        return order

    # ---- products ----

    def products(self, gateway: ApiGateway, query: str | None = None) -> AdminProductsView:
        page = gateway.admin_get_products({"page_size": 100})
        matched = filter_products(page.results, query)
        return AdminProductsView(products=matched, total=len(matched), query=query)

    def create_product(self, gateway: ApiGateway, payload: ProductCreate) -> Product:
        product = gateway.admin_create_product(payload)
        logger.info(f"Product {product.sku} created")
        return product

    def update_product(self, gateway: ApiGateway, product_id: int, payload: ProductUpdate) -> Product:
        return gateway.admin_update_product(product_id, payload)

    def delete_product(self, gateway: ApiGateway, product_id: int) -> None:
        gateway.admin_delete_product(product_id)
        logger.info(f"Product {product_id} deleted")
