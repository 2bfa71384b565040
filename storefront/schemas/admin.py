# storefront/schemas/admin.py
from sqlmodel import SQLModel, Field

from storefront.schemas.catalog import Product
from storefront.schemas.order import Order


class DashboardSummary(SQLModel):
    """
    Owner dashboard headline numbers.
    """

    total_revenue: float = 0.0
    total_orders: int = 0
    orders_today: int = 0
    total_products: int = 0
    low_stock_items: int = 0


class RevenuePeriod(SQLModel):
    today: float = 0.0
    week: float = 0.0
    month: float = 0.0


class RevenueAnalytics(SQLModel):
    period: RevenuePeriod = Field(default_factory=RevenuePeriod)
    average_order_value: float = 0.0
    paid_orders_count: int = 0


class TopProduct(SQLModel):
    product_id: int
    product_name: str
    sku: str
    quantity_sold: int = 0
    revenue: float = 0.0


class LowStockAlert(SQLModel):
    product_id: int
    product_name: str
    sku: str
    current_stock: int = 0
    reserved_stock: int = 0
    available_stock: int = 0
    category: str | None = None


class ProfitLine(SQLModel):
    product_id: int
    product_name: str
    sku: str
    revenue: float = 0.0
    cost: float = 0.0
    profit: float = 0.0
    profit_margin_percent: float = 0.0


class StatusCount(SQLModel):
    status: str
    count: int


class AdminOrdersView(SQLModel):
    """
    Orders table for the owner panel, with per-status counts
    computed over the fetched page.
    """

    orders: list[Order]
    total: int
    status_counts: dict[str, int]
    filter_status: str = "all"


class AdminProductsView(SQLModel):
    products: list[Product]
    total: int
    query: str | None = None


class AdminDashboard(SQLModel):
    summary: DashboardSummary
    revenue: RevenueAnalytics
    top_products: list[TopProduct] = Field(default_factory=list)
    low_stock: list[LowStockAlert] = Field(default_factory=list)
