# storefront/services/catalog_service.py
import logging
import threading
from typing import Any

from storefront.constants import (
    CRITICAL_STOCK_THRESHOLD,
    DEFAULT_SORT,
    LOW_STOCK_THRESHOLD,
    SORT_ORDERING,
)
from storefront.core.api_client import ApiGateway
from storefront.schemas.catalog import (
    Category,
    FeedPage,
    Product,
    ProductFilters,
    VehicleMake,
    VehicleModel,
)
from storefront.schemas.common import Page
from storefront.services.registry import ClientRegistry
from storefront.stores.vehicle import SelectedVehicle

logger = logging.getLogger(__name__)


def build_product_params(
    filters: ProductFilters,
    selected_vehicle: SelectedVehicle | None = None,
    page: int | None = None,
) -> dict[str, Any]:
    """
    Map catalog filters to the products endpoint query.

    The selected vehicle narrows the list only when the filters carry
    no vehicle of their own.
    """
    params: dict[str, Any] = {
        "search": filters.search,
        "category": filters.category,
        "vehicle_make": filters.vehicle_make,
        "vehicle_model": filters.vehicle_model,
        "vehicle_year": filters.vehicle_year,
        "price_min": filters.price_min,
        "price_max": filters.price_max,
        "in_stock": filters.in_stock,
        "ordering": SORT_ORDERING.get(filters.sort, SORT_ORDERING[DEFAULT_SORT]),
        "page_size": filters.page_size,
        "page": page,
    }

    explicit = any(
        v is not None for v in (filters.vehicle_make, filters.vehicle_model, filters.vehicle_year)
    )
    if selected_vehicle is not None and not explicit:
        params["vehicle_make"] = selected_vehicle.make_id
        params["vehicle_model"] = selected_vehicle.model_id
        params["vehicle_year"] = selected_vehicle.year

    return params


def stock_badge(stock: int) -> str:
    if stock <= 0:
        return "out_of_stock"
    if stock <= CRITICAL_STOCK_THRESHOLD:
        return "critical"
    if stock <= LOW_STOCK_THRESHOLD:
        return "low"
    return "in_stock"


def filter_products(products: list[Product], query: str | None) -> list[Product]:
    """Case-insensitive match on name or SKU over an already-fetched list."""
    if not query or not query.strip():
        return list(products)
    needle = query.strip().lower()
    return [p for p in products if needle in p.name.lower() or needle in p.sku.lower()]


class ProductFeed:
    """
    Infinite-scroll accumulator for one browser.

    Only one page fetch runs at a time. A second load_next() while a
    fetch is in flight returns the current state flagged busy and does
    not touch the network.
    """

    def __init__(self, filters: ProductFilters | None = None, vehicle: SelectedVehicle | None = None):
        self._in_flight = threading.Lock()
        self.filters = filters or ProductFilters()
        self.vehicle = vehicle
        self.products: list[Product] = []
        self.page = 0
        self.count = 0
        self.has_more = True

    def snapshot(self, busy: bool = False) -> FeedPage:
        return FeedPage(
            products=list(self.products),
            page=self.page,
            has_more=self.has_more,
            count=self.count,
            busy=busy,
        )

    def reset(
        self,
        gateway: ApiGateway,
        filters: ProductFilters,
        vehicle: SelectedVehicle | None = None,
    ) -> FeedPage:
        """New filters: drop accumulated results and fetch page 1."""
        if not self._in_flight.acquire(blocking=False):
            return self.snapshot(busy=True)
        try:
            self.filters = filters
            self.vehicle = vehicle
            self.products = []
            self.page = 0
            self.count = 0
            self.has_more = True
            return self._fetch_next(gateway)
        finally:
            self._in_flight.release()

    def load_next(self, gateway: ApiGateway) -> FeedPage:
        if not self._in_flight.acquire(blocking=False):
            return self.snapshot(busy=True)
        try:
            if not self.has_more:
                return self.snapshot()
            return self._fetch_next(gateway)
        finally:
            self._in_flight.release()

    def _fetch_next(self, gateway: ApiGateway) -> FeedPage:
        next_page = self.page + 1
        params = build_product_params(self.filters, self.vehicle, page=next_page)
        result = gateway.get_products(params)

        self.products.extend(result.results)
        self.page = next_page
        self.count = result.count
        self.has_more = result.has_more
        logger.debug(f"Feed page {next_page}: {len(result.results)} products")
        return self.snapshot()


class CatalogService:
    """
    Catalog reads plus the per-browser product feed.
    """

    def __init__(self, feeds: ClientRegistry[ProductFeed] | None = None):
        self.feeds = feeds or ClientRegistry()

    def list_products(
        self,
        gateway: ApiGateway,
        filters: ProductFilters,
        vehicle: SelectedVehicle | None = None,
        page: int = 1,
    ) -> Page[Product]:
        return gateway.get_products(build_product_params(filters, vehicle, page=page))

    def get_product(self, gateway: ApiGateway, product_id: int) -> Product:
        return gateway.get_product_detail(product_id)

    def featured(self, gateway: ApiGateway, limit: int | None = None) -> list[Product]:
        products = gateway.get_featured_products({"page_size": limit}).results
        return products[:limit] if limit else products

    def categories(self, gateway: ApiGateway) -> list[Category]:
        return gateway.get_categories().results

    def vehicle_makes(self, gateway: ApiGateway, search: str | None = None) -> list[VehicleMake]:
        return gateway.get_vehicle_makes({"search": search, "ordering": "name"}).results

    def vehicle_models(
        self, gateway: ApiGateway, make_id: int | None = None, year: int | None = None
    ) -> list[VehicleModel]:
        models = gateway.get_vehicle_models({"make": make_id, "ordering": "name"}).results
        if year is None:
            return models
        return [
            m for m in models
            if (m.year_from is None or m.year_from <= year)
            and (m.year_to is None or year <= m.year_to)
        ]

    # ---- feed ----

    def reset_feed(
        self,
        client_id: str,
        gateway: ApiGateway,
        filters: ProductFilters,
        vehicle: SelectedVehicle | None = None,
    ) -> FeedPage:
        feed = self.feeds.get_or_create(client_id, ProductFeed)
        return feed.reset(gateway, filters, vehicle)

    def load_more(self, client_id: str, gateway: ApiGateway) -> FeedPage:
        feed = self.feeds.get(client_id)
        if feed is None:
            feed = self.feeds.put(client_id, ProductFeed())
        return feed.load_next(gateway)
