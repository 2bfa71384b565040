# storefront/routers/products.py
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from storefront.core.api_client import ApiGateway
from storefront.core.auth import get_gateway
from storefront.core.session import get_client_id, get_favorites_store, get_vehicle_store
from storefront.schemas.catalog import (
    Category,
    FeedPage,
    Product,
    ProductDetail,
    ProductFilters,
    ProductQuery,
    VehicleMake,
    VehicleModel,
)
from storefront.schemas.common import Page
from storefront.services.catalog_service import CatalogService, stock_badge
from storefront.stores.favorites import FavoritesStore
from storefront.stores.vehicle import VehicleStore

router = APIRouter(tags=["Catalog"])

service = CatalogService()


# -------- products --------


@router.get("/products", response_model=Page[Product])
def list_products(
    query: Annotated[ProductQuery, Query()],
    gateway: ApiGateway = Depends(get_gateway),
    vehicles: VehicleStore = Depends(get_vehicle_store),
):
    """
    One page of products.

    Query params mirror the catalog filters. When the browser has a
    selected vehicle and no vehicle filter is given, results are
    narrowed to parts compatible with that vehicle.
    """
    return service.list_products(gateway, query, vehicles.selected, page=query.page)


@router.post("/products/feed", response_model=FeedPage)
def reset_product_feed(
    filters: ProductFilters,
    client_id: str = Depends(get_client_id),
    gateway: ApiGateway = Depends(get_gateway),
    vehicles: VehicleStore = Depends(get_vehicle_store),
):
    """
    Start the infinite-scroll feed over with new filters (page 1).
    """
    return service.reset_feed(client_id, gateway, filters, vehicles.selected)


@router.post("/products/feed/next", response_model=FeedPage)
def load_more_products(
    client_id: str = Depends(get_client_id),
    gateway: ApiGateway = Depends(get_gateway),
):
    """
    Append the next page to the feed.

    Returns `busy=true` without fetching when a page load is already
    running for this browser.
    """
    return service.load_more(client_id, gateway)


@router.get("/products/featured", response_model=list[Product])
def featured_products(
    limit: int | None = Query(default=None, ge=1, le=100),
    gateway: ApiGateway = Depends(get_gateway),
):
    return service.featured(gateway, limit)


@router.get("/products/{product_id}", response_model=ProductDetail)
def get_product(
    product_id: int,
    gateway: ApiGateway = Depends(get_gateway),
    favorites: FavoritesStore = Depends(get_favorites_store),
):
    product = service.get_product(gateway, product_id)
    return ProductDetail(
        product=product,
        stock_badge=stock_badge(product.sellable_stock),
        is_favorited=favorites.is_favorited(product.id),
    )


# -------- categories & vehicles --------


@router.get("/categories", response_model=list[Category])
def list_categories(gateway: ApiGateway = Depends(get_gateway)):
    return service.categories(gateway)


@router.get("/vehicles/makes", response_model=list[VehicleMake])
def list_vehicle_makes(
    search: str | None = None,
    gateway: ApiGateway = Depends(get_gateway),
):
    return service.vehicle_makes(gateway, search)


@router.get("/vehicles/models", response_model=list[VehicleModel])
def list_vehicle_models(
    make: int | None = None,
    year: int | None = Query(default=None, ge=1950, le=2100),
    gateway: ApiGateway = Depends(get_gateway),
):
    """
    Models for a make, optionally limited to those built in `year`.
    """
    return service.vehicle_models(gateway, make, year)
