# storefront/routers/favorites.py
from fastapi import APIRouter, Depends

from storefront.core.api_client import ApiGateway
from storefront.core.auth import get_gateway
from storefront.core.session import get_favorites_store
from storefront.schemas.favorites import FavoritesView, FavoriteToggle
from storefront.services.favorites_service import FavoritesService
from storefront.stores.favorites import FavoritesStore

router = APIRouter(prefix="/favorites", tags=["Favorites"])

service = FavoritesService()


@router.get("", response_model=FavoritesView)
def list_favorites(favorites: FavoritesStore = Depends(get_favorites_store)):
    return service.view(favorites)


@router.put("/{product_id}", response_model=FavoritesView)
def add_favorite(
    product_id: int,
    favorites: FavoritesStore = Depends(get_favorites_store),
    gateway: ApiGateway = Depends(get_gateway),
):
    """
    Add a product to favorites. Adding twice is a no-op.
    """
    return service.add(favorites, gateway, product_id)


@router.post("/{product_id}/toggle", response_model=FavoriteToggle)
def toggle_favorite(
    product_id: int,
    favorites: FavoritesStore = Depends(get_favorites_store),
    gateway: ApiGateway = Depends(get_gateway),
):
    return service.toggle(favorites, gateway, product_id)


@router.delete("/{product_id}", response_model=FavoritesView)
def remove_favorite(
    product_id: int,
    favorites: FavoritesStore = Depends(get_favorites_store),
):
    return service.remove(favorites, product_id)


@router.delete("", response_model=FavoritesView)
def clear_favorites(favorites: FavoritesStore = Depends(get_favorites_store)):
    return service.clear(favorites)
