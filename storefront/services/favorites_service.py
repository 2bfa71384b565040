# storefront/services/favorites_service.py
from storefront.core.api_client import ApiGateway
from storefront.schemas.catalog import Category, Product
from storefront.schemas.favorites import FavoritesView, FavoriteToggle
from storefront.stores.favorites import FavoriteProduct, FavoritesStore


def favorite_from_product(product: Product) -> FavoriteProduct:
    category = product.category.name if isinstance(product.category, Category) else product.category
    return FavoriteProduct(
        id=product.id,
        name=product.name,
        sku=product.sku,
        price=product.price,
        discount_percentage=product.discount_percentage or None,
        image=product.primary_image,
        category=category,
    )


class FavoritesService:
    """
    Favorites keep a small product snapshot so the list renders
    without hitting the catalog.
    """

    @staticmethod
    def view(favorites: FavoritesStore) -> FavoritesView:
        return FavoritesView(items=favorites.favorites, count=favorites.count())

    def add(self, favorites: FavoritesStore, gateway: ApiGateway, product_id: int) -> FavoritesView:
        if not favorites.is_favorited(product_id):
            favorites.add(favorite_from_product(gateway.get_product_detail(product_id)))
        return self.view(favorites)

    def remove(self, favorites: FavoritesStore, product_id: int) -> FavoritesView:
        favorites.remove(product_id)
        return self.view(favorites)

    def toggle(self, favorites: FavoritesStore, gateway: ApiGateway, product_id: int) -> FavoriteToggle:
        if favorites.is_favorited(product_id):
            favorites.remove(product_id)
            now = False
        else:
            now = favorites.toggle(favorite_from_product(gateway.get_product_detail(product_id)))
        return FavoriteToggle(product_id=product_id, is_favorited=now, count=favorites.count())

    def clear(self, favorites: FavoritesStore) -> FavoritesView:
        favorites.clear()
        return self.view(favorites)
