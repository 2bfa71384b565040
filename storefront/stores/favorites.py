# storefront/stores/favorites.py
from sqlmodel import SQLModel, Field

from storefront.constants import FAVORITES_STORAGE_KEY
from storefront.stores.persistence import KeyValueStorage, load_state, save_state

FAVORITES_STATE_VERSION = 1


class FavoriteProduct(SQLModel):
    id: int
    name: str
    sku: str
    price: float
    discount_percentage: float | None = None
    image: str | None = None
    category: str | None = None


class FavoritesState(SQLModel):
    favorites: list[FavoriteProduct] = Field(default_factory=list)


class FavoritesStore:
    """
    Set of favorite products, unique by product id.
    add/remove are idempotent.
    """

    def __init__(self, storage: KeyValueStorage):
        self.storage = storage
        self.state = load_state(storage, FAVORITES_STORAGE_KEY, FavoritesState, FAVORITES_STATE_VERSION)

    def _commit(self) -> None:
        save_state(self.storage, FAVORITES_STORAGE_KEY, self.state, FAVORITES_STATE_VERSION)

    @property
    def favorites(self) -> list[FavoriteProduct]:
        return list(self.state.favorites)

    def is_favorited(self, product_id: int) -> bool:
        return any(fav.id == product_id for fav in self.state.favorites)

    def add(self, product: FavoriteProduct) -> None:
        if self.is_favorited(product.id):
            return
        self.state.favorites.append(product)
        self._commit()

    def remove(self, product_id: int) -> None:
        if not self.is_favorited(product_id):
            return
        self.state.favorites = [fav for fav in self.state.favorites if fav.id != product_id]
        self._commit()

    def toggle(self, product: FavoriteProduct) -> bool:
        """Flip membership; returns True when the product is now a favorite."""
        if self.is_favorited(product.id):
            self.remove(product.id)
            return False
        self.add(product)
        return True

    def clear(self) -> None:
        self.state.favorites = []
        self._commit()

    def count(self) -> int:
        return len(self.state.favorites)
