# storefront/schemas/favorites.py
from sqlmodel import SQLModel, Field

from storefront.stores.favorites import FavoriteProduct


class FavoritesView(SQLModel):
    items: list[FavoriteProduct] = Field(default_factory=list)
    count: int = 0


class FavoriteToggle(SQLModel):
    product_id: int
    is_favorited: bool
    count: int
