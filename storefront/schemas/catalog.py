# storefront/schemas/catalog.py
from datetime import datetime
from typing import Any, Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from storefront.constants import MAX_PAGE_SIZE, DEFAULT_PAGE_SIZE
from storefront.utils.formatting import calculate_discounted_price

SortOption = Literal["newest", "price-asc", "price-desc", "rating", "popular"]


class VehicleMake(SQLModel):
    id: int
    name: str
    country: str | None = None
    logo_url: str | None = None
    models_count: int | None = None


class VehicleModel(SQLModel):
    id: int
    make_id: int | None = None
    make: VehicleMake | None = None
    name: str
    year_from: int | None = None
    year_to: int | None = None
    engine_type: str | None = None
    description: str | None = None


class Category(SQLModel):
    id: int
    name: str
    slug: str
    description: str | None = None
    icon_url: str | None = None
    image_url: str | None = None
    parent_id: int | None = None
    children: list[dict[str, Any]] | None = None
    products_count: int | None = None
    is_active: bool = True
    display_order: int = 0


class ProductImage(SQLModel):
    id: int
    image: str
    alt_text: str | None = None
    display_order: int = 0


class Product(SQLModel):
    """
    Product as returned by the catalog API.

    `category` is a nested object on detail endpoints and sometimes a
    plain name on list endpoints; both are accepted.
    """

    id: int
    name: str
    slug: str | None = None
    description: str | None = None
    category: Category | str | None = None
    sku: str
    price: float
    cost_price: float | None = None
    discount_percentage: float = 0
    stock: int = 0
    reserved_stock: int = 0
    available_stock: int | None = None
    discounted_price: float | None = None
    profit_margin: float | None = None
    primary_image: str | None = None
    images: list[ProductImage] | None = None
    compatible_vehicles: list[VehicleModel] | None = None
    is_featured: bool = False
    is_active: bool = True
    rating: float | None = None
    review_count: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def sellable_stock(self) -> int:
        if self.available_stock is not None:
            return self.available_stock
        return max(self.stock - self.reserved_stock, 0)

    @property
    def effective_price(self) -> float:
        """Price a cart line snapshots: discounted when a discount applies."""
        if self.discounted_price is not None:
            return self.discounted_price
        return calculate_discounted_price(self.price, self.discount_percentage)


class ProductFilters(SQLModel):
    """
    Catalog filter state as sent by the browser.

    Converted to API query parameters by the catalog service.
    """

    model_config = ConfigDict(extra="forbid")

    search: str | None = None
    category: int | None = None
    vehicle_make: int | None = None
    vehicle_model: int | None = None
    vehicle_year: int | None = None
    price_min: float | None = Field(default=None, ge=0)
    price_max: float | None = Field(default=None, ge=0)
    in_stock: bool | None = None
    sort: SortOption = "newest"
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)

    @field_validator("search")
    @classmethod
    def normalize_search(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class ProductQuery(ProductFilters):
    """Filters plus the page number, read from the query string."""

    page: int = Field(default=1, ge=1)


class FeedPage(SQLModel):
    """Accumulated infinite-scroll state returned to the browser."""

    products: list[Product]
    page: int
    has_more: bool
    count: int
    busy: bool = False


# -------- admin payloads --------


class ProductCreate(SQLModel):
    """
    Payload for creating a product (owner only).
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=255)
    sku: str = Field(max_length=64)
    description: str | None = None
    category_id: int
    price: float = Field(gt=0, le=1_000_000)
    cost_price: float | None = Field(default=None, ge=0)
    discount_percentage: float = Field(default=0, ge=0, le=100)
    stock: int = Field(default=0, ge=0)
    is_featured: bool = False
    is_active: bool = True
    compatible_vehicle_ids: list[int] = Field(default_factory=list)

    @field_validator("name", "sku")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class ProductUpdate(SQLModel):
    """
    Partial update payload for products.
    All fields are optional.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=255)
    sku: str | None = Field(default=None, max_length=64)
    description: str | None = None
    category_id: int | None = None
    price: float | None = Field(default=None, gt=0, le=1_000_000)
    cost_price: float | None = Field(default=None, ge=0)
    discount_percentage: float | None = Field(default=None, ge=0, le=100)
    stock: int | None = Field(default=None, ge=0)
    is_featured: bool | None = None
    is_active: bool | None = None

    @field_validator("name", "sku")
    @classmethod
    def not_empty(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class ProductDetail(SQLModel):
    """Product page: the product plus browser-side flags."""

    product: Product
    stock_badge: str
    is_favorited: bool = False
