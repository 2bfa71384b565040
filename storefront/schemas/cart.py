# storefront/schemas/cart.py
from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from storefront.schemas.common import DeliveryTier


class CartLine(SQLModel):
    """
    One product in the cart.

    unit_price is a snapshot taken at add time; it is never
    revalidated against the catalog.
    """

    product_id: int
    product_name: str
    sku: str
    unit_price: float = Field(ge=0)
    quantity: int = Field(ge=1)
    image: str | None = None


class DeliveryChoice(SQLModel):
    """Selected delivery tier with its flat fee."""

    tier: DeliveryTier
    flat_fee: float = Field(ge=0)


class CartState(SQLModel):
    """
    Persisted cart slice.

    subtotal/total are stored alongside their inputs but always
    recomputed by the store on mutation and on load.
    """

    lines: list[CartLine] = Field(default_factory=list)
    delivery: DeliveryChoice | None = None
    guest_email: str | None = None
    guest_phone: str | None = None
    subtotal: float = 0.0
    total: float = 0.0


# -------- request payloads --------


class CartItemCreate(SQLModel):
    """
    Payload for adding to cart.

    Only product_id and quantity come from the browser; name, sku,
    price and image are snapshotted from the catalog.
    """

    model_config = ConfigDict(extra="forbid")

    product_id: int
    quantity: int = Field(default=1, gt=0)


class CartItemUpdate(SQLModel):
    """
    Payload for updating quantity of a cart item.
    A quantity of 0 or less removes the line.
    """

    model_config = ConfigDict(extra="forbid")

    quantity: int


class DeliverySelect(SQLModel):
    model_config = ConfigDict(extra="forbid")

    tier: DeliveryTier


class GuestInfo(SQLModel):
    model_config = ConfigDict(extra="forbid")

    email: str
    phone: str

    @field_validator("email", "phone")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


# -------- read models --------


class CartLineRead(CartLine):
    line_total: float


class CartSummary(SQLModel):
    """
    Full cart response model with totals.
    """

    items: list[CartLineRead]
    item_count: int
    subtotal: float
    delivery: DeliveryChoice | None
    delivery_fee: float
    total: float
    guest_email: str | None = None
    guest_phone: str | None = None


class DeliveryOption(SQLModel):
    tier: DeliveryTier
    label: str
    fee: float
    fee_display: str
    description: str
    estimate: str


class DeliveryOptions(SQLModel):
    """Tiers and cities offered on the address step."""

    tiers: list[DeliveryOption]
    cities: list[str]
    default_tier: DeliveryTier
    default_city: str
