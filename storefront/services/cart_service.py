# storefront/services/cart_service.py
from fastapi import HTTPException, status

from storefront.constants import (
    DEFAULT_DELIVERY_CITY,
    DEFAULT_DELIVERY_TIER,
    DELIVERY_CITIES,
    DELIVERY_TIERS,
)
from storefront.core.api_client import ApiGateway
from storefront.schemas.cart import (
    CartItemCreate,
    CartItemUpdate,
    CartLine,
    CartSummary,
    DeliveryOption,
    DeliveryOptions,
    GuestInfo,
)
from storefront.schemas.catalog import Product
from storefront.stores.cart import CartStore
from storefront.utils.formatting import (
    estimated_delivery_date,
    format_ksh,
    is_valid_phone_number,
    normalize_phone_number,
)
from storefront.utils.validators import is_valid_email


class CartService:
    """
    Cart operations on top of the persisted cart store.

    Responsibilities:
      - snapshot name / sku / price / image from the catalog on add
      - refuse inactive products and quantities above available stock
      - map missing lines to 404
      - validate guest contact details
    """

    # ---- internal helpers ----

    def _get_valid_product(self, gateway: ApiGateway, product_id: int) -> Product:
        product = gateway.get_product_detail(product_id)
        if not product.is_active:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Product is inactive",
            )
        return product

    @staticmethod
    def _require_line(cart: CartStore, product_id: int) -> CartLine:
        for line in cart.lines:
            if line.product_id == product_id:
                return line
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Item not in cart",
        )

    # ---- public operations ----

    def get_cart_summary(self, cart: CartStore) -> CartSummary:
        return cart.summary()

    def add_to_cart(
        self,
        cart: CartStore,
        gateway: ApiGateway,
        payload: CartItemCreate,
    ) -> CartSummary:
        """
        Add a product to the cart.

        Rules:
          - product must exist (404 from the API) and be active
          - quantity + existing quantity <= available stock
          - unit_price is the product's current (discounted) price
        """
        product = self._get_valid_product(gateway, payload.product_id)

        existing = next((l for l in cart.lines if l.product_id == product.id), None)
        wanted = payload.quantity + (existing.quantity if existing else 0)
        if wanted > product.sellable_stock:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Not enough stock available",
            )

        cart.add_item(
            CartLine(
                product_id=product.id,
                product_name=product.name,
                sku=product.sku,
                unit_price=round(product.effective_price, 2),
                quantity=payload.quantity,
                image=product.primary_image,
            )
        )
        return cart.summary()

    def update_quantity(
        self,
        cart: CartStore,
        product_id: int,
        payload: CartItemUpdate,
    ) -> CartSummary:
        """
        Set the quantity of a line. Zero or less removes it.
        """
        self._require_line(cart, product_id)
        cart.update_quantity(product_id, payload.quantity)
        return cart.summary()

    def remove_item(self, cart: CartStore, product_id: int) -> CartSummary:
        self._require_line(cart, product_id)
        cart.remove_item(product_id)
        return cart.summary()

    def clear_cart(self, cart: CartStore) -> CartSummary:
        """
        Clear lines, delivery choice and guest contact together.
        """
        cart.clear_cart()
        return cart.summary()

    def select_delivery(self, cart: CartStore, tier: str) -> CartSummary:
        cart.set_delivery(tier)
        return cart.summary()

    def set_guest_info(self, cart: CartStore, payload: GuestInfo) -> CartSummary:
        if not is_valid_email(payload.email):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid email",
            )
        if not is_valid_phone_number(payload.phone):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid phone number",
            )
        cart.set_guest_info(payload.email, normalize_phone_number(payload.phone))
        return cart.summary()

    def delivery_options(self) -> DeliveryOptions:
        tiers = [
            DeliveryOption(
                tier=tier,
                label=info["label"],
                fee=info["fee"],
                fee_display=format_ksh(info["fee"]),
                description=info["description"],
                estimate=estimated_delivery_date(*info["days"]),
            )
            for tier, info in DELIVERY_TIERS.items()
        ]
        return DeliveryOptions(
            tiers=tiers,
            cities=DELIVERY_CITIES,
            default_tier=DEFAULT_DELIVERY_TIER,
            default_city=DEFAULT_DELIVERY_CITY,
        )
