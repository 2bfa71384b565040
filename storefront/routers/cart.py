# storefront/routers/cart.py
from fastapi import APIRouter, Depends

from storefront.core.api_client import ApiGateway
from storefront.core.auth import get_gateway
from storefront.core.session import get_cart_store
from storefront.schemas.cart import (
    CartItemCreate,
    CartItemUpdate,
    CartSummary,
    DeliveryOptions,
    DeliverySelect,
    GuestInfo,
)
from storefront.services.cart_service import CartService
from storefront.stores.cart import CartStore

router = APIRouter(prefix="/cart", tags=["Cart"])

service = CartService()


@router.get("", response_model=CartSummary)
def get_my_cart(cart: CartStore = Depends(get_cart_store)):
    """
    Get this browser's cart summary.

    Guests and logged-in shoppers share the same cart.
    """
    return service.get_cart_summary(cart)


@router.post("", response_model=CartSummary)
def add_to_cart(
    payload: CartItemCreate,
    cart: CartStore = Depends(get_cart_store),
    gateway: ApiGateway = Depends(get_gateway),
):
    """
    Add a product to the cart.

    Returns the updated cart summary.
    """
    return service.add_to_cart(cart, gateway, payload)


@router.patch("/{product_id}", response_model=CartSummary)
def update_cart_item(
    product_id: int,
    payload: CartItemUpdate,
    cart: CartStore = Depends(get_cart_store),
):
    """
    Update quantity of a product in the cart.

    A quantity of zero removes the line.
    """
    return service.update_quantity(cart, product_id, payload)


@router.delete("/{product_id}", response_model=CartSummary)
def remove_cart_item(
    product_id: int,
    cart: CartStore = Depends(get_cart_store),
):
    """
    Remove a product from the cart.
    """
    return service.remove_item(cart, product_id)


@router.delete("", response_model=CartSummary)
def clear_cart(cart: CartStore = Depends(get_cart_store)):
    """
    Clear the entire cart, including delivery choice and guest contact.
    """
    return service.clear_cart(cart)


@router.get("/delivery-options", response_model=DeliveryOptions)
def get_delivery_options():
    """
    Delivery tiers with flat fees and estimated dates, plus the cities
    offered on the address step.
    """
    return service.delivery_options()


@router.put("/delivery", response_model=CartSummary)
def select_delivery(
    payload: DeliverySelect,
    cart: CartStore = Depends(get_cart_store),
):
    return service.select_delivery(cart, payload.tier)


@router.put("/guest", response_model=CartSummary)
def set_guest_info(
    payload: GuestInfo,
    cart: CartStore = Depends(get_cart_store),
):
    return service.set_guest_info(cart, payload)
