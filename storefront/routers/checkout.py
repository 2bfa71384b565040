# storefront/routers/checkout.py
from fastapi import APIRouter, Depends

from storefront.core.api_client import ApiGateway
from storefront.core.auth import get_auth_store, get_gateway
from storefront.core.session import get_cart_store, get_client_id
from storefront.schemas.checkout import (
    AddressForm,
    CheckoutChoice,
    CheckoutView,
    ContactForm,
    PaymentForm,
)
from storefront.services.checkout_service import CheckoutService
from storefront.stores.auth import AuthStore
from storefront.stores.cart import CartStore

router = APIRouter(prefix="/checkout", tags=["Checkout"])

service = CheckoutService()


@router.get("", response_model=CheckoutView)
def get_checkout(
    client_id: str = Depends(get_client_id),
    auth: AuthStore = Depends(get_auth_store),
):
    """
    Current wizard step and draft.

    A shopper who left for the login page and came back authenticated
    is moved on to the address step.
    """
    return service.current(client_id, auth)


@router.post("/restart", response_model=CheckoutView)
def restart_checkout(
    client_id: str = Depends(get_client_id),
    auth: AuthStore = Depends(get_auth_store),
):
    return service.restart(client_id, auth)


@router.post("/choice", response_model=CheckoutView)
def choose_checkout_path(
    payload: CheckoutChoice,
    client_id: str = Depends(get_client_id),
    auth: AuthStore = Depends(get_auth_store),
):
    """
    Guest checkout or login.

    Choosing login returns `login_url` to redirect to.
    """
    return service.choose(client_id, auth, payload.choice)


@router.post("/resume", response_model=CheckoutView)
def resume_after_login(
    client_id: str = Depends(get_client_id),
    auth: AuthStore = Depends(get_auth_store),
):
    return service.resume_after_login(client_id, auth)


@router.post("/contact", response_model=CheckoutView)
def submit_contact(
    payload: ContactForm,
    client_id: str = Depends(get_client_id),
    auth: AuthStore = Depends(get_auth_store),
    cart: CartStore = Depends(get_cart_store),
):
    """
    Guest contact step.

    Errors:
      - 400 with per-field messages when email/phone are missing or invalid
      - 409 when the wizard is not at the guest-form step
    """
    return service.submit_contact(client_id, auth, cart, payload)


@router.post("/address", response_model=CheckoutView)
def submit_address(
    payload: AddressForm,
    client_id: str = Depends(get_client_id),
    auth: AuthStore = Depends(get_auth_store),
    cart: CartStore = Depends(get_cart_store),
):
    return service.submit_address(client_id, auth, cart, payload)


@router.post("/payment", response_model=CheckoutView)
def submit_payment(
    payload: PaymentForm,
    client_id: str = Depends(get_client_id),
    auth: AuthStore = Depends(get_auth_store),
    cart: CartStore = Depends(get_cart_store),
    gateway: ApiGateway = Depends(get_gateway),
):
    """
    Place the order and send the M-Pesa STK push.

    An upstream failure is reported in the view (`payment_error`,
    `error_message`) and the wizard stays at the payment step.
    """
    return service.submit_payment(client_id, auth, cart, gateway, payload)
