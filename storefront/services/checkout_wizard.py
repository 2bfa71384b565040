# storefront/services/checkout_wizard.py
"""
Checkout wizard state machine.

    choice -> guest-form -> address -> payment -> success
    choice -> login ...(auth flow)... -> address

An authenticated shopper starts at `address`. Transitions only move
forward and each one is gated by validation of its step. The only way
back is restart(). `success` is terminal.
"""
from storefront.constants import DEFAULT_DELIVERY_TIER, LOGIN_PATH, message
from storefront.schemas.checkout import (
    AddressForm,
    CheckoutDraft,
    CheckoutView,
    ContactForm,
)
from storefront.schemas.order import CheckoutItem, CheckoutRequest
from storefront.stores.cart import CartStore
from storefront.utils.formatting import normalize_phone_number
from storefront.utils.validators import check_email, check_phone, require_fields


class CheckoutError(Exception):
    """Base class for wizard rejections."""


class CheckoutTransitionError(CheckoutError):
    """The requested step is not reachable from the current one."""


class CheckoutValidationError(CheckoutError):
    """The submitted step failed validation; the wizard did not move."""

    def __init__(self, message: str, fields: dict[str, str] | None = None):
        self.fields = fields or {}
        super().__init__(message)


class CheckoutWizard:
    def __init__(self, authenticated: bool = False):
        self.restart(authenticated)

    def restart(self, authenticated: bool = False) -> None:
        """Back to the first step with an empty draft."""
        self.step = "address" if authenticated else "choice"
        self.draft = CheckoutDraft()
        self.payment_error = False
        self.error_message: str | None = None
        self.order_id: int | None = None
        self.order_number: str | None = None

    def _expect(self, *steps: str) -> None:
        if self.step not in steps:
            raise CheckoutTransitionError(
                f"Cannot do that at step '{self.step}' (expected {', '.join(steps)})"
            )

    # ---- transitions ----

    def choose(self, choice: str) -> None:
        self._expect("choice")
        if choice == "guest":
            self.step = "guest-form"
        elif choice == "login":
            self.step = "login"
        else:
            raise CheckoutValidationError("Unknown choice", {"choice": "Choose guest or login"})

    def resume_after_login(self, authenticated: bool) -> None:
        self._expect("login")
        if not authenticated:
            raise CheckoutValidationError("Login required")
        self.step = "address"

    def submit_contact(self, form: ContactForm, cart: CartStore) -> None:
        self._expect("guest-form")
        errors = require_fields({"email": form.email, "phone": form.phone})
        check_email(errors, "email", form.email)
        check_phone(errors, "phone", form.phone)
        if errors:
            raise CheckoutValidationError("Please fill in all fields", errors)

        self.draft.contact_email = form.email.strip()
        self.draft.contact_phone = normalize_phone_number(form.phone)
        cart.set_guest_info(self.draft.contact_email, self.draft.contact_phone)
        self.step = "address"

    def submit_address(self, form: AddressForm, cart: CartStore) -> None:
        self._expect("address")
        errors = require_fields(
            {
                "recipient_name": form.recipient_name,
                "recipient_phone": form.recipient_phone,
                "delivery_address": form.delivery_address,
            }
        )
        check_phone(errors, "recipient_phone", form.recipient_phone)
        if errors:
            raise CheckoutValidationError("Please fill in all address fields", errors)

        self.draft.recipient_name = form.recipient_name.strip()
        self.draft.recipient_phone = normalize_phone_number(form.recipient_phone)
        self.draft.delivery_address = form.delivery_address.strip()
        self.draft.delivery_city = form.delivery_city.strip() or self.draft.delivery_city
        self.draft.delivery_postal_code = form.delivery_postal_code.strip()
        self.draft.customer_notes = (form.customer_notes or "").strip() or None

        if form.delivery_type:
            cart.set_delivery(form.delivery_type)
        elif cart.delivery is None:
            cart.set_delivery(DEFAULT_DELIVERY_TIER)
        self.step = "payment"

    def begin_payment(self, mpesa_phone: str, cart: CartStore) -> str:
        """
        Validate the payment step and return the normalized M-Pesa number.
        The wizard stays at `payment` until mark_paid / mark_payment_failed.
        """
        self._expect("payment")
        errors = require_fields({"mpesa_phone": mpesa_phone})
        check_phone(errors, "mpesa_phone", mpesa_phone)
        if errors:
            raise CheckoutValidationError("Please enter M-Pesa phone number", errors)
        if cart.is_empty():
            raise CheckoutValidationError(message("CART_EMPTY"))

        self.draft.payment_phone = normalize_phone_number(mpesa_phone)
        self.payment_error = False
        self.error_message = None
        return self.draft.payment_phone

    def build_checkout_request(self, cart: CartStore, guest: bool) -> CheckoutRequest:
        self._expect("payment")
        return CheckoutRequest(
            items=[CheckoutItem(product_id=l.product_id, quantity=l.quantity) for l in cart.lines],
            delivery_address=self.draft.delivery_address or "",
            delivery_city=self.draft.delivery_city,
            delivery_postal_code=self.draft.delivery_postal_code,
            recipient_name=self.draft.recipient_name or "",
            recipient_phone=self.draft.recipient_phone or "",
            delivery_type=cart.delivery.tier if cart.delivery else DEFAULT_DELIVERY_TIER,
            guest_email=self.draft.contact_email if guest else None,
            guest_phone=(self.draft.contact_phone or self.draft.recipient_phone) if guest else None,
            customer_notes=self.draft.customer_notes,
        )

    def record_order(self, order_id: int, order_number: str) -> None:
        """The order exists upstream; a payment retry must not create another."""
        self._expect("payment")
        self.order_id = order_id
        self.order_number = order_number

    def mark_paid(self, cart: CartStore) -> None:
        """Enter the terminal state. Clears the cart and drops the draft."""
        self._expect("payment")
        self.step = "success"
        self.payment_error = False
        self.error_message = None
        self.draft = CheckoutDraft()
        cart.clear_cart()

    def mark_payment_failed(self, message: str) -> None:
        self._expect("payment")
        self.payment_error = True
        self.error_message = message

    def view(self) -> CheckoutView:
        return CheckoutView(
            step=self.step,
            draft=self.draft,
            payment_error=self.payment_error,
            error_message=self.error_message,
            order_id=self.order_id,
            order_number=self.order_number,
            login_url=f"{LOGIN_PATH}?redirect=/checkout" if self.step == "login" else None,
        )
