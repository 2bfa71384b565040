# storefront/schemas/checkout.py
from typing import Literal

from pydantic import ConfigDict
from sqlmodel import SQLModel

from storefront.constants import DEFAULT_DELIVERY_CITY
from storefront.schemas.common import DeliveryTier

CheckoutStep = Literal["choice", "guest-form", "login", "address", "payment", "success"]


class CheckoutChoice(SQLModel):
    model_config = ConfigDict(extra="forbid")

    choice: Literal["guest", "login"]


class ContactForm(SQLModel):
    """Guest contact step. Blank fields are reported, not rejected by schema."""

    model_config = ConfigDict(extra="forbid")

    email: str = ""
    phone: str = ""


class AddressForm(SQLModel):
    model_config = ConfigDict(extra="forbid")

    recipient_name: str = ""
    recipient_phone: str = ""
    delivery_address: str = ""
    delivery_city: str = DEFAULT_DELIVERY_CITY
    delivery_postal_code: str = ""
    delivery_type: DeliveryTier | None = None
    customer_notes: str | None = None


class PaymentForm(SQLModel):
    model_config = ConfigDict(extra="forbid")

    mpesa_phone: str = ""


class CheckoutDraft(SQLModel):
    """
    Transient data gathered across wizard steps. Never persisted.
    """

    contact_email: str | None = None
    contact_phone: str | None = None
    recipient_name: str | None = None
    recipient_phone: str | None = None
    delivery_address: str | None = None
    delivery_city: str = DEFAULT_DELIVERY_CITY
    delivery_postal_code: str = ""
    customer_notes: str | None = None
    payment_phone: str | None = None


class CheckoutView(SQLModel):
    """Wizard state as shown to the browser."""

    step: CheckoutStep
    draft: CheckoutDraft
    payment_error: bool = False
    error_message: str | None = None
    order_id: int | None = None
    order_number: str | None = None
    login_url: str | None = None
