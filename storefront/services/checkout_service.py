# storefront/services/checkout_service.py
import logging

from fastapi import HTTPException, status

from storefront.constants import message
from storefront.core.api_client import ApiGateway
from storefront.core.errors import ApiError
from storefront.schemas.checkout import AddressForm, CheckoutView, ContactForm, PaymentForm
from storefront.schemas.order import STKPushRequest
from storefront.services.checkout_wizard import (
    CheckoutTransitionError,
    CheckoutValidationError,
    CheckoutWizard,
)
from storefront.services.registry import ClientRegistry
from storefront.stores.auth import AuthStore
from storefront.stores.cart import CartStore

logger = logging.getLogger(__name__)


class CheckoutService:
    """
    Drives one CheckoutWizard per browser.

    Responsibilities:
      - keep the transient wizard for the client
      - map wizard rejections to HTTP errors (400 validation, 409 order)
      - submit the order and start the M-Pesa STK push
    """

    def __init__(self, registry: ClientRegistry[CheckoutWizard] | None = None):
        self.registry = registry or ClientRegistry()

    # ---- internal helpers ----

    def _wizard(self, client_id: str, auth: AuthStore) -> CheckoutWizard:
        wizard = self.registry.get_or_create(
            client_id, lambda: CheckoutWizard(authenticated=auth.is_authenticated)
        )
        # coming back from the login branch
        if wizard.step == "login" and auth.is_authenticated:
            wizard.resume_after_login(True)
        return wizard

    @staticmethod
    def _run(action):
        try:
            return action()
        except CheckoutValidationError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"message": str(e), "fields": e.fields},
            )
        except CheckoutTransitionError as e:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=str(e),
            )

    # ---- public operations ----

    def current(self, client_id: str, auth: AuthStore) -> CheckoutView:
        return self._wizard(client_id, auth).view()

    def restart(self, client_id: str, auth: AuthStore) -> CheckoutView:
        """Drop the draft and start over (the only backward move)."""
        wizard = self.registry.put(client_id, CheckoutWizard(authenticated=auth.is_authenticated))
        return wizard.view()

    def choose(self, client_id: str, auth: AuthStore, choice: str) -> CheckoutView:
        wizard = self._wizard(client_id, auth)
        self._run(lambda: wizard.choose(choice))
        return wizard.view()

    def resume_after_login(self, client_id: str, auth: AuthStore) -> CheckoutView:
        wizard = self._wizard(client_id, auth)
        if wizard.step != "address":
            self._run(lambda: wizard.resume_after_login(auth.is_authenticated))
        return wizard.view()

    def submit_contact(
        self, client_id: str, auth: AuthStore, cart: CartStore, form: ContactForm
    ) -> CheckoutView:
        wizard = self._wizard(client_id, auth)
        self._run(lambda: wizard.submit_contact(form, cart))
        return wizard.view()

    def submit_address(
        self, client_id: str, auth: AuthStore, cart: CartStore, form: AddressForm
    ) -> CheckoutView:
        wizard = self._wizard(client_id, auth)
        self._run(lambda: wizard.submit_address(form, cart))
        return wizard.view()

    def submit_payment(
        self,
        client_id: str,
        auth: AuthStore,
        cart: CartStore,
        gateway: ApiGateway,
        form: PaymentForm,
    ) -> CheckoutView:
        """
        Place the order and trigger the STK push.

        Steps:
          1. Validate the M-Pesa number and that the cart has lines.
          2. POST the checkout unless an order was already created by an
             earlier attempt.
          3. Initiate the STK push for that order.
          4. On success enter `success` and clear the cart.

        Any API failure, or a push the upstream declines, leaves the wizard
        at `payment` with the error flag set; earlier steps are kept.
        """
        wizard = self._wizard(client_id, auth)
        mpesa_phone = self._run(lambda: wizard.begin_payment(form.mpesa_phone, cart))

        try:
            if wizard.order_id is None:
                request = wizard.build_checkout_request(cart, guest=not auth.is_authenticated)
                order = gateway.checkout(request)
                wizard.record_order(order.id, order.order_number)
                logger.info(f"Order {order.order_number} created")

            push = gateway.initiate_stk_push(
                STKPushRequest(order_id=wizard.order_id, phone_number=mpesa_phone)
            )
        except ApiError as e:
            logger.warning(f"Payment submission failed: {e.kind.value}")
            wizard.mark_payment_failed(e.message())
            view = wizard.view()
            if e.login_required:
                view.login_url = "/auth/login?redirect=/checkout"
            return view

        if not push.success:
            # no PIN prompt reached the phone; the order stays unpaid
            logger.warning(f"STK push declined for order {wizard.order_number}: {push.response_description}")
            wizard.mark_payment_failed(push.response_description or message("ERROR"))
            return wizard.view()

        wizard.mark_paid(cart)
        return wizard.view()
