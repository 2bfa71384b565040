# storefront/services/registration.py
"""
Account registration wizard:

    details -> phone -> password -> vehicles

Each step validates before moving on. register() posts the collected
data once the password step has been accepted; picking vehicles is
optional.
"""
import logging

from fastapi import HTTPException, status
from pydantic import ValidationError
from sqlmodel import SQLModel, Field

from storefront.core.api_client import ApiGateway
from storefront.schemas.auth import (
    AuthTokens,
    RegisterRequest,
    RegistrationDetails,
    RegistrationPassword,
    RegistrationPhone,
    SessionRead,
)
from storefront.services.registry import ClientRegistry
from storefront.stores.auth import AuthStore
from storefront.stores.vehicle import SelectedVehicle, VehicleStore
from storefront.utils.formatting import normalize_phone_number
from storefront.utils.validators import check_email, check_password, check_phone, require_fields

logger = logging.getLogger(__name__)

class RegistrationTransitionError(Exception):
    pass


class RegistrationValidationError(Exception):
    def __init__(self, message: str, fields: dict[str, str] | None = None):
        self.fields = fields or {}
        super().__init__(message)


class RegistrationView(SQLModel):
    step: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    vehicles: list[SelectedVehicle] = Field(default_factory=list)


class RegistrationWizard:
    def __init__(self) -> None:
        self.step = "details"
        self.details = RegistrationDetails()
        self.phone = ""
        self.password: RegistrationPassword | None = None
        self.vehicles: list[SelectedVehicle] = []

    def _expect(self, *steps: str) -> None:
        if self.step not in steps:
            raise RegistrationTransitionError(
                f"Cannot do that at step '{self.step}' (expected {', '.join(steps)})"
            )

    def submit_details(self, form: RegistrationDetails) -> None:
        self._expect("details")
        errors = require_fields(
            {"first_name": form.first_name, "last_name": form.last_name, "email": form.email}
        )
        check_email(errors, "email", form.email)
        if errors:
            raise RegistrationValidationError("Please fill in all fields", errors)
        self.details = RegistrationDetails(
            first_name=form.first_name.strip(),
            last_name=form.last_name.strip(),
            email=form.email.strip(),
        )
        self.step = "phone"

    def submit_phone(self, form: RegistrationPhone) -> None:
        self._expect("phone")
        errors = require_fields({"phone": form.phone})
        check_phone(errors, "phone", form.phone)
        if errors:
            raise RegistrationValidationError("Invalid phone number", errors)
        self.phone = normalize_phone_number(form.phone)
        self.step = "password"

    def submit_password(self, form: RegistrationPassword) -> None:
        self._expect("password")
        errors: dict[str, str] = {}
        check_password(errors, form.password, form.password_confirm)
        if errors:
            raise RegistrationValidationError(next(iter(errors.values())), errors)
        self.password = form
        self.step = "vehicles"

    def add_vehicle(self, vehicle: SelectedVehicle) -> None:
        self._expect("vehicles")
        if not any(v.same_vehicle(vehicle) for v in self.vehicles):
            self.vehicles.append(vehicle)

    def remove_vehicle(self, index: int) -> None:
        self._expect("vehicles")
        self.vehicles = [v for i, v in enumerate(self.vehicles) if i != index]

    def build_request(self) -> RegisterRequest:
        self._expect("vehicles")
        try:
            return RegisterRequest(
                username=self.details.email,
                email=self.details.email,
                password=self.password.password,
                password_confirm=self.password.password_confirm,
                phone_number=self.phone,
                first_name=self.details.first_name,
                last_name=self.details.last_name,
            )
        except ValidationError:
            raise RegistrationValidationError("Invalid email", {"email": "Invalid email"})

    def view(self) -> RegistrationView:
        return RegistrationView(
            step=self.step,
            first_name=self.details.first_name,
            last_name=self.details.last_name,
            email=self.details.email,
            phone=self.phone,
            vehicles=list(self.vehicles),
        )


class RegistrationService:
    """
    One RegistrationWizard per browser, discarded after a successful
    registration.
    """

    def __init__(self, registry: ClientRegistry[RegistrationWizard] | None = None):
        self.registry = registry or ClientRegistry()

    def _wizard(self, client_id: str) -> RegistrationWizard:
        return self.registry.get_or_create(client_id, RegistrationWizard)

    @staticmethod
    def _run(action):
        try:
            return action()
        except RegistrationValidationError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"message": str(e), "fields": e.fields},
            )
        except RegistrationTransitionError as e:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=str(e),
            )

    def current(self, client_id: str) -> RegistrationView:
        return self._wizard(client_id).view()

    def restart(self, client_id: str) -> RegistrationView:
        return self.registry.put(client_id, RegistrationWizard()).view()

    def submit_details(self, client_id: str, form: RegistrationDetails) -> RegistrationView:
        wizard = self._wizard(client_id)
        self._run(lambda: wizard.submit_details(form))
        return wizard.view()

    def submit_phone(self, client_id: str, form: RegistrationPhone) -> RegistrationView:
        wizard = self._wizard(client_id)
        self._run(lambda: wizard.submit_phone(form))
        return wizard.view()

    def submit_password(self, client_id: str, form: RegistrationPassword) -> RegistrationView:
        wizard = self._wizard(client_id)
        self._run(lambda: wizard.submit_password(form))
        return wizard.view()

    def add_vehicle(self, client_id: str, vehicle: SelectedVehicle) -> RegistrationView:
        wizard = self._wizard(client_id)
        self._run(lambda: wizard.add_vehicle(vehicle))
        return wizard.view()

    def remove_vehicle(self, client_id: str, index: int) -> RegistrationView:
        wizard = self._wizard(client_id)
        self._run(lambda: wizard.remove_vehicle(index))
        return wizard.view()

    def register(
        self,
        client_id: str,
        auth: AuthStore,
        vehicles: VehicleStore,
        gateway: ApiGateway,
    ) -> SessionRead:
        """
        Create the account and log the browser in.

        Rules:
          - every earlier step must have been accepted
          - phone is sent normalized, username is the email
          - vehicles picked during registration become saved vehicles,
            the first one also the selected vehicle

        Raises:
            ApiError: upstream rejection (e.g. 400 email taken), surfaced
            by the app-level handler.
        """
        wizard = self._wizard(client_id)
        request = self._run(wizard.build_request)

        result = gateway.register(request)
        auth.login(AuthTokens(access=result.access, refresh=result.refresh), result.user)
        logger.info(f"Registered {wizard.details.email}")

        if wizard.vehicles:
            for vehicle in wizard.vehicles:
                vehicles.add_saved(vehicle)
            if vehicles.selected is None:
                vehicles.set_vehicle(wizard.vehicles[0])

        self.registry.discard(client_id)
        return SessionRead(
            is_authenticated=auth.is_authenticated,
            is_owner=auth.is_owner,
            user=auth.user,
            access_expires_at=auth.access_expires_at(),
        )
