# storefront/routers/auth.py
from fastapi import APIRouter, Depends

from storefront.core.api_client import ApiGateway
from storefront.core.auth import get_auth_store, get_gateway, require_auth
from storefront.core.session import get_client_id, get_vehicle_store
from storefront.schemas.auth import (
    LoginRequest,
    ProfileUpdate,
    RegistrationDetails,
    RegistrationPassword,
    RegistrationPhone,
    SessionRead,
    User,
)
from storefront.services.auth_service import AuthService
from storefront.services.registration import RegistrationService, RegistrationView
from storefront.stores.auth import AuthStore
from storefront.stores.vehicle import SelectedVehicle, VehicleStore

router = APIRouter(prefix="/auth", tags=["Auth"])

service = AuthService()
registration = RegistrationService()


@router.get("/session", response_model=SessionRead)
def get_session_info(auth: AuthStore = Depends(get_auth_store)):
    """
    Who is logged in on this browser. Tokens are never returned.
    """
    return service.session_view(auth)


@router.post("/login", response_model=SessionRead)
def login(
    payload: LoginRequest,
    auth: AuthStore = Depends(get_auth_store),
    gateway: ApiGateway = Depends(get_gateway),
):
    """
    Log in with email (or username) and password.

    On success the tokens are stored server-side for this browser.
    """
    return service.login(auth, gateway, payload)


@router.post("/logout", response_model=SessionRead)
def logout(auth: AuthStore = Depends(get_auth_store)):
    return service.logout(auth)


# -------- profile --------


@router.get("/profile", response_model=User)
def get_profile(
    auth: AuthStore = Depends(require_auth),
    gateway: ApiGateway = Depends(get_gateway),
):
    return service.get_profile(auth, gateway)


@router.patch("/profile", response_model=User)
def update_profile(
    payload: ProfileUpdate,
    auth: AuthStore = Depends(require_auth),
    gateway: ApiGateway = Depends(get_gateway),
):
    """
    Partial profile update. The phone number is normalized to 2547XXXXXXXX.
    """
    return service.update_profile(auth, gateway, payload)


# -------- registration wizard --------


@router.get("/register", response_model=RegistrationView)
def get_registration(client_id: str = Depends(get_client_id)):
    return registration.current(client_id)


@router.post("/register/restart", response_model=RegistrationView)
def restart_registration(client_id: str = Depends(get_client_id)):
    return registration.restart(client_id)


@router.post("/register/details", response_model=RegistrationView)
def submit_details(
    payload: RegistrationDetails,
    client_id: str = Depends(get_client_id),
):
    return registration.submit_details(client_id, payload)


@router.post("/register/phone", response_model=RegistrationView)
def submit_phone(
    payload: RegistrationPhone,
    client_id: str = Depends(get_client_id),
):
    return registration.submit_phone(client_id, payload)


@router.post("/register/password", response_model=RegistrationView)
def submit_password(
    payload: RegistrationPassword,
    client_id: str = Depends(get_client_id),
):
    """
    Password step: at least 8 characters and the confirmation must match.
    """
    return registration.submit_password(client_id, payload)


@router.post("/register/vehicles", response_model=RegistrationView)
def add_registration_vehicle(
    payload: SelectedVehicle,
    client_id: str = Depends(get_client_id),
):
    return registration.add_vehicle(client_id, payload)


@router.delete("/register/vehicles/{index}", response_model=RegistrationView)
def remove_registration_vehicle(
    index: int,
    client_id: str = Depends(get_client_id),
):
    return registration.remove_vehicle(client_id, index)


@router.post("/register", response_model=SessionRead, status_code=201)
def register(
    client_id: str = Depends(get_client_id),
    auth: AuthStore = Depends(get_auth_store),
    vehicles: VehicleStore = Depends(get_vehicle_store),
    gateway: ApiGateway = Depends(get_gateway),
):
    """
    Create the account from the completed wizard and log in.
    """
    return registration.register(client_id, auth, vehicles, gateway)
