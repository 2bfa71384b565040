# storefront/core/session.py
import re
import uuid

from fastapi import Depends, Request, Response
from sqlmodel import Session

from storefront.core.config import get_settings
from storefront.database import get_session
from storefront.stores.cart import CartStore
from storefront.stores.favorites import FavoritesStore
from storefront.stores.persistence import ClientStorage
from storefront.stores.vehicle import VehicleStore

settings = get_settings()

_CLIENT_ID = re.compile(r"^[0-9a-f]{32}$")


def get_client_id(request: Request, response: Response) -> str:
    """
    Identify the browser.

    Flow:
      1. Reuse the client cookie when it holds a well-formed id.
      2. Otherwise mint a new id and set the cookie on the response.

    Every persisted store (cart, favorites, vehicle, auth) is scoped
    to this id.
    """
    client_id = request.cookies.get(settings.CLIENT_COOKIE_NAME)
    if client_id and _CLIENT_ID.match(client_id):
        return client_id

    client_id = uuid.uuid4().hex
    response.set_cookie(
        settings.CLIENT_COOKIE_NAME,
        client_id,
        max_age=settings.CLIENT_COOKIE_MAX_AGE,
        httponly=True,
        samesite="lax",
    )
    return client_id


def get_storage(
    client_id: str = Depends(get_client_id),
    session: Session = Depends(get_session),
) -> ClientStorage:
    return ClientStorage(session, client_id)


def get_cart_store(storage: ClientStorage = Depends(get_storage)) -> CartStore:
    return CartStore(storage)


def get_favorites_store(storage: ClientStorage = Depends(get_storage)) -> FavoritesStore:
    return FavoritesStore(storage)


def get_vehicle_store(storage: ClientStorage = Depends(get_storage)) -> VehicleStore:
    return VehicleStore(storage)
