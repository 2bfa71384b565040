# storefront/core/auth.py
import httpx
from fastapi import Depends, HTTPException, status

from storefront.core.api_client import ApiGateway
from storefront.core.session import get_storage
from storefront.stores.auth import AuthStore
from storefront.stores.persistence import ClientStorage


def get_auth_store(storage: ClientStorage = Depends(get_storage)) -> AuthStore:
    """
    Resolve the persisted auth session for this browser.

    A browser without a stored session gets an empty (guest) store.
    """
    return AuthStore(storage)


def get_api_transport() -> httpx.BaseTransport | None:
    """
    Transport used by the API gateway.

    None means real network I/O; tests override this dependency with
    an httpx.MockTransport.
    """
    return None


def get_gateway(
    auth: AuthStore = Depends(get_auth_store),
    transport: httpx.BaseTransport | None = Depends(get_api_transport),
) -> ApiGateway:
    return ApiGateway(auth, transport=transport)


def require_auth(auth: AuthStore = Depends(get_auth_store)) -> AuthStore:
    """
    Enforce authentication.

    If attached to a route, guests (no stored session) will be
    rejected with 401.

    Raises:
        HTTPException(401): if the session is not authenticated.
    """
    if not auth.is_authenticated or not auth.access_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return auth


def require_owner(auth: AuthStore = Depends(require_auth)) -> AuthStore:
    """
    Enforce the owner flag.

    Route is accessible only if:
      - the session is authenticated
      - user.profile.is_owner is set

    Raises:
        HTTPException(403): if the user is not the store owner.
    """
    if not auth.is_owner:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Owner access required",
        )
    return auth
