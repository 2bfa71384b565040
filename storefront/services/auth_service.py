# storefront/services/auth_service.py
import logging

from fastapi import HTTPException, status

from storefront.core.api_client import ApiGateway
from storefront.schemas.auth import (
    AuthTokens,
    LoginRequest,
    ProfileUpdate,
    SessionRead,
    User,
)
from storefront.stores.auth import AuthStore
from storefront.utils.formatting import is_valid_phone_number, normalize_phone_number

logger = logging.getLogger(__name__)


class AuthService:
    """
    Login, logout and profile for the browser's persisted session.
    """

    @staticmethod
    def session_view(auth: AuthStore) -> SessionRead:
        return SessionRead(
            is_authenticated=auth.is_authenticated,
            is_owner=auth.is_owner,
            user=auth.user,
            access_expires_at=auth.access_expires_at(),
        )

    def login(self, auth: AuthStore, gateway: ApiGateway, payload: LoginRequest) -> SessionRead:
        """
        Exchange credentials for tokens and persist the session.

        Rules:
          - either email or username is required
          - when the token response carries no user, the profile is
            fetched with the new access token

        Raises:
            HTTPException(400): neither email nor username given.
            ApiError: upstream rejection (401 bad credentials, ...).
        """
        if not payload.email and not payload.username:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email or username is required",
            )

        result = gateway.login(payload)
        tokens = AuthTokens(access=result.access, refresh=result.refresh)
        auth.login(tokens, result.user)

        if result.user is None:
            auth.set_user(gateway.get_profile())

        logger.info(f"Login ok for {auth.user.username if auth.user else 'unknown'}")
        return self.session_view(auth)

    def logout(self, auth: AuthStore) -> SessionRead:
        auth.logout()
        return self.session_view(auth)

    def get_profile(self, auth: AuthStore, gateway: ApiGateway) -> User:
        """Fresh profile from the API; the cached user is updated too."""
        user = gateway.get_profile()
        auth.set_user(user)
        return user

    def update_profile(self, auth: AuthStore, gateway: ApiGateway, payload: ProfileUpdate) -> User:
        if payload.phone_number is not None:
            if not is_valid_phone_number(payload.phone_number):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Invalid phone number",
                )
            payload.phone_number = normalize_phone_number(payload.phone_number)

        user = gateway.update_profile(payload)
        auth.set_user(user)
        return user
