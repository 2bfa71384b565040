# storefront/stores/auth.py
from datetime import datetime, timezone

from jose import JWTError, jwt

from storefront.constants import AUTH_STORAGE_KEY
from storefront.schemas.auth import AuthSession, AuthTokens, User
from storefront.stores.persistence import KeyValueStorage, load_state, save_state

AUTH_STATE_VERSION = 1


def token_expiry(token: str | None) -> datetime | None:
    """
    Read the `exp` claim of an access token.

    The signature is NOT verified: the storefront never trusts the
    token, it only forwards it. This is for display only.
    """
    if not token:
        return None
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        return None
    exp = claims.get("exp")
    if not isinstance(exp, (int, float)):
        return None
    return datetime.fromtimestamp(exp, tz=timezone.utc)


class AuthStore:
    """
    Persisted auth session: user, tokens and the owner flag.
    """

    def __init__(self, storage: KeyValueStorage):
        self.storage = storage
        self.state = load_state(storage, AUTH_STORAGE_KEY, AuthSession, AUTH_STATE_VERSION)

    def _commit(self) -> None:
        save_state(self.storage, AUTH_STORAGE_KEY, self.state, AUTH_STATE_VERSION)

    # ---- read ----

    @property
    def user(self) -> User | None:
        return self.state.user

    @property
    def is_authenticated(self) -> bool:
        return self.state.is_authenticated

    @property
    def is_owner(self) -> bool:
        return self.state.is_owner

    @property
    def access_token(self) -> str | None:
        return self.state.tokens.access if self.state.tokens else None

    @property
    def refresh_token(self) -> str | None:
        return self.state.tokens.refresh if self.state.tokens else None

    def access_expires_at(self) -> datetime | None:
        return token_expiry(self.access_token)

    # ---- mutations ----

    def login(self, tokens: AuthTokens, user: User | None) -> None:
        self.state = AuthSession(
            user=user,
            tokens=tokens,
            is_authenticated=True,
            is_owner=bool(user and user.is_owner),
        )
        self._commit()

    def logout(self) -> None:
        self.state = AuthSession()
        self._commit()

    def set_tokens(self, tokens: AuthTokens | None) -> None:
        self.state.tokens = tokens
        self._commit()

    def set_user(self, user: User | None) -> None:
        self.state.user = user
        self.state.is_authenticated = user is not None
        self.state.is_owner = bool(user and user.is_owner)
        self._commit()

    def update_profile(self, updates: dict) -> None:
        """Merge profile fields into the cached user; owner flag follows."""
        if self.state.user is None:
            return
        profile = self.state.user.profile.model_dump()
        profile.update({k: v for k, v in updates.items() if k in profile})
        user = self.state.user.model_dump()
        user["profile"] = profile
        for name in ("first_name", "last_name", "email"):
            if name in updates:
                user[name] = updates[name]
        self.set_user(User.model_validate(user))
