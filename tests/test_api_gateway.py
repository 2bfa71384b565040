import httpx
import pytest

from conftest import make_token, user_payload
from storefront.core.api_client import ApiGateway
from storefront.core.errors import ApiError, ApiErrorKind
from storefront.schemas.auth import AuthTokens, LoginRequest, User
from storefront.stores.auth import AuthStore


@pytest.fixture()
def auth(memory_storage) -> AuthStore:
    store = AuthStore(memory_storage)
    store.login(AuthTokens(access="old-access", refresh="refresh-1"), User.model_validate(user_payload()))
    return store


@pytest.fixture()
def gateway(auth, api_settings, transport) -> ApiGateway:
    return ApiGateway(auth, settings=api_settings, transport=transport)


def test_bearer_token_is_attached(gateway, fake_api):
    fake_api.on("GET", "/users/profile/", (200, user_payload()))

    user = gateway.get_profile()

    assert user.email == "jane@example.com"
    assert fake_api.calls[0].headers["Authorization"] == "Bearer old-access"


def test_401_refreshes_once_and_retries(gateway, fake_api, auth):
    fake_api.on("GET", "/users/profile/", (401, {"detail": "expired"}), (200, user_payload()))
    fake_api.on("POST", "/users/token/refresh/", (200, {"access": "new-access"}))

    gateway.get_profile()

    assert fake_api.call_paths == [
        ("GET", "/users/profile/"),
        ("POST", "/users/token/refresh/"),
        ("GET", "/users/profile/"),
    ]
    assert fake_api.calls[-1].headers["Authorization"] == "Bearer new-access"
    assert auth.access_token == "new-access"
    # refresh token kept when the refresh response has none
    assert auth.refresh_token == "refresh-1"


def test_failed_refresh_logs_out_without_further_retries(gateway, fake_api, auth):
    fake_api.on("GET", "/orders/my-orders/", (401, {"detail": "expired"}))
    fake_api.on("POST", "/users/token/refresh/", (401, {"detail": "Token is invalid"}))

    with pytest.raises(ApiError) as exc:
        gateway.get_orders()

    assert exc.value.kind is ApiErrorKind.UNAUTHENTICATED
    assert exc.value.login_required
    assert len(fake_api.calls) == 2
    assert not auth.is_authenticated
    assert auth.access_token is None


def test_missing_refresh_token_logs_out(memory_storage, api_settings, transport, fake_api):
    auth = AuthStore(memory_storage)
    auth.login(AuthTokens(access="only-access"), None)
    fake_api.on("GET", "/users/profile/", (401, {"detail": "expired"}))

    with pytest.raises(ApiError) as exc:
        ApiGateway(auth, settings=api_settings, transport=transport).get_profile()

    assert exc.value.login_required
    assert fake_api.call_paths == [("GET", "/users/profile/")]
    assert not auth.is_authenticated


def test_refresh_network_failure_counts_as_failed_refresh(gateway, fake_api, auth):
    fake_api.on("GET", "/users/profile/", (401, {}))
    fake_api.on("POST", "/users/token/refresh/", httpx.ConnectError("connection refused"))

    with pytest.raises(ApiError) as exc:
        gateway.get_profile()

    assert exc.value.kind is ApiErrorKind.UNAUTHENTICATED
    assert not auth.is_authenticated


def test_refresh_without_access_token_counts_as_failed_refresh(gateway, fake_api, auth):
    fake_api.on("GET", "/users/profile/", (401, {"detail": "expired"}))
    fake_api.on("POST", "/users/token/refresh/", (200, {"detail": "ok"}))

    with pytest.raises(ApiError) as exc:
        gateway.get_profile()

    assert exc.value.kind is ApiErrorKind.UNAUTHENTICATED
    assert exc.value.login_required
    assert len(fake_api.calls) == 2
    assert not auth.is_authenticated


def test_malformed_body_is_an_unknown_error(gateway, fake_api):
    fake_api.on("GET", "/products/products/7/", (200, {"name": "no id"}))

    with pytest.raises(ApiError) as exc:
        gateway.get_product_detail(7)

    assert exc.value.kind is ApiErrorKind.UNKNOWN
    assert exc.value.message() == "Something went wrong"
    assert exc.value.response_status == 502


def test_retried_request_is_never_retried_again(gateway, fake_api, auth):
    fake_api.on("GET", "/users/profile/", (401, {}))
    fake_api.on("POST", "/users/token/refresh/", (200, {"access": "new-access", "refresh": "refresh-2"}))

    with pytest.raises(ApiError) as exc:
        gateway.get_profile()

    assert exc.value.kind is ApiErrorKind.UNAUTHENTICATED
    assert not exc.value.login_required
    assert len(fake_api.calls) == 3
    assert auth.refresh_token == "refresh-2"


def test_login_401_does_not_trigger_refresh(gateway, fake_api):
    fake_api.on("POST", "/users/token/", (401, {"detail": "No active account"}))

    with pytest.raises(ApiError) as exc:
        gateway.login(LoginRequest(email="jane@example.com", password="wrong"))

    assert exc.value.message() == "Invalid email or password"
    assert exc.value.message("sw") == "Barua/namba au neno la siri si sahihi"
    assert len(fake_api.calls) == 1
    assert "Authorization" not in fake_api.calls[0].headers


def test_400_message_is_first_field_error(gateway, fake_api):
    fake_api.on(
        "POST",
        "/orders/checkout/",
        (400, {"recipient_phone": ["Enter a valid phone number."], "items": ["Out of stock."]}),
    )
    from storefront.schemas.order import CheckoutItem, CheckoutRequest

    with pytest.raises(ApiError) as exc:
        gateway.checkout(
            CheckoutRequest(
                items=[CheckoutItem(product_id=1, quantity=1)],
                delivery_address="Moi Avenue",
                delivery_city="Nairobi",
                recipient_name="Jane",
                recipient_phone="254",
                delivery_type="standard",
            )
        )

    assert exc.value.kind is ApiErrorKind.INVALID_REQUEST
    assert exc.value.fields["items"] == "Out of stock."
    assert exc.value.message() == "Enter a valid phone number."
    assert exc.value.response_status == 400


@pytest.mark.parametrize(
    "status_code, kind",
    [
        (403, ApiErrorKind.FORBIDDEN),
        (404, ApiErrorKind.NOT_FOUND),
        (409, ApiErrorKind.CONFLICT),
        (429, ApiErrorKind.RATE_LIMITED),
        (500, ApiErrorKind.SERVER_ERROR),
        (418, ApiErrorKind.UNKNOWN),
    ],
)
def test_status_taxonomy(gateway, fake_api, status_code, kind):
    fake_api.on("GET", "/products/products/5/", (status_code, {"detail": "x"}))

    with pytest.raises(ApiError) as exc:
        gateway.get_product_detail(5)

    assert exc.value.kind is kind
    assert len(fake_api.calls) == 1


def test_503_has_its_own_message(gateway, fake_api):
    fake_api.on("GET", "/products/categories/", (503, {}))
    with pytest.raises(ApiError) as exc:
        gateway.get_categories()
    assert exc.value.message() == "Service temporarily unavailable. Please try again later."


def test_network_error(gateway, fake_api):
    fake_api.on("GET", "/products/categories/", httpx.ConnectTimeout("timed out"))
    with pytest.raises(ApiError) as exc:
        gateway.get_categories()
    assert exc.value.kind is ApiErrorKind.NETWORK
    assert exc.value.response_status == 503


def test_query_params_drop_none_and_lower_bools(gateway, fake_api):
    fake_api.on("GET", "/products/products/", (200, {"count": 0, "next": None, "results": []}))

    gateway.get_products({"search": "pads", "in_stock": True, "category": None})

    params = fake_api.calls[0].url.params
    assert params["search"] == "pads"
    assert params["in_stock"] == "true"
    assert "category" not in params


def test_order_money_aliases_are_canonicalised(gateway, fake_api):
    fake_api.on(
        "GET",
        "/orders/order/ORD-1/",
        (200, {"id": 1, "order_number": "ORD-1", "status": "shipped", "total": 3500, "delivery_fee": 1500}),
    )

    order = gateway.get_order_detail("ORD-1")

    assert order.order_status == "shipped"
    assert order.total_amount == 3500
    assert order.delivery_cost == 1500


def test_status_distribution_accepts_mapping_or_list(gateway, fake_api):
    fake_api.on("GET", "/analytics/order-status/", (200, {"pending": 3, "paid": 1}))
    fake_api.on("GET", "/analytics/payment-status/", (200, [{"status": "paid", "count": 4}]))

    orders = gateway.admin_get_order_status_distribution()
    payments = gateway.admin_get_payment_status_distribution()

    assert {(s.status, s.count) for s in orders} == {("pending", 3), ("paid", 1)}
    assert payments[0].count == 4


def test_access_expiry_read_from_token_claims(memory_storage):
    auth = AuthStore(memory_storage)
    auth.login(AuthTokens(access=make_token(minutes=10), refresh="r"), None)
    assert auth.access_expires_at() is not None

    auth.set_tokens(AuthTokens(access="not-a-jwt"))
    assert auth.access_expires_at() is None


def test_explicit_refresh_sends_no_bearer(gateway, fake_api):
    fake_api.on("POST", "/users/token/refresh/", (200, {"access": "fresh"}))

    result = gateway.refresh_token("refresh-1")

    assert result.access == "fresh"
    assert "Authorization" not in fake_api.calls[0].headers
