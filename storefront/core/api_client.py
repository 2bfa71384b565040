# storefront/core/api_client.py
"""
Single gateway to the upstream AutoParts REST API.

Policy:
  - bearer token from the auth store on every authenticated request
  - on 401: exactly one refresh with the stored refresh token, then one
    retry of the original request; if there is no refresh token or the
    refresh fails, the auth store is logged out and the caller gets an
    `unauthenticated` ApiError flagged `login_required`
  - every other failure is mapped to the ApiError taxonomy and raised,
    never retried
"""
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from storefront.core.config import Settings, get_settings
from storefront.core.errors import ApiError, ApiErrorKind
from storefront.schemas.admin import (
    DashboardSummary,
    LowStockAlert,
    ProfitLine,
    RevenueAnalytics,
    StatusCount,
    TopProduct,
)
from storefront.schemas.auth import (
    AuthTokens,
    LoginRequest,
    LoginResponse,
    ProfileUpdate,
    RegisterRequest,
    TokenRefreshResponse,
    User,
)
from storefront.schemas.catalog import (
    Category,
    Product,
    ProductCreate,
    ProductUpdate,
    VehicleMake,
    VehicleModel,
)
from storefront.schemas.common import Page
from storefront.schemas.order import (
    CheckoutRequest,
    CheckoutResponse,
    Order,
    OrderStatusUpdate,
    PaymentStatusResponse,
    STKPushRequest,
    STKPushResponse,
)
from storefront.stores.auth import AuthStore

logger = logging.getLogger(__name__)

REFRESH_PATH = "/users/token/refresh/"


def _clean_params(params: dict[str, Any] | None) -> dict[str, Any] | None:
    if params is None:
        return None
    cleaned = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        cleaned[key] = value
    return cleaned


def _payload(response: httpx.Response) -> Any:
    if response.status_code == 204 or not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _parse(model: Any, data: Any) -> Any:
    """
    Validate an upstream body against `model`.

    A body of the wrong shape is an `unknown` ApiError, not a crash.
    """
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Unexpected {getattr(model, '__name__', model)} payload: {e.error_count()} errors")
        raise ApiError(ApiErrorKind.UNKNOWN, detail=e.errors(include_url=False)) from e


class ApiGateway:
    """
    HTTP client for the upstream API, bound to one browser's auth store.

    `transport` lets tests swap the network for an httpx.MockTransport.
    """

    def __init__(
        self,
        auth: AuthStore,
        settings: Settings | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.auth = auth
        self.settings = settings or get_settings()
        self.base_url = self.settings.API_BASE_URL.rstrip("/")
        self.timeout = self.settings.API_TIMEOUT_SECONDS
        self.transport = transport

    # ---- plumbing ----

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            transport=self.transport,
        )

    @staticmethod
    def _send(
        client: httpx.Client,
        method: str,
        path: str,
        params: dict[str, Any] | None,
        json_body: Any,
        token: str | None,
    ) -> httpx.Response:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        return client.request(method, path, params=params, json=json_body, headers=headers)

    def _refresh_access_token(self, client: httpx.Client) -> str | None:
        """
        One refresh attempt. Returns the new access token, or None after
        logging the session out.
        """
        refresh = self.auth.refresh_token
        if not refresh:
            logger.info("401 without refresh token; logging out")
            self.auth.logout()
            return None

        try:
            response = client.post(REFRESH_PATH, json={"refresh": refresh})
        except httpx.TransportError as e:
            logger.warning(f"Token refresh failed (network): {e}")
            self.auth.logout()
            return None

        if response.is_error:
            logger.warning(f"Token refresh rejected with {response.status_code}; logging out")
            self.auth.logout()
            return None

        try:
            tokens = TokenRefreshResponse.model_validate(_payload(response))
        except ValidationError:
            logger.warning("Token refresh answered without an access token; logging out")
            self.auth.logout()
            return None

        self.auth.set_tokens(AuthTokens(access=tokens.access, refresh=tokens.refresh or refresh))
        logger.info("Access token refreshed")
        return tokens.access

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        authenticated: bool = True,
    ) -> Any:
        """
        Perform one API call and return the decoded JSON body.

        `authenticated=False` is used for the token endpoints themselves:
        no bearer header and no refresh-on-401.
        """
        params = _clean_params(params)
        token = self.auth.access_token if authenticated else None

        try:
            with self._client() as client:
                response = self._send(client, method, path, params, json, token)

                if response.status_code == 401 and authenticated:
                    access = self._refresh_access_token(client)
                    if access is None:
                        raise ApiError(
                            ApiErrorKind.UNAUTHENTICATED,
                            status_code=401,
                            login_required=True,
                        )
                    # the retried request is never retried again
                    response = self._send(client, method, path, params, json, access)
        except httpx.TransportError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise ApiError(ApiErrorKind.NETWORK, detail=str(e)) from e

        if response.is_error:
            raise ApiError.from_response(response.status_code, _payload(response))
        return _payload(response)

    # ---- auth ----

    def login(self, payload: LoginRequest) -> LoginResponse:
        data = self.request(
            "POST", "/users/token/", json=payload.model_dump(exclude_none=True), authenticated=False
        )
        return _parse(LoginResponse, data)

    def register(self, payload: RegisterRequest) -> LoginResponse:
        data = self.request(
            "POST", "/users/register/", json=payload.model_dump(exclude_none=True), authenticated=False
        )
        return _parse(LoginResponse, data)

    def refresh_token(self, refresh: str) -> TokenRefreshResponse:
        data = self.request("POST", REFRESH_PATH, json={"refresh": refresh}, authenticated=False)
        return _parse(TokenRefreshResponse, data)

    def get_profile(self) -> User:
        return _parse(User, self.request("GET", "/users/profile/"))

    def update_profile(self, payload: ProfileUpdate) -> User:
        data = self.request("PATCH", "/users/profile/", json=payload.model_dump(exclude_none=True))
        return _parse(User, data)

    # ---- catalog ----

    def get_vehicle_makes(self, params: dict[str, Any] | None = None) -> Page[VehicleMake]:
        return _parse(Page[VehicleMake], self.request("GET", "/vehicles/makes/", params=params))

    def get_vehicle_models(self, params: dict[str, Any] | None = None) -> Page[VehicleModel]:
        return _parse(Page[VehicleModel], self.request("GET", "/vehicles/models/", params=params))

    def get_products(self, params: dict[str, Any] | None = None) -> Page[Product]:
        return _parse(Page[Product], self.request("GET", "/products/products/", params=params))

    def get_product_detail(self, product_id: int) -> Product:
        return _parse(Product, self.request("GET", f"/products/products/{product_id}/"))

    def get_featured_products(self, params: dict[str, Any] | None = None) -> Page[Product]:
        data = self.request("GET", "/products/products/featured/", params=params)
        return _parse(Page[Product], data)

    def get_categories(self, params: dict[str, Any] | None = None) -> Page[Category]:
        return _parse(Page[Category], self.request("GET", "/products/categories/", params=params))

    # ---- orders & payments ----

    def checkout(self, payload: CheckoutRequest) -> CheckoutResponse:
        data = self.request("POST", "/orders/checkout/", json=payload.model_dump(exclude_none=True))
        return _parse(CheckoutResponse, data)

    def get_orders(self, params: dict[str, Any] | None = None) -> Page[Order]:
        return _parse(Page[Order], self.request("GET", "/orders/my-orders/", params=params))

    def get_order_detail(self, order_number: str) -> Order:
        return _parse(Order, self.request("GET", f"/orders/order/{order_number}/"))

    def initiate_stk_push(self, payload: STKPushRequest) -> STKPushResponse:
        data = self.request("POST", "/payments/initiate-stk-push/", json=payload.model_dump(exclude_none=True))
        return _parse(STKPushResponse, data)

    def check_payment_status(self, order_id: int) -> PaymentStatusResponse:
        data = self.request("GET", "/payments/check-status/", params={"order_id": order_id})
        return _parse(PaymentStatusResponse, data)

    # ---- owner only ----

    def admin_get_dashboard(self) -> DashboardSummary:
        return _parse(DashboardSummary, self.request("GET", "/analytics/dashboard/"))

    def admin_get_revenue_analytics(self, params: dict[str, Any] | None = None) -> RevenueAnalytics:
        return _parse(RevenueAnalytics, self.request("GET", "/analytics/revenue/", params=params))

    def admin_get_top_products(self, params: dict[str, Any] | None = None) -> list[TopProduct]:
        data = self.request("GET", "/analytics/top-products/", params=params)
        return _parse(Page[TopProduct], data).results

    def admin_get_low_stock_alerts(self) -> list[LowStockAlert]:
        data = self.request("GET", "/analytics/low-stock/")
        return _parse(Page[LowStockAlert], data).results

    def admin_get_order_status_distribution(self) -> list[StatusCount]:
        return _status_counts(self.request("GET", "/analytics/order-status/"))

    def admin_get_payment_status_distribution(self) -> list[StatusCount]:
        return _status_counts(self.request("GET", "/analytics/payment-status/"))

    def admin_get_profit_analysis(self, params: dict[str, Any] | None = None) -> list[ProfitLine]:
        data = self.request("GET", "/analytics/profit/", params=params)
        return _parse(Page[ProfitLine], data).results

    def admin_get_orders(self, params: dict[str, Any] | None = None) -> Page[Order]:
        return _parse(Page[Order], self.request("GET", "/orders/admin/orders/", params=params))

    def admin_update_order_status(self, order_id: int, payload: OrderStatusUpdate) -> Order:
        data = self.request(
            "PATCH", f"/orders/admin/orders/{order_id}/", json=payload.model_dump(exclude_none=True)
        )
        return _parse(Order, data)

    def admin_get_products(self, params: dict[str, Any] | None = None) -> Page[Product]:
        return self.get_products(params)

    def admin_create_product(self, payload: ProductCreate) -> Product:
        return _parse(Product, self.request("POST", "/products/products/", json=payload.model_dump()))

    def admin_update_product(self, product_id: int, payload: ProductUpdate) -> Product:
        data = self.request(
            "PATCH", f"/products/products/{product_id}/", json=payload.model_dump(exclude_unset=True)
        )
        return _parse(Product, data)

    def admin_delete_product(self, product_id: int) -> None:
        self.request("DELETE", f"/products/products/{product_id}/")


def _status_counts(data: Any) -> list[StatusCount]:
    """
    Distribution endpoints answer either {"pending": 3, ...} or
    [{"status": "pending", "count": 3}, ...].
    """
    if isinstance(data, dict) and "results" not in data:
        return [_parse(StatusCount, {"status": k, "count": v}) for k, v in data.items()]
    return _parse(Page[StatusCount], data).results
