import json

import httpx

from conftest import API_PREFIX, product_payload, user_payload


def add_brake_pads(client, fake_api, quantity=2):
    fake_api.on("GET", "/products/products/7/", (200, product_payload(7)))
    return client.post(f"{API_PREFIX}/cart", json={"product_id": 7, "quantity": quantity})


# -------- cart --------


def test_health(client):
    assert client.get("/").json()["status"] == "ok"


def test_add_to_cart_snapshots_discounted_price(client, fake_api):
    resp = add_brake_pads(client, fake_api)

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["items"][0]["unit_price"] == 1800.0
    assert body["items"][0]["image"] == "https://cdn.example.com/bp-001.jpg"
    assert body["subtotal"] == 3600.0
    assert body["item_count"] == 2


def test_cart_is_kept_per_browser(client, fake_api):
    add_brake_pads(client, fake_api)
    assert client.get(f"{API_PREFIX}/cart").json()["item_count"] == 2

    client.cookies.clear()
    assert client.get(f"{API_PREFIX}/cart").json()["item_count"] == 0


def test_add_more_than_stock_is_rejected(client, fake_api):
    resp = add_brake_pads(client, fake_api, quantity=6)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Not enough stock available"


def test_update_remove_and_delivery(client, fake_api):
    add_brake_pads(client, fake_api)

    body = client.put(f"{API_PREFIX}/cart/delivery", json={"tier": "economy"}).json()
    assert body["delivery_fee"] == 500.0
    assert body["total"] == 4100.0

    body = client.patch(f"{API_PREFIX}/cart/7", json={"quantity": 0}).json()
    assert body["items"] == []

    assert client.delete(f"{API_PREFIX}/cart/7").status_code == 404


def test_unknown_product_maps_upstream_404(client, fake_api):
    resp = client.post(f"{API_PREFIX}/cart", json={"product_id": 404, "quantity": 1})
    assert resp.status_code == 404
    assert resp.json() == {"error": "not_found", "message": "Resource not found."}


def test_network_failure_becomes_503(client, fake_api):
    fake_api.on("GET", "/products/products/7/", httpx.ConnectError("connection refused"))
    client.cookies.set("locale", "sw")

    resp = client.get(f"{API_PREFIX}/products/7")

    assert resp.status_code == 503
    assert resp.json()["error"] == "network"
    assert resp.json()["message"].startswith("Hitilafu ya mtandao")


def test_malformed_upstream_product_is_an_unknown_error(client, fake_api):
    fake_api.on("GET", "/products/products/7/", (200, {"name": "Brake Pad Set"}))

    resp = client.get(f"{API_PREFIX}/products/7")

    assert resp.status_code == 502
    assert resp.json() == {"error": "unknown", "message": "Something went wrong"}


# -------- checkout --------


def walk_guest_checkout(client, fake_api):
    add_brake_pads(client, fake_api)
    assert client.get(f"{API_PREFIX}/checkout").json()["step"] == "choice"
    client.post(f"{API_PREFIX}/checkout/choice", json={"choice": "guest"})
    client.post(f"{API_PREFIX}/checkout/contact", json={"email": "jane@example.com", "phone": "0722123456"})
    resp = client.post(
        f"{API_PREFIX}/checkout/address",
        json={
            "recipient_name": "Jane Wanjiku",
            "recipient_phone": "0722123456",
            "delivery_address": "Moi Avenue 12",
            "delivery_type": "express",
        },
    )
    assert resp.json()["step"] == "payment", resp.text


def test_guest_checkout_end_to_end(client, fake_api):
    walk_guest_checkout(client, fake_api)
    fake_api.on("POST", "/orders/checkout/", (201, {"id": 42, "order_number": "ORD-42", "total": 6600}))
    fake_api.on("POST", "/payments/initiate-stk-push/", (200, {"success": True, "checkout_request_id": "ws_1"}))

    resp = client.post(f"{API_PREFIX}/checkout/payment", json={"mpesa_phone": "0722 123 456"})

    body = resp.json()
    assert body["step"] == "success"
    assert body["order_number"] == "ORD-42"

    order = json.loads(fake_api.called("POST", "/orders/checkout/")[0].content)
    assert order["items"] == [{"product_id": 7, "quantity": 2}]
    assert order["delivery_type"] == "express"
    assert order["guest_email"] == "jane@example.com"
    assert order["recipient_phone"] == "254722123456"

    push = json.loads(fake_api.called("POST", "/payments/initiate-stk-push/")[0].content)
    assert push == {"order_id": 42, "phone_number": "254722123456"}

    cart = client.get(f"{API_PREFIX}/cart").json()
    assert cart["items"] == []
    assert cart["delivery"] is None


def test_payment_failure_keeps_step_and_retry_reuses_order(client, fake_api):
    walk_guest_checkout(client, fake_api)
    fake_api.on("POST", "/orders/checkout/", (201, {"id": 42, "order_number": "ORD-42"}))
    fake_api.on(
        "POST",
        "/payments/initiate-stk-push/",
        (500, {"detail": "M-Pesa down"}),
        (200, {"success": True}),
    )

    failed = client.post(f"{API_PREFIX}/checkout/payment", json={"mpesa_phone": "0722123456"}).json()
    assert failed["step"] == "payment"
    assert failed["payment_error"] is True
    assert failed["error_message"] == "Server error. Please try again later."
    assert client.get(f"{API_PREFIX}/cart").json()["item_count"] == 2

    done = client.post(f"{API_PREFIX}/checkout/payment", json={"mpesa_phone": "0722123456"}).json()
    assert done["step"] == "success"
    assert len(fake_api.called("POST", "/orders/checkout/")) == 1


def test_declined_stk_push_is_not_a_placed_order(client, fake_api):
    walk_guest_checkout(client, fake_api)
    fake_api.on("POST", "/orders/checkout/", (201, {"id": 42, "order_number": "ORD-42"}))
    fake_api.on(
        "POST",
        "/payments/initiate-stk-push/",
        (200, {"success": False, "response_description": "Invalid phone"}),
    )

    view = client.post(f"{API_PREFIX}/checkout/payment", json={"mpesa_phone": "0722123456"}).json()

    assert view["step"] == "payment"
    assert view["payment_error"] is True
    assert view["error_message"] == "Invalid phone"
    assert view["order_number"] == "ORD-42"
    assert client.get(f"{API_PREFIX}/cart").json()["item_count"] == 2


def test_success_view_drops_the_draft(client, fake_api):
    walk_guest_checkout(client, fake_api)
    fake_api.on("POST", "/orders/checkout/", (201, {"id": 42, "order_number": "ORD-42"}))
    fake_api.on("POST", "/payments/initiate-stk-push/", (200, {"success": True}))

    done = client.post(f"{API_PREFIX}/checkout/payment", json={"mpesa_phone": "0722123456"}).json()

    assert done["step"] == "success"
    assert done["order_number"] == "ORD-42"
    assert done["draft"]["recipient_name"] is None
    assert done["draft"]["contact_email"] is None


def test_checkout_rejects_invalid_contact_and_skipped_steps(client, fake_api):
    resp = client.post(f"{API_PREFIX}/checkout/address", json={"recipient_name": "Jane"})
    assert resp.status_code == 409

    client.post(f"{API_PREFIX}/checkout/choice", json={"choice": "guest"})
    resp = client.post(f"{API_PREFIX}/checkout/contact", json={"email": "", "phone": "0722"})
    assert resp.status_code == 400
    assert set(resp.json()["detail"]["fields"]) == {"email", "phone"}


def test_logged_in_checkout_starts_at_address(client, fake_api, login):
    login()
    assert client.get(f"{API_PREFIX}/checkout").json()["step"] == "address"


def test_login_branch_resumes_after_login(client, fake_api, login):
    view = client.post(f"{API_PREFIX}/checkout/choice", json={"choice": "login"}).json()
    assert view["login_url"] == "/auth/login?redirect=/checkout"

    login()
    assert client.get(f"{API_PREFIX}/checkout").json()["step"] == "address"


# -------- auth, orders, admin --------


def test_session_never_exposes_tokens(client, fake_api, login):
    login()
    body = client.get(f"{API_PREFIX}/auth/session").json()

    assert body["is_authenticated"] is True
    assert body["user"]["email"] == "jane@example.com"
    assert body["access_expires_at"] is not None
    assert "access" not in json.dumps(body).replace("access_expires_at", "")

    assert client.post(f"{API_PREFIX}/auth/logout").json()["is_authenticated"] is False


def test_my_orders_require_login_and_carry_labels(client, fake_api, login):
    assert client.get(f"{API_PREFIX}/orders/me").status_code == 401

    access = login()
    fake_api.on(
        "GET",
        "/orders/my-orders/",
        (200, {"count": 1, "next": None, "results": [
            {"id": 1, "order_number": "ORD-1", "order_status": "shipped",
             "payment_status": "paid", "total_amount": 4500,
             "created_at": "2024-01-15T10:00:00Z", "delivery_address": "Moi Avenue 12",
             "delivery_city": "Nairobi", "delivery_postal_code": "00100"},
        ]}),
    )

    body = client.get(f"{API_PREFIX}/orders/me", params={"order_status": "shipped"}).json()

    order = body["results"][0]
    assert order["order_status_label"] == "Shipped"
    assert order["payment_status_color"] == "#388E3C"
    assert order["total_display"] == "KSh 4,500"
    assert order["placed_on"] == "Monday, 15 January 2024"
    assert order["placed_at"] == "13:00"
    assert order["placed_ago"].endswith(" ago")
    assert order["delivery_display"] == "Moi Avenue 12, Nairobi, 00100, Kenya"
    sent = fake_api.called("GET", "/orders/my-orders/")[0]
    assert sent.headers["Authorization"] == f"Bearer {access}"
    assert sent.url.params["order_status"] == "shipped"


def test_expired_session_on_orders_forces_login(client, fake_api, login):
    login()
    fake_api.on("GET", "/orders/my-orders/", (401, {"detail": "expired"}))
    fake_api.on("POST", "/users/token/refresh/", (401, {"detail": "blacklisted"}))

    resp = client.get(f"{API_PREFIX}/orders/me")

    assert resp.status_code == 401
    assert resp.json()["redirect"] == "/auth/login"
    assert client.get(f"{API_PREFIX}/auth/session").json()["is_authenticated"] is False


def test_admin_requires_owner(client, fake_api, login):
    assert client.get(f"{API_PREFIX}/admin/dashboard").status_code == 401

    login(is_owner=False)
    assert client.get(f"{API_PREFIX}/admin/dashboard").status_code == 403


def test_admin_orders_filter_and_counts(client, fake_api, login):
    login(is_owner=True)
    fake_api.on(
        "GET",
        "/orders/admin/orders/",
        (200, [
            {"id": 1, "order_number": "ORD-1", "order_status": "pending"},
            {"id": 2, "order_number": "ORD-2", "order_status": "shipped"},
            {"id": 3, "order_number": "ORD-3", "order_status": "pending"},
        ]),
    )

    body = client.get(f"{API_PREFIX}/admin/orders", params={"order_status": "pending"}).json()

    assert [o["order_number"] for o in body["orders"]] == ["ORD-1", "ORD-3"]
    assert body["status_counts"]["all"] == 3
    assert body["status_counts"]["shipped"] == 1
    assert body["status_counts"]["cancelled"] == 0


def test_admin_order_status_must_be_known(client, fake_api, login):
    login(is_owner=True)
    resp = client.patch(f"{API_PREFIX}/admin/orders/1", json={"order_status": "lost"})
    assert resp.status_code == 422

    fake_api.on("PATCH", "/orders/admin/orders/1/", (200, {"id": 1, "order_number": "ORD-1", "order_status": "shipped"}))
    resp = client.patch(f"{API_PREFIX}/admin/orders/1", json={"order_status": "shipped"})
    assert resp.json()["order_status"] == "shipped"


def test_admin_products_search_and_dashboard(client, fake_api, login):
    login(is_owner=True)
    fake_api.on(
        "GET",
        "/products/products/",
        (200, {"count": 2, "next": None, "results": [
            product_payload(1, name="Brake Pad Set", sku="BP-001"),
            product_payload(2, name="Oil Filter", sku="OF-220"),
        ]}),
    )
    fake_api.on("GET", "/analytics/dashboard/", (200, {"total_revenue": 125000, "total_orders": 40}))
    fake_api.on("GET", "/analytics/revenue/", (200, {"period": {"today": 5000}, "paid_orders_count": 2}))
    fake_api.on("GET", "/analytics/top-products/", (200, []))
    fake_api.on("GET", "/analytics/low-stock/", (200, [
        {"product_id": 2, "product_name": "Oil Filter", "sku": "OF-220", "available_stock": 2},
    ]))

    products = client.get(f"{API_PREFIX}/admin/products", params={"q": "bp-"}).json()
    assert products["total"] == 1
    assert products["products"][0]["sku"] == "BP-001"

    dashboard = client.get(f"{API_PREFIX}/admin/dashboard").json()
    assert dashboard["summary"]["total_orders"] == 40
    assert dashboard["revenue"]["period"]["today"] == 5000
    assert dashboard["low_stock"][0]["sku"] == "OF-220"


def test_favorites_and_product_detail(client, fake_api):
    fake_api.on("GET", "/products/products/7/", (200, product_payload(7, stock=2, category="Brakes")))

    assert client.put(f"{API_PREFIX}/favorites/7").json()["count"] == 1
    assert client.put(f"{API_PREFIX}/favorites/7").json()["count"] == 1

    detail = client.get(f"{API_PREFIX}/products/7").json()
    assert detail["is_favorited"] is True
    assert detail["stock_badge"] == "critical"

    toggled = client.post(f"{API_PREFIX}/favorites/7/toggle").json()
    assert toggled == {"product_id": 7, "is_favorited": False, "count": 0}


def test_product_list_uses_selected_vehicle(client, fake_api):
    fake_api.on("GET", "/products/products/", (200, {"count": 0, "next": None, "results": []}))
    client.put(f"{API_PREFIX}/vehicle", json={"make_id": 1, "model_id": 10, "year": 2015})

    client.get(f"{API_PREFIX}/products", params={"sort": "popular"})

    params = fake_api.calls[-1].url.params
    assert params["vehicle_model"] == "10"
    assert params["ordering"] == "-sales_count"
    assert params["page"] == "1"


def test_delivery_options(client):
    body = client.get(f"{API_PREFIX}/cart/delivery-options").json()

    fees = {t["tier"]: t["fee"] for t in body["tiers"]}
    assert fees == {"economy": 500.0, "standard": 1500.0, "express": 3000.0}
    assert body["tiers"][2]["fee_display"] == "KSh 3,000"
    assert body["default_tier"] == "standard"
    assert "Nairobi" in body["cities"]
