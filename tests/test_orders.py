from datetime import timedelta

from conftest import run, product_stock

from utils.time_utils import utc_now


def place(client, headers, address, **extra):
    body = {"selectedAddressId": str(address["_id"]), "paymentMethod": "COD"}
    body.update(extra)
    return client.post("/api/orders", json=body, headers=headers)


def insert_coupon(db, code="SAVE10", **fields):
    now = utc_now()
    coupon = {
        "code": code,
        "discountType": "PERCENTAGE",
        "discountValue": 10,
        "minPurchaseAmount": 0,
        "expirationDate": now + timedelta(days=7),
        "isActive": True,
        "usageLimit": None,
        "usedCount": 0,
        "createdAt": now,
        "updatedAt": now,
    }
    coupon.update(fields)
    coupon["_id"] = run(db.coupons.insert_one(coupon)).inserted_id
    return coupon


def test_empty_cart_is_rejected(client, address, user_headers):
    response = place(client, user_headers, address)
    assert response.status_code == 400
    assert response.json()["message"] == "Cart is empty"


def test_unknown_address_is_rejected(client, db, make_product, fill_cart, user_headers, other_customer):
    fill_cart((make_product(), 1))
    now = utc_now()
    foreign = run(db.addresses.insert_one({"user": other_customer["_id"], "fullName": "Ravi", "createdAt": now}))
    response = client.post(
        "/api/orders",
        json={"selectedAddressId": str(foreign.inserted_id)},
        headers=user_headers,
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid address"


def test_order_decrements_stock_and_clears_cart(client, db, make_product, fill_cart, address, user_headers):
    shirt = make_product(price=500, stock=10)
    jacket = make_product("Jacket", price=1500, stock=2)
    fill_cart((shirt, 3), (jacket, 2))

    response = place(client, user_headers, address)
    assert response.status_code == 201
    order = response.json()["order"]
    assert order["subtotal"] == 4500
    assert order["totalAmount"] == 4500
    assert order["paymentStatus"] == "pending"
    assert order["orderStatus"] == "processing"
    assert order["shippingAddress"]["city"] == "Bengaluru"

    assert product_stock(db, shirt["_id"]) == 7
    assert product_stock(db, jacket["_id"]) == 0
    assert run(db.carts.find_one({}))["items"] == []

    log = run(db.payment_logs.find_one({}))
    assert log["status"] == "pending"
    assert log["amount"] == 4500


def test_insufficient_stock_rolls_back_earlier_lines(client, db, make_product, fill_cart, address, user_headers):
    shirt = make_product(stock=10)
    jacket = make_product("Jacket", stock=1)
    fill_cart((shirt, 2), (jacket, 5))

    response = place(client, user_headers, address)
    assert response.status_code == 400
    assert response.json()["message"] == "Jacket out of stock"

    assert product_stock(db, shirt["_id"]) == 10
    assert product_stock(db, jacket["_id"]) == 1
    assert run(db.orders.count_documents({})) == 0
    assert len(run(db.carts.find_one({}))["items"]) == 2


def test_shipping_cost_and_free_threshold(client, db, make_product, fill_cart, address, user_headers, admin_headers):
    client.post(
        "/api/shipping",
        json={"shippingCost": 99, "freeShippingThreshold": 5000},
        headers=admin_headers,
    )
    fill_cart((make_product(price=1000), 1))

    order = place(client, user_headers, address).json()["order"]
    assert order["shippingCost"] == 99
    assert order["totalAmount"] == 1099


def test_cod_disabled(client, db, make_product, fill_cart, address, user_headers, admin_headers):
    client.post("/api/shipping", json={"codEnabled": False}, headers=admin_headers)
    fill_cart((make_product(), 1))

    response = place(client, user_headers, address)
    assert response.status_code == 400
    assert response.json()["message"] == "Cash on Delivery is currently disabled"


def test_coupon_applied_at_placement(client, db, make_product, fill_cart, address, user_headers):
    coupon = insert_coupon(db)
    fill_cart((make_product(price=1000), 2))

    order = place(client, user_headers, address, couponCode="save10").json()["order"]
    assert order["discountAmount"] == 200
    assert order["totalAmount"] == 1800
    assert order["couponCode"] == "SAVE10"
    assert run(db.coupons.find_one({"_id": coupon["_id"]}))["usedCount"] == 1


def test_expired_coupon_blocks_order_without_touching_stock(client, db, make_product, fill_cart, address, user_headers):
    insert_coupon(db, expirationDate=utc_now() - timedelta(days=1))
    shirt = make_product(stock=5)
    fill_cart((shirt, 1))

    response = place(client, user_headers, address, couponCode="SAVE10")
    assert response.status_code == 400
    assert response.json()["message"] == "This coupon has expired"
    assert product_stock(db, shirt["_id"]) == 5


def test_redemption_never_passes_usage_limit(db):
    from storefront.services import coupon_service

    coupon = insert_coupon(db, usageLimit=1)
    # Both checkouts read the coupon before either redeemed it
    assert run(coupon_service.redeem_coupon(coupon)) is True
    assert run(coupon_service.redeem_coupon(coupon)) is False
    assert run(db.coupons.find_one({"_id": coupon["_id"]}))["usedCount"] == 1


def test_out_of_stock_order_gives_coupon_use_back(client, db, make_product, fill_cart, address, user_headers):
    coupon = insert_coupon(db, usageLimit=5)
    fill_cart((make_product(stock=1), 2))

    response = place(client, user_headers, address, couponCode="SAVE10")
    assert response.status_code == 400
    assert response.json()["message"] == "Linen Shirt out of stock"
    assert run(db.coupons.find_one({"_id": coupon["_id"]}))["usedCount"] == 0


def test_idempotency_key_replays_same_order(client, db, make_product, fill_cart, address, user_headers):
    shirt = make_product(stock=5)
    fill_cart((shirt, 1))
    headers = {**user_headers, "Idempotency-Key": "checkout-1"}

    first = place(client, headers, address)
    second = place(client, headers, address)

    assert first.status_code == 201
    assert second.status_code == 200
    assert first.json()["order"]["_id"] == second.json()["order"]["_id"]
    assert run(db.orders.count_documents({})) == 1
    assert product_stock(db, shirt["_id"]) == 4


def test_order_access_rules(client, db, make_product, fill_cart, address, user_headers, other_headers, admin_headers):
    fill_cart((make_product(), 1))
    order_id = place(client, user_headers, address).json()["order"]["_id"]

    own = client.get(f"/api/orders/{order_id}", headers=user_headers)
    assert own.status_code == 200
    assert own.json()["order"]["items"][0]["product"]["title"] == "Linen Shirt"

    assert client.get(f"/api/orders/{order_id}", headers=other_headers).status_code == 403
    assert client.get(f"/api/orders/{order_id}", headers=admin_headers).status_code == 200
    assert client.get("/api/orders/not-an-id", headers=user_headers).status_code == 400
    assert client.get("/api/orders/64b7f0c2a1b2c3d4e5f60718", headers=user_headers).status_code == 404

    mine = client.get("/api/orders/my-orders", headers=user_headers).json()["orders"]
    assert [o["_id"] for o in mine] == [order_id]
    assert client.get("/api/orders/my-orders", headers=other_headers).json()["orders"] == []


def test_admin_only_order_routes(client, db, user_headers, admin_headers):
    assert client.get("/api/orders", headers=user_headers).status_code == 403
    assert client.get("/api/orders/logs", headers=user_headers).status_code == 403
    assert client.get("/api/orders", headers=admin_headers).status_code == 200


def test_cancel_restores_stock(client, db, make_product, fill_cart, address, user_headers, admin_headers):
    shirt = make_product(stock=5)
    fill_cart((shirt, 2))
    order_id = place(client, user_headers, address).json()["order"]["_id"]
    assert product_stock(db, shirt["_id"]) == 3

    response = client.put(f"/api/orders/{order_id}", json={"orderStatus": "cancelled"}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["order"]["orderStatus"] == "cancelled"
    assert product_stock(db, shirt["_id"]) == 5

    # Second cancel is a no-op for stock
    client.put(f"/api/orders/{order_id}", json={"orderStatus": "cancelled"}, headers=admin_headers)
    assert product_stock(db, shirt["_id"]) == 5


def test_reopened_order_cancelled_again_restores_stock_once(client, db, make_product, fill_cart, address, user_headers, admin_headers):
    shirt = make_product(stock=10)
    fill_cart((shirt, 3))
    order_id = place(client, user_headers, address).json()["order"]["_id"]
    assert product_stock(db, shirt["_id"]) == 7

    for status in ("cancelled", "processing", "cancelled"):
        response = client.put(f"/api/orders/{order_id}", json={"orderStatus": status}, headers=admin_headers)
        assert response.status_code == 200

    assert product_stock(db, shirt["_id"]) == 10
    assert response.json()["order"]["stockRestored"] is True


def test_delivered_marks_payment_logs_success(client, db, make_product, fill_cart, address, user_headers, admin_headers):
    fill_cart((make_product(), 1))
    order_id = place(client, user_headers, address).json()["order"]["_id"]

    client.put(f"/api/orders/{order_id}", json={"orderStatus": "delivered"}, headers=admin_headers)
    assert run(db.payment_logs.find_one({}))["status"] == "success"


def test_invalid_status_is_rejected(client, db, make_product, fill_cart, address, user_headers, admin_headers):
    fill_cart((make_product(), 1))
    order_id = place(client, user_headers, address).json()["order"]["_id"]

    response = client.put(f"/api/orders/{order_id}", json={"orderStatus": "lost"}, headers=admin_headers)
    assert response.status_code == 422
    body = response.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert "orderStatus must be one of" in body["details"][0]["msg"]
    assert "ctx" not in body["details"][0]


def test_status_email_sent_on_change(client, db, make_product, fill_cart, address, user_headers, admin_headers, monkeypatch):
    from storefront.services import email_service

    sent = []

    async def fake_send(to, subject, html, reply_to=None, raise_on_error=False):
        sent.append((to, subject))

    monkeypatch.setattr(email_service, "send_email", fake_send)

    fill_cart((make_product(), 1))
    order_id = place(client, user_headers, address).json()["order"]["_id"]
    client.put(f"/api/orders/{order_id}", json={"orderStatus": "shipped"}, headers=admin_headers)

    assert sent[0] == ("asha@example.com", f"Order Confirmation - Order #{order_id}")
    assert sent[1] == ("asha@example.com", f"Order Status Update - Order #{order_id}")


def test_payment_logs_admin(client, db, make_product, fill_cart, address, user_headers, admin_headers):
    fill_cart((make_product(), 1))
    place(client, user_headers, address)

    logs = client.get("/api/orders/logs", headers=admin_headers).json()["logs"]
    assert len(logs) == 1
    assert logs[0]["user"]["email"] == "asha@example.com"

    response = client.post(
        "/api/orders/logs/update-status",
        json={"logId": logs[0]["_id"], "status": "refunded"},
        headers=admin_headers,
    )
    assert response.json()["log"]["status"] == "refunded"

    bad = client.post(
        "/api/orders/logs/update-status",
        json={"logId": logs[0]["_id"], "status": "lost"},
        headers=admin_headers,
    )
    assert bad.status_code == 400
