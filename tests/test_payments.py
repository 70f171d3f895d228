import hashlib
import hmac
import json

import pytest

from conftest import run, product_stock

from storefront.core.config import settings
from storefront.services import payment_service
from storefront.services.payment_service import RazorpayClient, verify_payment_signature


def sign(message: str, secret: str = "rzp_test_secret") -> str:
    return hmac.new(secret.encode(), message.encode(), hashlib.sha256).hexdigest()


def verify_body(address, signature=None, order_id="order_RP1", payment_id="pay_RP1"):
    return {
        "razorpay_order_id": order_id,
        "razorpay_payment_id": payment_id,
        "razorpay_signature": signature or sign(f"{order_id}|{payment_id}"),
        "selectedAddressId": str(address["_id"]),
    }


def test_signature_check():
    good = sign("order_1|pay_1", "s3cret")
    assert verify_payment_signature("order_1", "pay_1", good, secret="s3cret")
    assert not verify_payment_signature("order_1", "pay_2", good, secret="s3cret")
    assert not verify_payment_signature("order_1", "pay_1", "", secret="s3cret")


def test_create_order_calls_gateway_in_paise(client, db, user_headers, monkeypatch):
    calls = {}

    async def fake_create_order(self, amount, currency, receipt, notes=None):
        calls.update(amount=amount, currency=currency, notes=notes)
        return {"id": "order_RP1", "amount": amount, "currency": currency}

    monkeypatch.setattr(RazorpayClient, "create_order", fake_create_order)

    response = client.post("/api/payments/create-order", json={"amount": 499.5}, headers=user_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["orderId"] == "order_RP1"
    assert data["keyId"] == "rzp_test_key"
    assert calls["amount"] == 49950
    assert calls["currency"] == "INR"


def test_create_order_rejects_bad_amount(client, db, user_headers):
    response = client.post("/api/payments/create-order", json={"amount": 0}, headers=user_headers)
    assert response.status_code == 400


def test_create_order_without_keys(client, db, user_headers, monkeypatch):
    monkeypatch.setattr(settings, "RAZORPAY_KEY_SECRET", None)
    response = client.post("/api/payments/create-order", json={"amount": 100}, headers=user_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Razorpay is not configured. Please contact support."


def test_bad_signature_creates_nothing(client, db, make_product, fill_cart, address, user_headers):
    shirt = make_product(stock=3)
    fill_cart((shirt, 1))

    response = client.post(
        "/api/payments/verify-payment",
        json=verify_body(address, signature="0" * 64),
        headers=user_headers,
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Payment verification failed (signature mismatch)"
    assert run(db.orders.count_documents({})) == 0
    assert product_stock(db, shirt["_id"]) == 3


def test_good_signature_creates_paid_order(client, db, make_product, fill_cart, address, user_headers):
    shirt = make_product(price=750, stock=3)
    fill_cart((shirt, 2))

    response = client.post("/api/payments/verify-payment", json=verify_body(address), headers=user_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["order"]["paymentStatus"] == "paid"
    assert data["order"]["paymentMethod"] == "Razorpay"
    assert data["order"]["paymentId"] == "pay_RP1"
    assert data["order"]["totalAmount"] == 1500
    assert product_stock(db, shirt["_id"]) == 1

    log = run(db.payment_logs.find_one({}))
    assert log["status"] == "success"

    # Same Razorpay order verified twice yields one order
    again = client.post("/api/payments/verify-payment", json=verify_body(address), headers=user_headers)
    assert again.json()["orderId"] == data["orderId"]
    assert run(db.orders.count_documents({})) == 1


def _captured_event(order_id="order_RP1", payment_id="pay_RP1"):
    return json.dumps({
        "event": "payment.captured",
        "payload": {"payment": {"entity": {"id": payment_id, "order_id": order_id, "amount": 50000}}},
    }).encode()


def _pending_razorpay_order(db, customer):
    return run(db.orders.insert_one({
        "user": customer["_id"],
        "items": [],
        "paymentMethod": "Razorpay",
        "paymentStatus": "pending",
        "orderStatus": "processing",
        "totalAmount": 500,
        "razorpayOrderId": "order_RP1",
    })).inserted_id


def test_webhook_marks_order_paid_once(client, db, customer, monkeypatch):
    monkeypatch.setattr(settings, "RAZORPAY_WEBHOOK_SECRET", "whsec")
    order_id = _pending_razorpay_order(db, customer)
    body = _captured_event()
    headers = {"X-Razorpay-Signature": sign(body.decode(), "whsec"), "Content-Type": "application/json"}

    first = client.post("/api/payments/webhook", content=body, headers=headers)
    assert first.status_code == 200
    assert first.json() == {"status": "ok"}

    order = run(db.orders.find_one({"_id": order_id}))
    assert order["paymentStatus"] == "paid"
    assert order["paymentId"] == "pay_RP1"

    client.post("/api/payments/webhook", content=body, headers=headers)
    assert run(db.payment_logs.count_documents({"order": order_id})) == 1


def test_webhook_rejects_bad_signature(client, db, customer, monkeypatch):
    monkeypatch.setattr(settings, "RAZORPAY_WEBHOOK_SECRET", "whsec")
    order_id = _pending_razorpay_order(db, customer)

    response = client.post(
        "/api/payments/webhook",
        content=_captured_event(),
        headers={"X-Razorpay-Signature": "bogus"},
    )
    assert response.status_code == 400
    assert run(db.orders.find_one({"_id": order_id}))["paymentStatus"] == "pending"


def test_webhook_ignores_other_events(client, db):
    body = json.dumps({"event": "payment.failed", "payload": {}}).encode()
    assert client.post("/api/payments/webhook", content=body).status_code == 200


@pytest.mark.parametrize("body", [
    b"[]",
    b'"payment.captured"',
    b'{"event": "payment.captured", "payload": []}',
    b'{"event": "payment.captured", "payload": {"payment": {"entity": "pay_1"}}}',
])
def test_webhook_rejects_non_object_payloads(client, db, body, monkeypatch):
    monkeypatch.setattr(settings, "RAZORPAY_WEBHOOK_SECRET", None)
    response = client.post("/api/payments/webhook", content=body)
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid webhook payload"


def test_payment_details_proxy(client, db, user_headers, monkeypatch):
    async def fake_fetch(self, payment_id):
        return {"id": payment_id, "status": "captured"}

    monkeypatch.setattr(RazorpayClient, "fetch_payment", fake_fetch)
    response = client.get("/api/payments/payment/pay_123", headers=user_headers)
    assert response.json()["payment"] == {"id": "pay_123", "status": "captured"}


def test_gateway_errors_map_to_502(client, db, user_headers, monkeypatch):
    from storefront.core.exceptions import PaymentGatewayError

    async def failing(self, method, path, payload=None):
        raise PaymentGatewayError("Unable to reach payment gateway")

    monkeypatch.setattr(RazorpayClient, "_request", failing)
    response = client.get("/api/payments/payment/pay_123", headers=user_headers)
    assert response.status_code == 502
    assert response.json()["code"] == "PAYMENT_GATEWAY_ERROR"


def test_client_uses_configured_key():
    assert payment_service.get_razorpay_client().key_id == "rzp_test_key"
