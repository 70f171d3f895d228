from datetime import datetime, timedelta

import pytest

from storefront.core.exceptions import BadRequestError
from storefront.services.coupon_service import evaluate_coupon
from utils.time_utils import utc_now

NOW = datetime(2025, 6, 1, 12, 0, 0)


def coupon(**fields):
    base = {
        "code": "SAVE10",
        "discountType": "PERCENTAGE",
        "discountValue": 10,
        "minPurchaseAmount": 0,
        "expirationDate": NOW + timedelta(days=1),
        "isActive": True,
        "usageLimit": None,
        "usedCount": 0,
    }
    base.update(fields)
    return base


def test_percentage_discount():
    assert evaluate_coupon(coupon(), 1500, now=NOW) == 150


def test_fixed_discount_capped_at_cart_total():
    assert evaluate_coupon(coupon(discountType="FIXED", discountValue=500), 300, now=NOW) == 300


@pytest.mark.parametrize("fields, cart_total, message", [
    ({"expirationDate": NOW - timedelta(seconds=1)}, 1000, "This coupon has expired"),
    ({"isActive": False}, 1000, "This coupon is inactive"),
    ({"usageLimit": 5, "usedCount": 5}, 1000, "This coupon usage limit has been reached"),
    ({"minPurchaseAmount": 2000}, 1000, "Minimum purchase amount of ₹2000 required"),
])
def test_rejections(fields, cart_total, message):
    with pytest.raises(BadRequestError) as exc_info:
        evaluate_coupon(coupon(**fields), cart_total, now=NOW)
    assert exc_info.value.message == message


def test_admin_creates_and_customer_validates(client, db, admin_headers):
    expires = (utc_now() + timedelta(days=3)).isoformat()
    created = client.post(
        "/api/coupons",
        json={"code": "welcome", "discountType": "FIXED", "discountValue": 100, "expirationDate": expires},
        headers=admin_headers,
    )
    assert created.status_code == 201
    assert created.json()["coupon"]["code"] == "WELCOME"

    duplicate = client.post(
        "/api/coupons",
        json={"code": "WELCOME", "discountType": "FIXED", "discountValue": 50, "expirationDate": expires},
        headers=admin_headers,
    )
    assert duplicate.status_code == 400

    valid = client.post("/api/coupons/validate", json={"code": "Welcome", "cartTotal": 800})
    assert valid.status_code == 200
    assert valid.json()["discountAmount"] == 100
    assert valid.json()["couponCode"] == "WELCOME"

    listed = client.get("/api/coupons", headers=admin_headers).json()
    assert listed["count"] == 1

    coupon_id = listed["coupons"][0]["_id"]
    assert client.delete(f"/api/coupons/{coupon_id}", headers=admin_headers).status_code == 200
    assert client.delete(f"/api/coupons/{coupon_id}", headers=admin_headers).status_code == 404


def test_validate_expired_coupon_over_http(client, db, admin_headers):
    expired = (utc_now() - timedelta(days=1)).isoformat()
    client.post(
        "/api/coupons",
        json={"code": "OLD", "discountType": "PERCENTAGE", "discountValue": 20, "expirationDate": expired},
        headers=admin_headers,
    )
    response = client.post("/api/coupons/validate", json={"code": "OLD", "cartTotal": 1000})
    assert response.status_code == 400
    assert response.json()["message"] == "This coupon has expired"


def test_validate_unknown_and_missing_code(client, db):
    assert client.post("/api/coupons/validate", json={"code": "NOPE", "cartTotal": 10}).status_code == 404
    assert client.post("/api/coupons/validate", json={"cartTotal": 10}).status_code == 400


def test_coupon_admin_routes_need_admin(client, db, user_headers):
    assert client.get("/api/coupons", headers=user_headers).status_code == 403
    assert client.get("/api/coupons").status_code == 401


def test_create_coupon_requires_fields(client, db, admin_headers):
    response = client.post("/api/coupons", json={"code": "X"}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Please provide all required fields"
