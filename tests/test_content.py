from conftest import run

from storefront.services import email_service
from utils.constants import DEFAULT_OFFERS


# Reviews

def test_review_updates_product_rating(client, db, make_product, user_headers, other_headers):
    product = make_product()
    url = f"/api/reviews/{product['_id']}"

    first = client.post(url, json={"rating": 5, "comment": "Great fit"}, headers=user_headers)
    assert first.status_code == 201
    client.post(url, json={"rating": 2}, headers=other_headers)

    stored = run(db.products.find_one({"_id": product["_id"]}))
    assert stored["numReviews"] == 2
    assert stored["averageRating"] == 3.5

    duplicate = client.post(url, json={"rating": 4}, headers=user_headers)
    assert duplicate.status_code == 400
    assert duplicate.json()["message"] == "You have already reviewed this product."


def test_review_listing_filters_and_paginates(client, db, make_product, user_headers, other_headers):
    product = make_product()
    url = f"/api/reviews/{product['_id']}"
    client.post(url, json={"rating": 5}, headers=user_headers)
    client.post(url, json={"rating": 1}, headers=other_headers)

    listed = client.get(url, params={"sort": "highest"}).json()
    assert listed["pagination"]["total"] == 2
    assert listed["reviews"][0]["rating"] == 5
    assert listed["reviews"][0]["user"]["name"] == "Asha"

    only_ones = client.get(url, params={"rating": 1}).json()
    assert [r["rating"] for r in only_ones["reviews"]] == [1]

    paged = client.get(url, params={"limit": 1, "page": 2}).json()
    assert len(paged["reviews"]) == 1
    assert paged["pagination"]["pages"] == 2


def test_review_rating_bounds(client, db, make_product, user_headers):
    product = make_product()
    response = client.post(f"/api/reviews/{product['_id']}", json={"rating": 6}, headers=user_headers)
    assert response.status_code == 422


def test_only_author_deletes_review(client, db, make_product, user_headers, other_headers):
    product = make_product()
    review = client.post(
        f"/api/reviews/{product['_id']}", json={"rating": 4}, headers=user_headers
    ).json()["review"]

    assert client.delete(f"/api/reviews/{review['_id']}", headers=other_headers).status_code == 404
    assert client.delete(f"/api/reviews/{review['_id']}", headers=user_headers).status_code == 200

    stored = run(db.products.find_one({"_id": product["_id"]}))
    assert stored["numReviews"] == 0
    assert stored["averageRating"] == 0


# Offers

def test_offer_seed_is_idempotent(client, db, admin_headers):
    first = client.post("/api/offers/seed", headers=admin_headers)
    assert first.json()["message"] == "Offers seeded successfully"
    second = client.post("/api/offers/seed", headers=admin_headers)
    assert second.json()["message"] == "Offers already exist"
    assert run(db.offers.count_documents({})) == len(DEFAULT_OFFERS)


def test_active_offers_are_ordered_and_cache_is_cleared(client, db, admin_headers):
    client.post("/api/offers", json={"title": "B", "description": "b", "order": 2}, headers=admin_headers)
    client.post("/api/offers", json={"title": "A", "description": "a", "order": 1}, headers=admin_headers)
    hidden = client.post(
        "/api/offers",
        json={"title": "Hidden", "description": "h", "active": False},
        headers=admin_headers,
    ).json()

    first = client.get("/api/offers")
    assert [o["title"] for o in first.json()] == ["A", "B"]
    assert client.get("/api/offers").headers["X-Cache"] == "HIT"

    client.put(f"/api/offers/{hidden['_id']}", json={"active": True}, headers=admin_headers)
    after = client.get("/api/offers")
    assert after.headers["X-Cache"] == "MISS"
    assert [o["title"] for o in after.json()] == ["Hidden", "A", "B"]

    assert len(client.get("/api/offers/admin/all", headers=admin_headers).json()) == 3
    assert client.delete(f"/api/offers/{hidden['_id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/offers/{hidden['_id']}").status_code == 404


def test_offer_writes_need_admin(client, db, user_headers):
    response = client.post("/api/offers", json={"title": "X", "description": "x"}, headers=user_headers)
    assert response.status_code == 403


# Testimonials

def test_testimonial_lifecycle(client, db, admin_headers):
    created = client.post(
        "/api/testimonials",
        data={"name": "Meera", "content": "Loved the fabric"},
        headers=admin_headers,
    )
    assert created.status_code == 201
    testimonial = created.json()["testimonial"]
    assert testimonial["role"] == "Verified Customer"
    assert testimonial["rating"] == 5

    updated = client.put(
        f"/api/testimonials/{testimonial['_id']}",
        data={"rating": "4"},
        headers=admin_headers,
    )
    assert updated.json()["testimonial"]["rating"] == 4

    listed = client.get("/api/testimonials").json()["testimonials"]
    assert [t["name"] for t in listed] == ["Meera"]

    assert client.delete(f"/api/testimonials/{testimonial['_id']}", headers=admin_headers).status_code == 200
    assert client.get("/api/testimonials").json()["testimonials"] == []


def test_testimonial_saved_when_image_upload_unavailable(client, db, admin_headers):
    response = client.post(
        "/api/testimonials",
        data={"name": "Meera", "content": "Nice"},
        files={"image": ("avatar.png", b"\x89PNG", "image/png")},
        headers=admin_headers,
    )
    assert response.status_code == 201
    assert response.json()["testimonial"]["image"] == ""


def test_testimonial_rating_range(client, db, admin_headers):
    response = client.post(
        "/api/testimonials",
        data={"name": "Meera", "content": "Nice", "rating": "9"},
        headers=admin_headers,
    )
    assert response.status_code == 400


# Shipping

def test_shipping_defaults(client, db):
    data = client.get("/api/shipping").json()["settings"]
    assert data["shippingCost"] == 0
    assert data["freeShippingThreshold"] is None
    assert data["codEnabled"] is True


def test_shipping_threshold_can_be_cleared(client, db, admin_headers):
    client.post("/api/shipping", json={"shippingCost": 49, "freeShippingThreshold": 999}, headers=admin_headers)

    client.post("/api/shipping", json={"description": "Flat rate"}, headers=admin_headers)
    kept = client.get("/api/shipping").json()["settings"]
    assert kept["freeShippingThreshold"] == 999
    assert kept["description"] == "Flat rate"

    client.post("/api/shipping", json={"freeShippingThreshold": None}, headers=admin_headers)
    cleared = client.get("/api/shipping").json()["settings"]
    assert cleared["freeShippingThreshold"] is None
    assert cleared["shippingCost"] == 49


def test_shipping_rejects_negative_cost(client, db, admin_headers, user_headers):
    response = client.post("/api/shipping", json={"shippingCost": -1}, headers=admin_headers)
    assert response.status_code == 400
    assert client.post("/api/shipping", json={"shippingCost": 1}, headers=user_headers).status_code == 403


# Analytics

def test_track_visit_and_stats(client, db, user_headers, admin_headers, customer):
    client.post(
        "/api/analytics/track",
        json={"visitorId": "v1", "page": "/", "deviceType": "mobile"},
        headers={"X-Forwarded-For": "203.0.113.9, 10.0.0.1"},
    )
    client.post(
        "/api/analytics/track",
        json={"visitorId": "v1", "page": "/products", "deviceType": "mobile"},
    )
    response = client.post(
        "/api/analytics/track",
        json={"visitorId": "v2", "page": "/cart", "deviceType": "desktop"},
        headers=user_headers,
    )
    assert response.status_code == 201

    first = run(db.analytics.find_one({"page": "/"}))
    assert first["ip"] == "203.0.113.9"
    assert first["user"] is None
    assert run(db.analytics.find_one({"page": "/cart"}))["user"] == customer["_id"]

    stats = client.get("/api/analytics/stats", headers=admin_headers).json()
    assert stats["totalVisits24h"] == 3
    assert stats["uniqueVisitors24h"] == 2
    assert stats["deviceSplit"] == {"mobile": 2, "desktop": 1}

    logs = client.get("/api/analytics/logs?pageNumber=1", headers=admin_headers).json()
    assert logs["totalLogs"] == 3
    assert logs["pages"] == 1


def test_analytics_reports_need_admin(client, db, user_headers):
    assert client.get("/api/analytics/stats", headers=user_headers).status_code == 403


# Contact

def test_contact_requires_all_fields(client, db):
    response = client.post("/api/contact/send-email", json={"name": "A", "email": "a@example.com"})
    assert response.status_code == 400
    assert response.json()["message"] == "All fields are required"


def test_contact_without_email_configured(client, db):
    response = client.post(
        "/api/contact/send-email",
        json={"name": "A", "email": "a@example.com", "subject": "Hi", "message": "Hello"},
    )
    assert response.status_code == 200
    assert response.json()["warning"] == "Email service not configured"


def test_contact_relays_to_support_and_sender(client, db, monkeypatch):
    from storefront.core.config import settings

    sent = []

    async def fake_send(to, subject, html, reply_to=None, raise_on_error=False):
        sent.append((to, reply_to))
        return {"id": "email_1"}

    monkeypatch.setattr(settings, "RESEND_API_KEY", "re_test")
    monkeypatch.setattr(email_service, "send_email", fake_send)

    response = client.post(
        "/api/contact/send-email",
        json={"name": "A", "email": "a@example.com", "subject": "Hi", "message": "Hello <b>"},
    )
    assert response.status_code == 200
    assert sent == [(settings.SUPPORT_EMAIL, "a@example.com"), ("a@example.com", None)]


def test_debug_email_reports_configuration(client, db):
    data = client.get("/api/debug/email?email=dev@example.com").json()
    assert data["success"] is False
    assert data["envCheck"]["resendConfigured"] is False
