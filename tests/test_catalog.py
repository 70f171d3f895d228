from conftest import run, product_stock


def test_product_list_filters_and_populates_category(client, make_product, category):
    make_product("Linen Shirt", price=500)
    make_product("Denim Jacket", price=2500, brand="Indigo")
    make_product("Linen Trousers", price=1200)

    data = client.get("/api/products?keyword=linen&maxPrice=1000").json()
    assert data["total"] == 1
    product = data["products"][0]
    assert product["title"] == "Linen Shirt"
    assert product["category"]["slug"] == "shirts"

    by_slug = client.get("/api/products?category=shirts&sort=price_desc").json()
    assert by_slug["total"] == 3

    by_brand = client.get("/api/products?brand=Indigo").json()
    assert [p["title"] for p in by_brand["products"]] == ["Denim Jacket"]


def test_keyword_is_not_treated_as_regex(client, make_product):
    make_product("Shirt (Blue)")
    data = client.get("/api/products", params={"keyword": "(Blue"}).json()
    assert data["total"] == 1


def test_product_list_is_cached_for_guests(client, make_product):
    make_product()

    first = client.get("/api/products")
    assert first.headers["X-Cache"] == "MISS"
    assert "max-age=300" in first.headers["Cache-Control"]

    second = client.get("/api/products")
    assert second.headers["X-Cache"] == "HIT"
    assert second.json() == first.json()


def test_authenticated_requests_bypass_cache(client, make_product, user_headers):
    make_product()
    client.get("/api/products")
    response = client.get("/api/products", headers=user_headers)
    assert "X-Cache" not in response.headers


def test_product_detail_and_missing(client, make_product):
    product = make_product()
    ok = client.get(f"/api/products/{product['_id']}")
    assert ok.status_code == 200
    assert ok.json()["product"]["title"] == "Linen Shirt"

    missing = client.get("/api/products/64b7f0c2a1b2c3d4e5f60718")
    assert missing.status_code == 404


def test_admin_creates_product_and_clears_cache(client, category, admin_headers):
    client.get("/api/products")

    response = client.post(
        "/api/products/create",
        data={
            "title": "Oxford Shirt",
            "category": str(category["_id"]),
            "price": "899",
            "stock": "5",
            "bulletPoints": '["Cotton", "Slim fit"]',
        },
        headers=admin_headers,
    )
    assert response.status_code == 201
    product = response.json()["product"]
    assert product["price"] == 899
    assert product["bulletPoints"] == ["Cotton", "Slim fit"]

    listing = client.get("/api/products")
    assert listing.headers["X-Cache"] == "MISS"
    assert listing.json()["total"] == 1


def test_create_product_requires_title_category_price(client, admin_headers, db):
    response = client.post("/api/products/create", data={"title": "No price"}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Title, category and price are required"


def test_create_product_rejects_out_of_range_discount(client, category, admin_headers):
    response = client.post(
        "/api/products/create",
        data={"title": "X", "category": str(category["_id"]), "price": "10", "discount": "120"},
        headers=admin_headers,
    )
    assert response.status_code == 400


def test_customer_cannot_create_product(client, category, user_headers):
    response = client.post(
        "/api/products/create",
        data={"title": "X", "category": str(category["_id"]), "price": "10"},
        headers=user_headers,
    )
    assert response.status_code == 403


def test_update_product_keeps_selected_images(client, make_product, admin_headers):
    product = make_product(images=["a.jpg", "b.jpg"], image="a.jpg")
    response = client.put(
        f"/api/products/update/{product['_id']}",
        data={"price": "650", "existingImages": '["b.jpg"]'},
        headers=admin_headers,
    )
    assert response.status_code == 200
    updated = response.json()["product"]
    assert updated["price"] == 650
    assert updated["images"] == ["b.jpg"]
    assert updated["image"] == "b.jpg"


def test_stock_update_and_reports(client, db, make_product, admin_headers):
    low = make_product("Low", stock=3)
    make_product("Plenty", stock=50)
    gone = make_product("Gone", stock=2)

    response = client.put(f"/api/products/stock/{gone['_id']}", json={"stock": -4}, headers=admin_headers)
    assert response.status_code == 200
    assert product_stock(db, gone["_id"]) == 0

    low_report = client.get("/api/products/admin/low-stock", headers=admin_headers).json()
    assert [p["_id"] for p in low_report["products"]] == [str(low["_id"])]

    out_report = client.get("/api/products/admin/out-of-stock", headers=admin_headers).json()
    assert out_report["count"] == 1

    missing = client.put(f"/api/products/stock/{gone['_id']}", json={}, headers=admin_headers)
    assert missing.status_code == 400


def test_delete_product(client, db, make_product, admin_headers):
    product = make_product()
    assert client.delete(f"/api/products/delete/{product['_id']}", headers=admin_headers).status_code == 200
    assert run(db.products.count_documents({})) == 0
    assert client.delete(f"/api/products/delete/{product['_id']}", headers=admin_headers).status_code == 404


def test_category_crud(client, db, admin_headers):
    created = client.post("/api/categories/create", json={"name": "Summer Wear"}, headers=admin_headers)
    assert created.status_code == 201
    category = created.json()["category"]
    assert category["slug"] == "summer-wear"

    duplicate = client.post("/api/categories/create", json={"name": "Summer Wear"}, headers=admin_headers)
    assert duplicate.status_code == 400
    assert duplicate.json()["message"] == "Category already exists"

    assert client.get("/api/categories/summer-wear").status_code == 200

    renamed = client.put(
        f"/api/categories/{category['_id']}",
        json={"name": "Monsoon Wear"},
        headers=admin_headers,
    )
    assert renamed.json()["category"]["slug"] == "monsoon-wear"
    assert client.get("/api/categories/summer-wear").status_code == 404

    assert client.delete(f"/api/categories/{category['_id']}", headers=admin_headers).status_code == 200
    assert client.get("/api/categories").json()["categories"] == []


def test_category_name_required(client, admin_headers, db):
    response = client.post("/api/categories/create", json={}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Category name is required"
