import asyncio
import os

# Settings are read at import time
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RAZORPAY_KEY_ID", "rzp_test_key")
os.environ.setdefault("RAZORPAY_KEY_SECRET", "rzp_test_secret")
os.environ["RESEND_API_KEY"] = ""
os.environ["CLOUDINARY_CLOUD_NAME"] = ""

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from storefront.core.security import create_access_token, hash_password
from storefront.db import mongo
from storefront.main import app
from storefront.services.cache_service import api_cache
from utils.time_utils import utc_now


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def db(monkeypatch):
    database = AsyncMongoMockClient()["storefront_test"]
    monkeypatch.setattr(mongo, "_database", database)
    api_cache.clear()
    yield database
    api_cache.clear()


@pytest.fixture
def client(db):
    # No context manager: the lifespan (real Mongo connection) is skipped
    return TestClient(app)


def _insert_user(db, email, role="user", password="secret123"):
    now = utc_now()
    user = {
        "name": email.split("@")[0].title(),
        "email": email,
        "password": hash_password(password),
        "role": role,
        "createdAt": now,
        "updatedAt": now,
    }
    user["_id"] = run(db.users.insert_one(user)).inserted_id
    return user


def _auth(user):
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def customer(db):
    return _insert_user(db, "asha@example.com")


@pytest.fixture
def other_customer(db):
    return _insert_user(db, "ravi@example.com")


@pytest.fixture
def admin(db):
    return _insert_user(db, "admin@example.com", role="admin")


@pytest.fixture
def user_headers(customer):
    return _auth(customer)


@pytest.fixture
def other_headers(other_customer):
    return _auth(other_customer)


@pytest.fixture
def admin_headers(admin):
    return _auth(admin)


@pytest.fixture
def category(db):
    now = utc_now()
    doc = {"name": "Shirts", "slug": "shirts", "image": None, "createdAt": now, "updatedAt": now}
    doc["_id"] = run(db.categories.insert_one(doc)).inserted_id
    return doc


@pytest.fixture
def make_product(db, category):
    def _make(title="Linen Shirt", price=500, stock=10, **extra):
        now = utc_now()
        doc = {
            "title": title,
            "description": f"{title} description",
            "category": category["_id"],
            "brand": extra.pop("brand", "Farbetter"),
            "price": price,
            "mrp": price,
            "stock": stock,
            "images": [],
            "averageRating": 0,
            "numReviews": 0,
            "createdAt": now,
            "updatedAt": now,
        }
        doc.update(extra)
        doc["_id"] = run(db.products.insert_one(doc)).inserted_id
        return doc

    return _make


@pytest.fixture
def address(db, customer):
    now = utc_now()
    doc = {
        "user": customer["_id"],
        "fullName": "Asha Rao",
        "phone": "9876543210",
        "street": "12 MG Road",
        "city": "Bengaluru",
        "state": "Karnataka",
        "country": "India",
        "postalCode": "560001",
        "isDefault": True,
        "createdAt": now,
        "updatedAt": now,
    }
    doc["_id"] = run(db.addresses.insert_one(doc)).inserted_id
    return doc


@pytest.fixture
def fill_cart(db, customer):
    def _fill(*lines):
        now = utc_now()
        run(db.carts.insert_one({
            "user": customer["_id"],
            "items": [{"product": product["_id"], "quantity": qty} for product, qty in lines],
            "createdAt": now,
            "updatedAt": now,
        }))

    return _fill


def product_stock(db, product_id: ObjectId) -> int:
    return run(db.products.find_one({"_id": product_id}))["stock"]
