from datetime import datetime, timedelta, timezone

from bson import ObjectId
from conftest import run

from storefront.services import email_templates, stock_service
from storefront.services.cache_service import ResponseCache
from utils.serialization import serialize_doc, to_object_id
from utils.time_utils import is_expired, to_naive_utc
from utils.validation_utils import parse_json_list, slugify, validate_password_strength


def test_slugify():
    assert slugify("Men's Shoes & Bags") == "mens-shoes-bags"
    assert slugify("  Summer  Wear ") == "summer-wear"
    assert slugify("") == ""


def test_password_rules():
    assert validate_password_strength("secret123") == []
    assert validate_password_strength("short1") == ["at least 8 characters"]
    assert validate_password_strength("12345678") == ["at least one letter"]


def test_parse_json_list():
    assert parse_json_list('["a", "b"]') == ["a", "b"]
    assert parse_json_list("not json") is None
    assert parse_json_list('{"a": 1}') is None


def test_to_object_id_and_serialize():
    oid = ObjectId()
    assert to_object_id(str(oid)) == oid
    assert to_object_id("nope") is None
    assert to_object_id(None) is None
    assert serialize_doc({"_id": oid, "items": [{"product": oid}]}) == {
        "_id": str(oid),
        "items": [{"product": str(oid)}],
    }


def test_expiry_handles_aware_datetimes():
    now = datetime(2025, 1, 1, 12, 0)
    aware = datetime(2025, 1, 1, 13, 0, tzinfo=timezone(timedelta(hours=2)))
    assert to_naive_utc(aware) == datetime(2025, 1, 1, 11, 0)
    assert is_expired(aware, now)
    assert not is_expired(now + timedelta(minutes=1), now)
    assert is_expired(None, now)


def test_cache_clear_by_prefix_and_stats():
    cache = ResponseCache()
    cache.set("/api/products", {"a": 1}, 60)
    cache.set("/api/products/1", {"b": 2}, 60)
    cache.set("/api/categories", {"c": 3}, -1)

    assert cache.stats() == {"totalEntries": 3, "validEntries": 2, "expiredEntries": 1}
    assert cache.clear("/api/products") == 2
    assert cache.get("/api/categories") is None


def test_cache_write_sweeps_expired_keys():
    cache = ResponseCache()
    for page in range(1, 4):
        cache.set(f"/api/products?page={page}", {"page": page}, -1)

    cache.set("/api/products?page=4", {"page": 4}, 60)
    assert cache.stats() == {"totalEntries": 1, "validEntries": 1, "expiredEntries": 0}


def test_cache_evicts_oldest_beyond_capacity():
    cache = ResponseCache(max_entries=2)
    cache.set("/api/products?page=1", 1, 60)
    cache.set("/api/products?page=2", 2, 60)
    cache.set("/api/products?page=1", 1, 60)
    cache.set("/api/products?page=3", 3, 60)

    assert cache.stats()["totalEntries"] == 2
    assert cache.get("/api/products?page=2") is None
    assert cache.get("/api/products?page=1") == 1
    assert cache.get("/api/products?page=3") == 3


def test_validate_order_items_messages(db, make_product):
    shirt = make_product(stock=1)
    errors = run(stock_service.validate_order_items([{"product": shirt["_id"], "quantity": 3}]))
    assert errors == ["Linen Shirt: Only 1 available (requested 3)"]


def test_decrement_never_goes_negative(db, make_product):
    shirt = make_product(stock=2)
    assert run(stock_service.decrement_stock(shirt["_id"], 3)) is None
    assert run(stock_service.decrement_stock(shirt["_id"], 2))["stock"] == 0
    assert not run(stock_service.is_in_stock(shirt["_id"]))


def test_email_templates_escape_user_input():
    html = email_templates.contact_support_html("<script>", "a@example.com", "Hi", "1 < 2")
    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_models_declare_config_with_model_config():
    from storefront.core.config import Settings
    from storefront.schemas.auth import RegisterRequest
    from storefront.schemas.shopping import AddressCreateRequest

    assert Settings.model_config["env_file"] == ".env"
    assert Settings.model_config["case_sensitive"] is True
    assert "example" in RegisterRequest.model_config["json_schema_extra"]

    # Camel-case aliasing inherited from CamelModel survives the override
    assert AddressCreateRequest.model_config["populate_by_name"] is True
    address = AddressCreateRequest(
        fullName="Asha Rao", phone="1", street="s", city="c", state="st", postalCode="560001"
    )
    assert address.full_name == "Asha Rao"
