"""
End-to-end API tests against a fresh application per test.
"""
import pytest
from fastapi.testclient import TestClient

from cpq_backend.api.main import create_app


@pytest.fixture
def client(settings, catalog):
    return TestClient(create_app(settings, catalog))


def _quote(client, **body):
    payload = {"customer_id": "cust-1", "sku_id": "sku-3", "quantity": 1}
    payload.update(body)
    return client.post("/api/v1/demo/quote", json=payload)


def test_root_metadata(client):
    resp = client.get("/")
    assert resp.status_code == 200
    data = resp.json()
    assert data["service"] == "CPQ Backend API"
    assert data["version"] == "1.0.0"
    assert data["status"] == "running"
    assert "ai_addons" in data["features"]
    assert data["endpoints"]["products"] == "/api/v1/demo/products"


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["timestamp"].endswith("+00:00")


def test_products(client):
    data = client.get("/api/v1/demo/products").json()
    assert data["success"] is True
    assert len(data["products"]) == 7
    assert data["customers"][1] == {
        "id": "cust-2", "name": "Jane Smith", "email": "jane@startup.io",
        "company": "Startup Inc", "tier": "startup",
    }
    by_id = {p["id"]: p for p in data["products"]}
    assert "tiers" not in by_id["sku-ai-3"]
    assert by_id["sku-4"]["tiers"][0]["max_quantity"] == -1


def test_pricing_scale_three_years(client):
    resp = client.get("/api/v1/demo/pricing", params={
        "sku_id": "sku-3", "quantity": 1, "term_months": 36,
    })
    assert resp.status_code == 200
    data = resp.json()
    assert data["sku_id"] == "sku-3"
    assert data["product_name"] == "Enterprise Scale"
    assert data["base_price"] == 30.0
    assert data["subtotal"] == 1080.0
    assert data["discounts"] == [{
        "type": "multi_year",
        "description": "Multi-year discount: 25% off for 3+ year terms",
        "percentage": 25.0,
        "amount": 270.0,
    }]
    assert data["total_discount"] == 270.0
    assert data["final_price"] == 810.0
    assert data["annual_price"] == 270.0
    assert data["monthly_price"] == 22.5


def test_pricing_defaults_term(client):
    data = client.get("/api/v1/demo/pricing?sku_id=sku-1&quantity=5").json()
    assert data["term_months"] == 12
    assert data["subtotal"] == 3000.0


def test_pricing_with_startup_customer(client):
    data = client.get("/api/v1/demo/pricing?sku_id=sku-1&quantity=5&customer_id=cust-2").json()
    assert [d["type"] for d in data["discounts"]] == ["customer_tier"]


def test_pricing_unknown_sku(client):
    resp = client.get("/api/v1/demo/pricing?sku_id=sku-999&quantity=1")
    assert resp.status_code == 404
    assert resp.text == "Product not found"
    assert resp.headers["content-type"].startswith("text/plain")


@pytest.mark.parametrize("query,message", [
    ("quantity=1", "sku_id and quantity are required"),
    ("sku_id=sku-1", "sku_id and quantity are required"),
    ("sku_id=sku-1&quantity=abc", "Invalid quantity"),
    ("sku_id=sku-1&quantity=1.5", "Invalid quantity"),
    ("sku_id=sku-1&quantity=0", "Invalid quantity"),
    ("sku_id=sku-1&quantity=1&term_months=x", "Invalid term_months"),
    ("sku_id=sku-1&quantity=1&term_months=0", "Invalid term_months"),
    ("sku_id=sku-1&quantity=1&term_months=-12", "Invalid term_months"),
    # Only plain decimal integers that fit in 64 bits
    ("sku_id=sku-ai-1&quantity=1" + "0" * 25, "Invalid quantity"),
    ("sku_id=sku-ai-1&quantity=" + "9" * 321, "Invalid quantity"),
    ("sku_id=sku-ai-1&quantity=9223372036854775808", "Invalid quantity"),
    ("sku_id=sku-ai-1&quantity=1_0", "Invalid quantity"),
    ("sku_id=sku-ai-1&quantity=%207%20", "Invalid quantity"),
    ("sku_id=sku-ai-1&quantity=1&term_months=1" + "0" * 25, "Invalid term_months"),
])
def test_pricing_bad_input(client, query, message):
    resp = client.get(f"/api/v1/demo/pricing?{query}")
    assert resp.status_code == 400
    assert resp.text == message


def test_pricing_largest_integers(client):
    """int64-sized quantity and term still price to finite, rounded values."""
    top = 2 ** 63 - 1
    resp = client.get(f"/api/v1/demo/pricing?sku_id=sku-ai-1&quantity={top}&term_months={top}")
    assert resp.status_code == 200
    data = resp.json()
    assert data["quantity"] == top
    assert data["final_price"] > 0
    assert [d["type"] for d in data["discounts"]] == ["volume", "multi_year"]


def test_create_quote(client):
    resp = _quote(client, term_months=36)
    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert data["quote"]["id"] == "quote-1"
    assert data["quote"]["status"] == "draft"
    assert data["quote"]["total"] == 810.0
    assert data["quote"]["items"][0]["unit_price"] == 30.0
    assert data["pricing"]["final_price"] == 810.0
    assert data["customer"]["id"] == "cust-1"


@pytest.mark.parametrize("term", [None, 0])
def test_create_quote_defaults_term(client, term):
    body = {"customer_id": "cust-1", "sku_id": "sku-1", "quantity": 2}
    if term is not None:
        body["term_months"] = term
    data = client.post("/api/v1/demo/quote", json=body).json()
    assert data["quote"]["items"][0]["term_months"] == 12


def test_create_quote_zero_quantity(client):
    resp = _quote(client, quantity=0)
    assert resp.status_code == 400
    assert resp.text == "customer_id, sku_id, and quantity are required"

    listing = client.get("/api/v1/demo/quotes").json()
    assert listing["count"] == 0
    assert listing["quotes"] == []


@pytest.mark.parametrize("body", [
    {"sku_id": "sku-1", "quantity": 1},
    {"customer_id": "cust-1", "quantity": 1},
    {"customer_id": "", "sku_id": "sku-1", "quantity": 1},
    {"customer_id": "cust-1", "sku_id": "sku-1", "quantity": -3},
])
def test_create_quote_missing_fields(client, body):
    resp = client.post("/api/v1/demo/quote", json=body)
    assert resp.status_code == 400


def test_create_quote_negative_term(client):
    resp = _quote(client, term_months=-1)
    assert resp.status_code == 400
    assert resp.text == "Invalid term_months"


@pytest.mark.parametrize("content", ["not json", "{\"quantity\": \"lots\"}", ""])
def test_create_quote_unparsable_body(client, content):
    resp = client.post(
        "/api/v1/demo/quote",
        content=content,
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.text == "Invalid request body"


@pytest.mark.parametrize("field,value", [
    ("quantity", "5"),
    ("quantity", True),
    ("quantity", 2.0),
    ("quantity", 2 ** 63),
    ("term_months", "24"),
    ("term_months", 24.0),
    ("term_months", 2 ** 63),
])
def test_create_quote_non_integer_fields(client, field, value):
    resp = _quote(client, **{field: value})
    assert resp.status_code == 400
    assert resp.text == "Invalid request body"
    assert client.get("/api/v1/demo/quotes").json()["count"] == 0


def test_create_quote_unknown_customer(client):
    resp = _quote(client, customer_id="cust-404")
    assert resp.status_code == 404
    assert resp.text == "Customer not found"


def test_create_quote_unknown_sku(client):
    resp = _quote(client, sku_id="sku-999")
    assert resp.status_code == 404
    assert resp.text == "Product not found"


def test_failed_quotes_do_not_consume_ids(client):
    _quote(client, customer_id="cust-404")
    _quote(client, sku_id="sku-999")
    _quote(client, quantity=0)
    assert _quote(client).json()["quote"]["id"] == "quote-1"
    assert _quote(client).json()["quote"]["id"] == "quote-2"


def test_list_quotes(client):
    _quote(client)
    _quote(client, customer_id="cust-2", sku_id="sku-ai-1", quantity=4)
    _quote(client, sku_id="sku-2", quantity=20)

    data = client.get("/api/v1/demo/quotes").json()
    assert data["success"] is True
    assert data["count"] == 3
    assert [q["id"] for q in data["quotes"]] == ["quote-1", "quote-2", "quote-3"]

    data = client.get("/api/v1/demo/quotes?customer_id=cust-1").json()
    assert data["count"] == 2
    assert {q["customer_id"] for q in data["quotes"]} == {"cust-1"}


def test_apps_do_not_share_quotes(settings, catalog):
    first = TestClient(create_app(settings, catalog))
    second = TestClient(create_app(settings, catalog))
    _quote(first)
    assert second.get("/api/v1/demo/quotes").json()["count"] == 0


def test_cors_headers_on_responses(client):
    for resp in (client.get("/health"), client.get("/api/v1/demo/pricing?sku_id=sku-999&quantity=1")):
        assert resp.headers["access-control-allow-origin"] == "*"
        assert resp.headers["access-control-allow-methods"] == "GET, POST, PUT, DELETE, OPTIONS"
        assert resp.headers["access-control-allow-headers"] == "Content-Type, Authorization"


def test_options_preflight(client):
    resp = client.options("/api/v1/demo/quote", headers={
        "Origin": "http://localhost:3000",
        "Access-Control-Request-Method": "POST",
    })
    assert resp.status_code == 200
    assert resp.content == b""
    assert resp.headers["access-control-allow-origin"] == "*"
