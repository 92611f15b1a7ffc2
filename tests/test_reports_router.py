"""Tests for the report and catalog endpoints."""
import io

import pandas as pd

from app.db.models import Product, Supplier
from app.db.session import SessionLocal


def _seed(suppliers, products):
    db = SessionLocal()
    try:
        db.add_all(Supplier(**s) for s in suppliers)
        db.add_all(Product(**p) for p in products)
        db.commit()
    finally:
        db.close()


def test_list_reports(client):
    resp = client.get("/reports")

    assert resp.status_code == 200
    assert "reorder-priority" in resp.json()["reports"]


def test_stored_report_json(client, suppliers, products):
    _seed(suppliers, products)

    resp = client.get("/reports/supplier-dependency")

    assert resp.status_code == 200, resp.text
    assert resp.json() == [
        {"supplier_id": 1, "supplier_name": "Acme Tools", "total_products": 3, "percent_of_total_products": 75.0},
        {"supplier_id": 2, "supplier_name": "Borealis Supply", "total_products": 1, "percent_of_total_products": 25.0},
    ]


def test_stored_report_csv(client, suppliers, products):
    _seed(suppliers, products)

    resp = client.get("/reports/product-turnover", params={"format": "csv"})

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    df = pd.read_csv(io.StringIO(resp.text))
    assert list(df["product_id"]) == [10, 13, 11, 12]
    assert pd.isna(df["turnover_ratio"].iloc[-1])


def test_empty_report_csv_keeps_header(client):
    resp = client.get("/reports/category-performance", params={"format": "csv"})

    assert resp.text.strip() == "category,total_units_sold,total_stock_on_hand,category_turnover_ratio"


def test_all_reports_share_one_snapshot(client, suppliers, products):
    _seed(suppliers, products)

    body = client.get("/reports/all").json()

    assert set(body) == {
        "stock-status", "supplier-dependency", "product-turnover",
        "category-performance", "reorder-priority", "supplier-product-counts",
    }
    assert [r["product_id"] for r in body["stock-status"]] == [11, 13, 12, 10]


def test_unknown_report_is_404(client):
    resp = client.get("/reports/profit-margin")

    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "RPT001"


def test_compute_report_over_posted_snapshot(client, suppliers, products):
    resp = client.post("/reports/category-performance", json={"suppliers": suppliers, "products": products})

    assert resp.status_code == 200, resp.text
    assert resp.json()[1] == {
        "category": "Tools",
        "total_units_sold": 25,
        "total_stock_on_hand": 15,
        "category_turnover_ratio": 1.67,
    }


def test_compute_report_malformed_snapshot(client, suppliers, products):
    del products[1]["product_name"]

    resp = client.post("/reports/stock-status", json={"suppliers": suppliers, "products": products})

    assert resp.status_code == 422
    error = resp.json()["error"]
    assert error["code"] == "SNP001"
    assert error["details"] == {"record_type": "product", "index": 1, "record_id": 11, "fields": ["product_name"]}


def test_catalog_preview_respects_limit(client, suppliers, products):
    _seed(suppliers, products)

    resp = client.get("/catalog/products", params={"limit": 2})

    assert resp.status_code == 200
    assert [p["product_id"] for p in resp.json()] == [10, 11]
    assert client.get("/catalog/suppliers").json()[2]["supplier_name"] == "Idle Co"
    assert client.get("/catalog/suppliers", params={"limit": 0}).status_code == 422
