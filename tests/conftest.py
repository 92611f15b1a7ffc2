from __future__ import annotations

import os
import tempfile

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("ERROR_REPORT_DIR", tempfile.mkdtemp(prefix="error_reports_"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from app.db import session as db_session
from app.db.models import Base
from app.db.session import SessionLocal

test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Ensure application code uses the test engine
db_session.engine = test_engine  # type: ignore[assignment]
SessionLocal.configure(bind=test_engine)


@pytest.fixture(autouse=True)
def _reset_database_state():
    """Give every test an empty schema."""
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield


@pytest.fixture
def client():
    from app.main import app

    return TestClient(app)


@pytest.fixture
def suppliers():
    return [
        {"supplier_id": 1, "supplier_name": "Acme Tools", "location": "Leeds", "contact_email": "sales@acme.test"},
        {"supplier_id": 2, "supplier_name": "Borealis Supply", "location": "Oslo", "contact_email": "hi@borealis.test"},
        {"supplier_id": 3, "supplier_name": "Idle Co", "location": "Lyon", "contact_email": None},
    ]


@pytest.fixture
def products():
    return [
        {"product_id": 10, "product_name": "Hammer", "category": "Tools", "supplier_id": 1,
         "unit_cost": 4.0, "unit_price": 9.5, "stock_on_hand": 5, "reorder_point": 8,
         "lead_time_days": 7, "annual_sales_units": 20},
        {"product_id": 11, "product_name": "Wrench", "category": "Tools", "supplier_id": 1,
         "unit_cost": 6.0, "unit_price": 12.0, "stock_on_hand": 10, "reorder_point": 5,
         "lead_time_days": 7, "annual_sales_units": 5},
        {"product_id": 12, "product_name": "Glue", "category": "Adhesives", "supplier_id": 2,
         "unit_cost": 1.0, "unit_price": 3.0, "stock_on_hand": 0, "reorder_point": 3,
         "lead_time_days": 14, "annual_sales_units": 40},
        {"product_id": 13, "product_name": "Tape", "category": "Adhesives", "supplier_id": 1,
         "unit_cost": 0.5, "unit_price": 2.0, "stock_on_hand": 40, "reorder_point": 10,
         "lead_time_days": 3, "annual_sales_units": 100},
    ]
