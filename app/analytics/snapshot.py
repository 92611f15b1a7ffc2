"""
Immutable catalog snapshot the reports are computed over.

Records are validated one by one so a bad record is reported with its
position and identifier before any report runs.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Annotated, Any

import pandas as pd
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import MalformedSnapshot
from app.db import models

logger = logging.getLogger(__name__)

# signed 32-bit INT columns of the catalog tables
INT_MIN = -(2**31)
INT_MAX = 2**31 - 1


def _reject_bool(value: Any) -> Any:
    if isinstance(value, bool):
        raise ValueError("boolean is not an integer")
    return value


CatalogInt = Annotated[int, BeforeValidator(_reject_bool), Field(ge=INT_MIN, le=INT_MAX)]


class Supplier(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    supplier_id: CatalogInt
    supplier_name: str
    location: str | None = None
    contact_email: str | None = None


class Product(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    product_id: CatalogInt
    product_name: str
    category: str
    supplier_id: CatalogInt | None = None
    unit_cost: float | None = None
    unit_price: float | None = None
    stock_on_hand: CatalogInt
    reorder_point: CatalogInt
    lead_time_days: CatalogInt | None = None
    annual_sales_units: CatalogInt


SUPPLIER_COLUMNS = list(Supplier.model_fields)
PRODUCT_COLUMNS = list(Product.model_fields)

# nullable Int64 keeps supplier ids comparable when some references are missing
SUPPLIER_DTYPES = {"supplier_id": "Int64"}
PRODUCT_DTYPES = {
    "product_id": "int64",
    "supplier_id": "Int64",
    "unit_cost": "float64",
    "unit_price": "float64",
    "stock_on_hand": "int64",
    "reorder_point": "int64",
    "lead_time_days": "Int64",
    "annual_sales_units": "int64",
}


class Snapshot(BaseModel):
    """Point-in-time copy of suppliers and products shared by one batch of reports."""
    model_config = ConfigDict(frozen=True)

    suppliers: tuple[Supplier, ...] = ()
    products: tuple[Product, ...] = ()

    def suppliers_frame(self) -> pd.DataFrame:
        df = pd.DataFrame([s.model_dump() for s in self.suppliers], columns=SUPPLIER_COLUMNS)
        return df.astype(SUPPLIER_DTYPES)

    def products_frame(self) -> pd.DataFrame:
        df = pd.DataFrame([p.model_dump() for p in self.products], columns=PRODUCT_COLUMNS)
        return df.astype(PRODUCT_DTYPES)


def _field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def _validate_records(records: Iterable[Any], model: type[BaseModel], record_type: str, id_field: str) -> tuple:
    validated = []
    seen: set[int] = set()
    for index, record in enumerate(records):
        try:
            item = model.model_validate(record)
        except ValidationError as e:
            fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors() if err["loc"]})
            raise MalformedSnapshot(record_type, index, _field(record, id_field), fields) from e

        key = getattr(item, id_field)
        if key in seen:
            raise MalformedSnapshot(record_type, index, key, [id_field], reason="duplicate identifier")
        seen.add(key)
        validated.append(item)
    return tuple(validated)


def build_snapshot(suppliers: Iterable[Any], products: Iterable[Any]) -> Snapshot:
    """Validate supplier and product records into a Snapshot.

    Records may be mappings or objects with matching attributes (ORM rows).
    Raises MalformedSnapshot on the first bad record.
    """
    snapshot = Snapshot(
        suppliers=_validate_records(suppliers, Supplier, "supplier", "supplier_id"),
        products=_validate_records(products, Product, "product", "product_id"),
    )
    logger.debug("Built snapshot: %d suppliers, %d products", len(snapshot.suppliers), len(snapshot.products))
    return snapshot


def load_snapshot(db: Session) -> Snapshot:
    suppliers = db.execute(select(models.Supplier).order_by(models.Supplier.supplier_id)).scalars().all()
    products = db.execute(select(models.Product).order_by(models.Product.product_id)).scalars().all()
    return build_snapshot(suppliers, products)
