from fastapi import APIRouter, Query
from sqlalchemy import select

from app.analytics.snapshot import Product, Supplier
from app.db import models
from app.db.session import SessionLocal

router = APIRouter()

@router.get("/suppliers", response_model=list[Supplier])
def preview_suppliers(limit: int = Query(default=10, ge=1, le=200)):
    db = SessionLocal()
    try:
        stmt = select(models.Supplier).order_by(models.Supplier.supplier_id).limit(limit)
        return [Supplier.model_validate(s) for s in db.execute(stmt).scalars()]
    finally:
        db.close()

@router.get("/products", response_model=list[Product])
def preview_products(limit: int = Query(default=10, ge=1, le=200)):
    db = SessionLocal()
    try:
        stmt = select(models.Product).order_by(models.Product.product_id).limit(limit)
        return [Product.model_validate(p) for p in db.execute(stmt).scalars()]
    finally:
        db.close()
