from fastapi import APIRouter, UploadFile, File, HTTPException
from fastapi.responses import FileResponse
import logging
import math
import pandas as pd
import re
from pathlib import Path
import uuid

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from app.analytics.snapshot import INT_MAX, INT_MIN
from app.core.config import settings
from app.db.session import SessionLocal
from app.db.models import Supplier, Product

router = APIRouter()
logger = logging.getLogger(__name__)

REQUIRED_SUPPLIERS = {"supplier_id", "supplier_name", "location", "contact_email"}
REQUIRED_PRODUCTS = {
    "product_id", "product_name", "category", "supplier_id", "unit_cost", "unit_price",
    "stock_on_hand", "reorder_point", "lead_time_days", "annual_sales_units",
}
PRODUCT_INT_FIELDS = ("stock_on_hand", "reorder_point", "lead_time_days", "annual_sales_units")

ERROR_DIR = Path(settings.ERROR_REPORT_DIR)
ERROR_DIR.mkdir(parents=True, exist_ok=True)

def read_csv(upload: UploadFile) -> pd.DataFrame:
    if not upload.filename.lower().endswith(".csv"):
        raise HTTPException(status_code=400, detail=f"{upload.filename} must be a CSV")
    try:
        return pd.read_csv(upload.file, dtype=str, keep_default_na=False)
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"{upload.filename}: could not read CSV: {e}")

def missing_cols(df: pd.DataFrame, required: set[str]) -> list[str]:
    return sorted(list(required - set(df.columns)))

def add_error(
    errors: list,
    *,
    file: str,
    row: int | None,
    field: str,
    code: str,
    message: str,
    value: str = "",
    suggestion: str = "",
):
    errors.append({
        "file": file,
        "row": row,
        "field": field,
        "code": code,
        "message": message,
        "value": value,
        "suggestion": suggestion,
    })

INT_PATTERN = re.compile(r"[+-]?[0-9]+")

def parse_int(value: str) -> int | None:
    text = value.strip()
    if not INT_PATTERN.fullmatch(text):
        return None
    number = int(text)
    if number < INT_MIN or number > INT_MAX:
        return None
    return number

def parse_float(value: str) -> float | None:
    try:
        number = float(value.strip())
    except (AttributeError, ValueError):
        return None
    # nan and inf would slip past the price >= cost comparison
    return number if math.isfinite(number) else None

def summarize(df_s: pd.DataFrame, df_p: pd.DataFrame) -> dict:
    return {"suppliers_rows": int(len(df_s)), "products_rows": int(len(df_p))}

def error_response(errors: list[dict], summary: dict) -> dict:
    report_id = uuid.uuid4().hex
    pd.DataFrame(errors).to_csv(ERROR_DIR / f"{report_id}.csv", index=False)
    logger.warning("Import validation failed with %d errors (report %s)", len(errors), report_id)
    return {
        "ok": False,
        "summary": summary,
        "errors_count": len(errors),
        "error_report_id": report_id,
        "error_report_url": f"/import/error-report/{report_id}",
        "errors_preview": errors[:25],
    }

def check_ids(df: pd.DataFrame, *, file: str, field: str, errors: list):
    seen = set()
    for idx, raw in df[field].items():
        csv_row = int(idx) + 2
        value = parse_int(raw)
        if value is None:
            add_error(errors, file=file, row=csv_row, field=field, code="BAD_INT",
                      message=f"{field} must be an integer", value=raw)
        elif value in seen:
            add_error(errors, file=file, row=csv_row, field=field, code="DUPLICATE_ID",
                      message=f"{field} appears more than once", value=raw,
                      suggestion="Keep one row per id.")
        else:
            seen.add(value)

def validate_frames(df_s: pd.DataFrame, df_p: pd.DataFrame, *, suppliers_file: str, products_file: str) -> list[dict]:
    errors: list[dict] = []

    # 1) Required columns
    ms = missing_cols(df_s, REQUIRED_SUPPLIERS)
    mp = missing_cols(df_p, REQUIRED_PRODUCTS)
    if ms:
        add_error(errors, file=suppliers_file, row=None, field="*", code="MISSING_COLUMNS",
                  message="Missing required columns", value=",".join(ms), suggestion="Add these columns to header.")
    if mp:
        add_error(errors, file=products_file, row=None, field="*", code="MISSING_COLUMNS",
                  message="Missing required columns", value=",".join(mp), suggestion="Add these columns to header.")

    # Stop early if missing columns
    if errors:
        return errors

    # 2) Row-level checks
    check_ids(df_s, file=suppliers_file, field="supplier_id", errors=errors)
    for idx, row in df_s.iterrows():
        if not row["supplier_name"].strip():
            add_error(errors, file=suppliers_file, row=int(idx) + 2, field="supplier_name", code="REQUIRED",
                      message="supplier_name is required", suggestion="Provide a non-empty name.")

    check_ids(df_p, file=products_file, field="product_id", errors=errors)
    for idx, row in df_p.iterrows():
        csv_row = int(idx) + 2
        for field in ("product_name", "category"):
            if not row[field].strip():
                add_error(errors, file=products_file, row=csv_row, field=field, code="REQUIRED",
                          message=f"{field} is required")

        if row["supplier_id"].strip() and parse_int(row["supplier_id"]) is None:
            add_error(errors, file=products_file, row=csv_row, field="supplier_id", code="BAD_INT",
                      message="supplier_id must be an integer or empty", value=row["supplier_id"])

        for field in PRODUCT_INT_FIELDS:
            value = parse_int(row[field])
            if value is None or value < 0:
                add_error(errors, file=products_file, row=csv_row, field=field, code="BAD_INT",
                          message=f"{field} must be an integer >= 0", value=row[field])

        cost = parse_float(row["unit_cost"])
        if cost is None:
            add_error(errors, file=products_file, row=csv_row, field="unit_cost", code="BAD_NUMBER",
                      message="unit_cost must be a number", value=row["unit_cost"])
        price = parse_float(row["unit_price"])
        if price is None:
            add_error(errors, file=products_file, row=csv_row, field="unit_price", code="BAD_NUMBER",
                      message="unit_price must be a number", value=row["unit_price"])

        if cost is not None and price is not None and price < cost:
            add_error(errors, file=products_file, row=csv_row, field="unit_price", code="PRICE_LT_COST",
                      message="unit_price must be >= unit_cost", value=f"{price} < {cost}",
                      suggestion="Raise price or correct cost.")

    return errors

def stored_supplier_ids(db) -> set[int]:
    return set(db.execute(select(Supplier.supplier_id)).scalars())

def unresolved_supplier_refs(df_s: pd.DataFrame, df_p: pd.DataFrame, known_ids: set[int]) -> int:
    # unknown suppliers are allowed; those products only drop out of supplier reports
    supplier_ids = known_ids | {parse_int(v) for v in df_s["supplier_id"]}
    refs = [parse_int(v) for v in df_p["supplier_id"] if v.strip()]
    return sum(1 for ref in refs if ref not in supplier_ids)

def supplier_records(df_s: pd.DataFrame) -> list[dict]:
    return [
        {
            "supplier_id": parse_int(row["supplier_id"]),
            "supplier_name": row["supplier_name"].strip(),
            "location": row["location"].strip() or None,
            "contact_email": row["contact_email"].strip() or None,
        }
        for _, row in df_s.iterrows()
    ]

def product_records(df_p: pd.DataFrame) -> list[dict]:
    return [
        {
            "product_id": parse_int(row["product_id"]),
            "product_name": row["product_name"].strip(),
            "category": row["category"].strip(),
            "supplier_id": parse_int(row["supplier_id"]),
            "unit_cost": parse_float(row["unit_cost"]),
            "unit_price": parse_float(row["unit_price"]),
            **{field: parse_int(row[field]) for field in PRODUCT_INT_FIELDS},
        }
        for _, row in df_p.iterrows()
    ]

def upsert(db, model, rows: list[dict], key: str):
    if not rows:
        return
    insert = pg_insert if db.get_bind().dialect.name == "postgresql" else sqlite_insert
    stmt = insert(model).values(rows)
    stmt = stmt.on_conflict_do_update(
        index_elements=[key],
        set_={column: stmt.excluded[column] for column in rows[0] if column != key},
    )
    db.execute(stmt)

@router.get("/error-report/{report_id}")
def download_error_report(report_id: str):
    path = ERROR_DIR / f"{report_id}.csv"
    if not path.exists():
        raise HTTPException(status_code=404, detail="Error report not found")
    return FileResponse(path, media_type="text/csv", filename="import_error_report.csv")

@router.post("/validate")
async def validate_all(
    suppliers: UploadFile = File(...),
    products: UploadFile = File(...),
):
    df_s = read_csv(suppliers)
    df_p = read_csv(products)

    errors = validate_frames(df_s, df_p, suppliers_file=suppliers.filename, products_file=products.filename)
    summary = summarize(df_s, df_p)
    if errors:
        return error_response(errors, summary)

    db = SessionLocal()
    try:
        known_ids = stored_supplier_ids(db)
    finally:
        db.close()
    summary["unresolved_supplier_refs"] = unresolved_supplier_refs(df_s, df_p, known_ids)
    return {
        "ok": True,
        "summary": summary,
        "errors_count": 0,
        "errors_preview": [],
    }

@router.post("/commit")
async def commit_import(
    suppliers: UploadFile = File(...),
    products: UploadFile = File(...),
):
    df_s = read_csv(suppliers)
    df_p = read_csv(products)

    errors = validate_frames(df_s, df_p, suppliers_file=suppliers.filename, products_file=products.filename)
    if errors:
        raise HTTPException(status_code=400, detail=error_response(errors, summarize(df_s, df_p)))

    db = SessionLocal()
    try:
        sup_rows = supplier_records(df_s)
        upsert(db, Supplier, sup_rows, "supplier_id")

        prod_rows = product_records(df_p)
        upsert(db, Product, prod_rows, "product_id")

        db.commit()
        logger.info("Imported %d suppliers and %d products", len(sup_rows), len(prod_rows))
        return {
            "ok": True,
            "saved": {
                "suppliers_upserted": len(sup_rows),
                "products_upserted": len(prod_rows),
            },
            "unresolved_supplier_refs": unresolved_supplier_refs(df_s, df_p, stored_supplier_ids(db)),
            "note": "Products with an unknown supplier_id are kept but left out of supplier reports.",
        }
    finally:
        db.close()
