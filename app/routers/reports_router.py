from typing import Literal

from fastapi import APIRouter, Query
from fastapi.responses import Response
import logging
import pandas as pd

from app.analytics.reports import REPORTS, get_report, run_all, run_report
from app.analytics.schemas import SnapshotIn
from app.analytics.snapshot import build_snapshot, load_snapshot
from app.db.session import SessionLocal

router = APIRouter()
logger = logging.getLogger(__name__)

def render(name: str, rows: list, fmt: str):
    if fmt == "json":
        return rows
    columns = list(get_report(name).row_model.model_fields)
    df = pd.DataFrame([r.model_dump() for r in rows], columns=columns)
    return Response(
        content=df.to_csv(index=False),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{name}.csv"'},
    )

@router.get("")
def list_reports():
    return {"reports": list(REPORTS)}

@router.get("/all")
def get_all_reports():
    db = SessionLocal()
    try:
        snapshot = load_snapshot(db)
    finally:
        db.close()
    return run_all(snapshot)

@router.get("/{name}")
def get_stored_report(name: str, format: Literal["json", "csv"] = Query(default="json")):
    get_report(name)
    db = SessionLocal()
    try:
        snapshot = load_snapshot(db)
    finally:
        db.close()
    return render(name, run_report(name, snapshot), format)

@router.post("/{name}")
def compute_report(name: str, payload: SnapshotIn, format: Literal["json", "csv"] = Query(default="json")):
    get_report(name)
    snapshot = build_snapshot(payload.suppliers, payload.products)
    return render(name, run_report(name, snapshot), format)
