"""
Inventory analytics reports.

Each report is a pure function of a Snapshot and returns a fresh list of rows.
Ratios are rounded half away from zero to two places; a zero denominator
gives None instead of a ratio. Status strings are ordered as plain strings,
so "Sufficient Stock" sorts ahead of "Reorder Needed" and "Normal" ahead of
"High Priority" under a descending sort.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable

import pandas as pd
from pydantic import BaseModel

from app.analytics.schemas import (
    CategoryPerformanceRow,
    ProductTurnoverRow,
    ReorderPriorityRow,
    StockStatusRow,
    SupplierDependencyRow,
    SupplierProductCountRow,
)
from app.analytics.snapshot import Snapshot
from app.core.exceptions import UnknownReport

logger = logging.getLogger(__name__)

REORDER_NEEDED = "Reorder Needed"
SUFFICIENT_STOCK = "Sufficient Stock"
HIGH_PRIORITY = "High Priority"
NORMAL = "Normal"

_CENTS = Decimal("0.01")


def _ratio(numerator, denominator) -> float | None:
    if pd.isna(denominator) or denominator == 0:
        return None
    value = Decimal(int(numerator)) / Decimal(int(denominator))
    return float(value.quantize(_CENTS, rounding=ROUND_HALF_UP))


def _ratios(numerators: pd.Series, denominators: pd.Series) -> pd.Series:
    values = [_ratio(n, d) for n, d in zip(numerators, denominators)]
    return pd.Series(values, index=numerators.index, dtype="float64")


def _ordered(df: pd.DataFrame, by: list[str], ascending: list[bool]) -> pd.DataFrame:
    # input position as the last key keeps ties in enumeration order
    df = df.assign(_position=range(len(df)))
    df = df.sort_values(by + ["_position"], ascending=ascending + [True], na_position="last")
    return df.drop(columns="_position")


def _rows(df: pd.DataFrame, model: type[BaseModel]) -> list:
    columns = list(model.model_fields)
    records = df[columns].astype(object)
    records = records.where(records.notna(), None)
    return [model(**r) for r in records.to_dict(orient="records")]


def _is_low_stock(df: pd.DataFrame) -> pd.Series:
    return df["stock_on_hand"] <= df["reorder_point"]


def _supplier_counts(snapshot: Snapshot) -> pd.DataFrame:
    """Suppliers with at least one resolvable product, in enumeration order."""
    suppliers = snapshot.suppliers_frame()
    products = snapshot.products_frame()
    resolvable = products["supplier_id"].isin(suppliers["supplier_id"])
    counts = products.loc[resolvable, "supplier_id"].value_counts()
    total = suppliers["supplier_id"].map(counts).fillna(0).astype("int64")
    df = suppliers.assign(total_products=total)
    return df[df["total_products"] > 0].copy()


def stock_status(snapshot: Snapshot) -> list[StockStatusRow]:
    """Flag every product whose stock is at or below its reorder point."""
    df = snapshot.products_frame()
    df["stock_status"] = _is_low_stock(df).map({True: REORDER_NEEDED, False: SUFFICIENT_STOCK})
    df = _ordered(df, ["stock_status", "stock_on_hand"], [False, True])
    return _rows(df, StockStatusRow)


def supplier_dependency(snapshot: Snapshot) -> list[SupplierDependencyRow]:
    """Share of the whole catalog sourced from each supplier.

    The denominator counts every product, including those whose supplier
    reference does not resolve, so the percentages only reach 100 when all
    products are joined.
    """
    total_products = len(snapshot.products)
    df = _supplier_counts(snapshot)
    df["percent_of_total_products"] = _ratios(df["total_products"] * 100, pd.Series(total_products, index=df.index))
    df = _ordered(df, ["total_products"], [False])
    return _rows(df, SupplierDependencyRow)


def product_turnover(snapshot: Snapshot) -> list[ProductTurnoverRow]:
    df = snapshot.products_frame()
    df["turnover_ratio"] = _ratios(df["annual_sales_units"], df["stock_on_hand"])
    df = _ordered(df, ["turnover_ratio"], [False])
    return _rows(df, ProductTurnoverRow)


def category_performance(snapshot: Snapshot) -> list[CategoryPerformanceRow]:
    df = snapshot.products_frame()
    grouped = (
        df.groupby("category", sort=False)
        .agg(total_units_sold=("annual_sales_units", "sum"), total_stock_on_hand=("stock_on_hand", "sum"))
        .reset_index()
    )
    grouped["category_turnover_ratio"] = _ratios(grouped["total_units_sold"], grouped["total_stock_on_hand"])
    grouped = _ordered(grouped, ["category_turnover_ratio"], [False])
    return _rows(grouped, CategoryPerformanceRow)


def reorder_priority(snapshot: Snapshot) -> list[ReorderPriorityRow]:
    """Rank products by priority label (compared as strings), then by sell-through."""
    df = snapshot.products_frame()
    df["turnover_ratio"] = _ratios(df["annual_sales_units"], df["stock_on_hand"])
    df["reorder_priority"] = _is_low_stock(df).map({True: HIGH_PRIORITY, False: NORMAL})
    df = _ordered(df, ["reorder_priority", "turnover_ratio"], [False, False])
    return _rows(df, ReorderPriorityRow)


def supplier_product_counts(snapshot: Snapshot) -> list[SupplierProductCountRow]:
    # grouped by name, so suppliers sharing a name are counted together
    df = _supplier_counts(snapshot)
    grouped = df.groupby("supplier_name", sort=False)["total_products"].sum().reset_index()
    grouped = _ordered(grouped, ["total_products"], [False])
    return _rows(grouped, SupplierProductCountRow)


@dataclass(frozen=True)
class Report:
    name: str
    compute: Callable[[Snapshot], list]
    row_model: type[BaseModel]


REPORTS: dict[str, Report] = {
    r.name: r
    for r in (
        Report("stock-status", stock_status, StockStatusRow),
        Report("supplier-dependency", supplier_dependency, SupplierDependencyRow),
        Report("product-turnover", product_turnover, ProductTurnoverRow),
        Report("category-performance", category_performance, CategoryPerformanceRow),
        Report("reorder-priority", reorder_priority, ReorderPriorityRow),
        Report("supplier-product-counts", supplier_product_counts, SupplierProductCountRow),
    )
}


def get_report(name: str) -> Report:
    try:
        return REPORTS[name]
    except KeyError:
        raise UnknownReport(name) from None


def run_report(name: str, snapshot: Snapshot) -> list:
    report = get_report(name)
    rows = report.compute(snapshot)
    logger.info("Computed report %s: %d rows", name, len(rows))
    return rows


def run_all(snapshot: Snapshot) -> dict[str, list]:
    """Compute every report over the same snapshot."""
    return {name: report.compute(snapshot) for name, report in REPORTS.items()}
