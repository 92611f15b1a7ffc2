"""Row models returned by the inventory reports."""
from pydantic import BaseModel


class StockStatusRow(BaseModel):
    product_id: int
    product_name: str
    category: str
    stock_on_hand: int
    reorder_point: int
    stock_status: str


class SupplierDependencyRow(BaseModel):
    supplier_id: int
    supplier_name: str
    total_products: int
    percent_of_total_products: float


class ProductTurnoverRow(BaseModel):
    product_id: int
    product_name: str
    annual_sales_units: int
    stock_on_hand: int
    turnover_ratio: float | None = None


class CategoryPerformanceRow(BaseModel):
    category: str
    total_units_sold: int
    total_stock_on_hand: int
    category_turnover_ratio: float | None = None


class ReorderPriorityRow(BaseModel):
    product_id: int
    product_name: str
    stock_on_hand: int
    reorder_point: int
    annual_sales_units: int
    turnover_ratio: float | None = None
    reorder_priority: str


class SupplierProductCountRow(BaseModel):
    supplier_name: str
    total_products: int


class SnapshotIn(BaseModel):
    """Request body for computing a report over a caller-supplied snapshot.

    Records stay raw here so validation errors surface as MalformedSnapshot
    with the offending record identified.
    """
    suppliers: list[dict] = []
    products: list[dict] = []
