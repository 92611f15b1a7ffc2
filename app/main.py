from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.exceptions import InventoryAnalyticsError
from app.core.logger import init_logging
from app.db import session
from app.routers.catalog_router import router as catalog_router
from app.routers.import_router import router as import_router
from app.routers.reports_router import router as reports_router

init_logging()

@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.AUTO_CREATE_TABLES:
        session.init_db()
    yield

app = FastAPI(title="Inventory Analytics API v0", lifespan=lifespan)

@app.exception_handler(InventoryAnalyticsError)
async def analytics_error_handler(request: Request, exc: InventoryAnalyticsError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

@app.get("/")
def root():
    return {"ok": True, "service": "inventory-analytics", "reports": "/reports"}

app.include_router(import_router, prefix="/import", tags=["import"])
app.include_router(catalog_router, prefix="/catalog", tags=["catalog"])
app.include_router(reports_router, prefix="/reports", tags=["reports"])
