import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config import settings
from core.errors import InventoryError, UnexpectedError
from core.logging import configure_logging
from db.database import create_db_and_tables
from routers.alerts import router as alerts_router
from routers.companies import router as companies_router
from routers.inventory import router as inventory_router
from routers.products import router as products_router
from routers.suppliers import router as suppliers_router
from schemas.validation import validation_error_from_pydantic

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level)
    await create_db_and_tables()
    yield


app = FastAPI(
    title="Inventory Platform API",
    description="Multi-warehouse inventory: catalog, stock ledger and low-stock alerts",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(InventoryError)
async def inventory_error_handler(request: Request, exc: InventoryError):
    return JSONResponse(content=exc.to_dict(), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    err = validation_error_from_pydantic(exc.errors())
    return JSONResponse(content=err.to_dict(), status_code=err.status_code)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    # Never echo the raw exception back to the caller
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    err = UnexpectedError()
    return JSONResponse(content=err.to_dict(), status_code=err.status_code)


app.include_router(companies_router, prefix="/api/companies", tags=["companies"])
app.include_router(alerts_router, prefix="/api/companies", tags=["alerts"])
app.include_router(products_router, prefix="/api/products", tags=["products"])
app.include_router(inventory_router, prefix="/api/inventory", tags=["inventory"])
app.include_router(suppliers_router, prefix="/api", tags=["suppliers"])

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
