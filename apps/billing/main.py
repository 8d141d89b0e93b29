import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from psycopg import OperationalError
from psycopg import errors as pg_errors
from psycopg_pool import PoolTimeout

from .settings import settings
from .db import pool, db_ok
from .errors import BillingError, StoreUnavailableError, ValidationError
from .logging_config import RequestLoggingMiddleware, configure_logging
from .routes.invoices import router as invoices_router
from .routes.products import router as products_router

configure_logging(settings.LOG_LEVEL, settings.LOG_FILE)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # open without waiting so the API still starts when Postgres is down;
    # requests then fail with 503 until it comes back
    pool.open(wait=False)
    logger.info("Connection pool opened (min=%s, max=%s)", pool.min_size, pool.max_size)
    try:
        yield
    finally:
        pool.close()
        logger.info("Connection pool closed")


app = FastAPI(
    title="Billing API",
    version="0.1.0",
    description="GST invoices, customer payments, and the product catalog.",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(BillingError)
async def billing_error_handler(request: Request, exc: BillingError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_payload()))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [
        {"field": ".".join(str(part) for part in err.get("loc", ())), "message": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"message": "Invalid request", "details": details})


@app.exception_handler(pg_errors.NumericValueOutOfRange)
async def numeric_out_of_range_handler(request: Request, exc: pg_errors.NumericValueOutOfRange):
    # a payment or restock pushed a running total past NUMERIC(18,2)
    logger.warning("%s %s rejected: %s", request.method, request.url.path, exc)
    err = ValidationError("Amount out of range")
    return JSONResponse(status_code=err.status_code, content=err.to_payload())


@app.exception_handler(OperationalError)
@app.exception_handler(PoolTimeout)
async def store_unavailable_handler(request: Request, exc: Exception):
    logger.exception("Store unavailable during %s %s", request.method, request.url.path, exc_info=exc)
    err = StoreUnavailableError()
    return JSONResponse(status_code=err.status_code, content=err.to_payload())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error during %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


app.include_router(invoices_router)
app.include_router(products_router)


@app.get("/api/health")
def health():
    ok_db = db_ok()
    return {"ok": ok_db, "db": ok_db}
