from typing import List

from fastapi import APIRouter, Body, Depends
from psycopg import Connection

from ..db import get_conn
from ..models.invoice import Message
from ..models.product import LowStockReport, Product, ProductCreate, ProductPatch, Restock
from ..services import products as product_service

router = APIRouter(prefix="/products", tags=["products"])


@router.post("", response_model=Product, status_code=201)
def create_product(draft: ProductCreate = Body(...), conn: Connection = Depends(get_conn)):
    return product_service.create_product(conn, draft)

# Newest first
@router.get("", response_model=List[Product])
def list_products(conn: Connection = Depends(get_conn)):
    return product_service.list_products(conn)

# Out-of-stock and low-stock products with restock estimate
@router.get("/low-stock", response_model=LowStockReport)
def low_stock(conn: Connection = Depends(get_conn)):
    return product_service.stock_report(conn)

# Scanner lookup; the code may be a barcode or a QR code
@router.get("/fetch/{code}", response_model=Product)
def fetch_by_code(code: str, conn: Connection = Depends(get_conn)):
    return product_service.find_by_code(conn, code)

@router.get("/{product_id}", response_model=Product)
def get_product(product_id: str, conn: Connection = Depends(get_conn)):
    return product_service.get_product(conn, product_id)

@router.put("/{product_id}", response_model=Product)
def update_product(product_id: str, patch: ProductPatch = Body(...), conn: Connection = Depends(get_conn)):
    return product_service.update_product(conn, product_id, patch)

@router.post("/{product_id}/restock", response_model=Product)
def restock_product(product_id: str, payload: Restock = Body(...), conn: Connection = Depends(get_conn)):
    return product_service.restock_product(conn, product_id, payload.quantity)

@router.delete("/{product_id}", response_model=Message)
def delete_product(product_id: str, conn: Connection = Depends(get_conn)):
    product_service.delete_product(conn, product_id)
    return Message(message="Product deleted successfully")
