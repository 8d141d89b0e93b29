import logging
from typing import Any, Dict, List, Optional

from psycopg import Connection
from psycopg import errors as pg_errors

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models.product import LowStockReport, Product, ProductCreate, ProductPatch
from ..repos import products as products_repo
from .common import parse_id
from .stock import low_stock_report

logger = logging.getLogger(__name__)


def _require(row: Optional[Dict[str, Any]]) -> Product:
    if row is None:
        raise NotFoundError("Product not found")
    return Product.model_validate(row)


def create_product(conn: Connection, draft: ProductCreate) -> Product:
    payload = draft.model_dump()
    if draft.barcode and products_repo.find_barcode_owner(conn, draft.barcode):
        logger.info("Rejected product %r: barcode %s already exists", draft.name, draft.barcode)
        raise ConflictError("Barcode already exists")
    try:
        row = products_repo.insert_product(conn, payload)
    except pg_errors.UniqueViolation:
        # lost a race on the barcode, or the qr_code is taken
        logger.info("Rejected product %r: duplicate barcode or QR code", draft.name)
        raise ConflictError("Product with this Barcode or QR Code already exists") from None
    product = Product.model_validate(row)
    logger.info("Created product %s (%s)", product.id, product.name)
    return product


def list_products(conn: Connection) -> List[Product]:
    return [Product.model_validate(row) for row in products_repo.list_products(conn)]


def get_product(conn: Connection, product_id: str) -> Product:
    return _require(products_repo.get_product(conn, parse_id(product_id, "Product")))


def find_by_code(conn: Connection, code: str) -> Product:
    row = products_repo.find_product_by_code(conn, code.strip())
    if row is None:
        raise NotFoundError("Product not found")
    return Product.model_validate(row)


def update_product(conn: Connection, product_id: str, patch: ProductPatch) -> Product:
    uid = parse_id(product_id, "Product")
    fields = patch.model_dump(exclude_unset=True)
    if "name" in fields and not (fields["name"] or "").strip():
        raise ValidationError("Name is required")
    if "default_price" in fields and fields["default_price"] is None:
        raise ValidationError("Default Price is required")
    for key in ("unit", "tax_rate", "quantity", "reorder_level"):
        # null on a defaulted column means "leave as is"
        if key in fields and fields[key] is None:
            del fields[key]
    barcode = fields.get("barcode")
    if barcode and products_repo.find_barcode_owner(conn, barcode, exclude_id=uid):
        raise ConflictError("Barcode or QR Code already exists on another product")
    try:
        row = products_repo.update_product_fields(conn, uid, fields)
    except pg_errors.UniqueViolation:
        raise ConflictError("Barcode or QR Code already exists on another product") from None
    product = _require(row)
    logger.info("Updated product %s fields %s", product.id, sorted(fields))
    return product


def restock_product(conn: Connection, product_id: str, quantity) -> Product:
    uid = parse_id(product_id, "Product")
    if quantity is None or quantity <= 0:
        raise ValidationError("Restock quantity must be greater than zero")
    product = _require(products_repo.restock_product(conn, uid, quantity))
    logger.info("Restocked product %s by %s (now %s)", product.id, quantity, product.quantity)
    return product


def delete_product(conn: Connection, product_id: str) -> None:
    uid = parse_id(product_id, "Product")
    if not products_repo.delete_product(conn, uid):
        raise NotFoundError("Product not found")
    logger.info("Deleted product %s", uid)


def stock_report(conn: Connection) -> LowStockReport:
    return LowStockReport(**low_stock_report(list_products(conn)))
