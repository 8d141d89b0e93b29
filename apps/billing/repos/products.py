from typing import List, Dict, Any, Optional
from uuid import UUID
from decimal import Decimal

from psycopg import Connection

PRODUCT_COLUMNS = """
    id, name, description, hsn_code, default_price, barcode, qr_code, unit,
    tax_rate, quantity, reorder_level, created_at
"""

EDITABLE_FIELDS = (
    "name", "description", "hsn_code", "default_price", "barcode", "qr_code",
    "unit", "tax_rate", "quantity", "reorder_level",
)

# Inserts a product. Duplicate barcode/qr_code values surface as
# psycopg.errors.UniqueViolation from the partial unique indexes.
def insert_product(conn: Connection, payload: Dict[str, Any]) -> Dict[str, Any]:
    columns = [k for k in EDITABLE_FIELDS if k in payload]
    placeholders = ", ".join(f"%({k})s" for k in columns)
    sql = f"""
    INSERT INTO products ({', '.join(columns)})
    VALUES ({placeholders})
    RETURNING {PRODUCT_COLUMNS};
    """
    with conn.cursor() as cur:
        cur.execute(sql, {k: payload[k] for k in columns})
        return cur.fetchone()


# Lists the catalog, newest first.
def list_products(conn: Connection) -> List[Dict[str, Any]]:
    with conn.cursor() as cur:
        cur.execute(f"SELECT {PRODUCT_COLUMNS} FROM products ORDER BY created_at DESC")
        return cur.fetchall()


def get_product(conn: Connection, product_id: UUID) -> Optional[Dict[str, Any]]:
    with conn.cursor() as cur:
        cur.execute(f"SELECT {PRODUCT_COLUMNS} FROM products WHERE id = %s", (product_id,))
        return cur.fetchone()


# Scanner lookup: a code may be either the barcode or the QR code of a product.
def find_product_by_code(conn: Connection, code: str) -> Optional[Dict[str, Any]]:
    with conn.cursor() as cur:
        cur.execute(
            f"""
            SELECT {PRODUCT_COLUMNS} FROM products
            WHERE barcode = %(code)s OR qr_code = %(code)s
            ORDER BY created_at DESC
            LIMIT 1
            """,
            {"code": code},
        )
        return cur.fetchone()


# Returns the id of another product already using `barcode`, if any.
def find_barcode_owner(conn: Connection, barcode: str, exclude_id: Optional[UUID] = None) -> Optional[UUID]:
    query = "SELECT id FROM products WHERE barcode = %s"
    params: List[Any] = [barcode]
    if exclude_id is not None:
        query += " AND id <> %s"
        params.append(exclude_id)
    with conn.cursor() as cur:
        cur.execute(query + " LIMIT 1", params)
        row = cur.fetchone()
        return row["id"] if row else None


# Partially updates a product. Returns the updated row, or None if not found.
def update_product_fields(conn: Connection, product_id: UUID, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    assignments = []
    values = []
    for k, v in fields.items():
        if k in EDITABLE_FIELDS:
            assignments.append(f"{k} = %s")
            values.append(v)
    if not assignments:
        return get_product(conn, product_id)
    sql_stmt = f"UPDATE products SET {', '.join(assignments)} WHERE id = %s RETURNING {PRODUCT_COLUMNS}"
    with conn.cursor() as cur:
        cur.execute(sql_stmt, (*values, product_id))
        return cur.fetchone()


# Adds stock in place so concurrent restocks do not overwrite each other.
def restock_product(conn: Connection, product_id: UUID, quantity: Decimal) -> Optional[Dict[str, Any]]:
    with conn.cursor() as cur:
        cur.execute(
            f"""
            UPDATE products SET quantity = quantity + %s
            WHERE id = %s
            RETURNING {PRODUCT_COLUMNS}
            """,
            (quantity, product_id),
        )
        return cur.fetchone()


def delete_product(conn: Connection, product_id: UUID) -> bool:
    with conn.cursor() as cur:
        cur.execute("DELETE FROM products WHERE id = %s", (product_id,))
        return cur.rowcount > 0
