from typing import Optional, List, Dict, Any
from uuid import UUID
from decimal import Decimal

from psycopg import Connection
from psycopg.types.json import Jsonb

INVOICE_COLUMNS = """
    id, customer_name, mobile_number, invoice_no, purchase_date, invoice_date,
    due_date, items, total_amount, paid_amount, left_amount, created_at
"""

# Inserts a new invoice. The balance always starts as the full total:
# paid_amount = 0 and left_amount = total_amount, whatever the caller sent.
def insert_invoice(conn: Connection, payload: Dict[str, Any]) -> Dict[str, Any]:
    sql = f"""
    INSERT INTO invoices
      (customer_name, mobile_number, invoice_no, purchase_date, invoice_date,
       due_date, items, total_amount, paid_amount, left_amount)
    VALUES
      (%(customer_name)s, %(mobile_number)s, %(invoice_no)s,
       COALESCE(%(purchase_date)s, now()), COALESCE(%(invoice_date)s, now()),
       %(due_date)s, %(items)s, %(total_amount)s, 0, %(total_amount)s)
    RETURNING {INVOICE_COLUMNS};
    """
    with conn.cursor() as cur:
        cur.execute(sql, {
            "customer_name": payload["customer_name"],
            "mobile_number": payload["mobile_number"],
            "invoice_no": payload.get("invoice_no"),
            "purchase_date": payload.get("purchase_date"),
            "invoice_date": payload.get("invoice_date"),
            "due_date": payload.get("due_date"),
            "items": Jsonb(payload.get("items") or []),
            "total_amount": Decimal(payload["total_amount"]),
        })
        return cur.fetchone()


# Lists every invoice, newest first. No pagination: the UI searches the full set.
def list_invoices(conn: Connection) -> List[Dict[str, Any]]:
    with conn.cursor() as cur:
        cur.execute(f"SELECT {INVOICE_COLUMNS} FROM invoices ORDER BY created_at DESC")
        return cur.fetchall()


# Fetches a single invoice with its embedded items. Returns None if not found.
def get_invoice(conn: Connection, invoice_id: UUID) -> Optional[Dict[str, Any]]:
    with conn.cursor() as cur:
        cur.execute(f"SELECT {INVOICE_COLUMNS} FROM invoices WHERE id = %s", (invoice_id,))
        return cur.fetchone()


# Partially updates identity fields. Money columns are deliberately not in `allowed`.
# Returns the updated row, or None if no such invoice exists.
def update_invoice_fields(conn: Connection, invoice_id: UUID, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    allowed = {"customer_name", "mobile_number"}
    assignments = []
    values = []
    for k, v in fields.items():
        if k in allowed:
            assignments.append(f"{k} = %s")
            values.append(v)
    if not assignments:
        return get_invoice(conn, invoice_id)
    sql_stmt = f"UPDATE invoices SET {', '.join(assignments)} WHERE id = %s RETURNING {INVOICE_COLUMNS}"
    with conn.cursor() as cur:
        cur.execute(sql_stmt, (*values, invoice_id))
        return cur.fetchone()


# Sets the absolute amount paid to date and recomputes the balance in the same
# statement, so left_amount can never drift from total_amount - paid_amount.
def set_paid_amount(conn: Connection, invoice_id: UUID, paid_amount: Decimal) -> Optional[Dict[str, Any]]:
    sql = f"""
    UPDATE invoices
    SET paid_amount = round(%(paid)s::numeric, 2),
        left_amount = total_amount - round(%(paid)s::numeric, 2)
    WHERE id = %(id)s
    RETURNING {INVOICE_COLUMNS};
    """
    with conn.cursor() as cur:
        cur.execute(sql, {"paid": paid_amount, "id": invoice_id})
        return cur.fetchone()


# Adds an increment to paid_amount atomically (no read-modify-write in Python).
def add_payment(conn: Connection, invoice_id: UUID, amount: Decimal) -> Optional[Dict[str, Any]]:
    sql = f"""
    UPDATE invoices
    SET paid_amount = paid_amount + round(%(amount)s::numeric, 2),
        left_amount = left_amount - round(%(amount)s::numeric, 2)
    WHERE id = %(id)s
    RETURNING {INVOICE_COLUMNS};
    """
    with conn.cursor() as cur:
        cur.execute(sql, {"amount": amount, "id": invoice_id})
        return cur.fetchone()


# Deletes an invoice. Returns True if a row was removed.
def delete_invoice(conn: Connection, invoice_id: UUID) -> bool:
    with conn.cursor() as cur:
        cur.execute("DELETE FROM invoices WHERE id = %s", (invoice_id,))
        return cur.rowcount > 0


# All invoice numbers, for the next-number scan.
def list_invoice_numbers(conn: Connection) -> List[Optional[str]]:
    with conn.cursor() as cur:
        cur.execute("SELECT invoice_no FROM invoices")
        return [row["invoice_no"] for row in cur.fetchall()]


def _mobile_key(expr: str) -> str:
    return f"lower(btrim({expr}, E' \\t\\r\\n\\f\\x0b'))"


# Money columns for aggregation, optionally narrowed to one customer.
# Mobile numbers match case-insensitively with surrounding whitespace
# (space, tab, CR, LF, FF, VT) ignored.
def list_balances(conn: Connection, mobile_number: Optional[str] = None) -> List[Dict[str, Any]]:
    query = """
        SELECT customer_name, mobile_number, total_amount, paid_amount, created_at
        FROM invoices
    """
    params: List[Any] = []
    if mobile_number is not None:
        query += f" WHERE {_mobile_key('mobile_number')} = {_mobile_key('%s')}"
        params.append(mobile_number)
    query += " ORDER BY created_at DESC"
    with conn.cursor() as cur:
        cur.execute(query, params)
        return cur.fetchall()
