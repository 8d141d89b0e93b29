from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from psycopg import Connection

from ..errors import ValidationError
from ..models.invoice import CustomerRollup, Summary
from ..repos import invoices as invoices_repo


# Same characters the SQL side trims in repos.invoices.list_balances.
MOBILE_TRIM = " \t\r\n\f\v"


def normalize_mobile(mobile_number: str) -> str:
    return mobile_number.strip(MOBILE_TRIM).casefold()


def summarize(rows: Iterable[Dict[str, Any]]) -> Summary:
    """Sum sales and payments; pending is whatever of the sales is still unpaid."""
    total_sales = Decimal("0")
    total_paid = Decimal("0")
    for row in rows:
        total_sales += Decimal(row["total_amount"])
        total_paid += Decimal(row["paid_amount"])
    return Summary(
        total_sales=total_sales,
        total_paid=total_paid,
        total_pending=total_sales - total_paid,
    )


def customer_rollups(rows: Iterable[Dict[str, Any]]) -> List[CustomerRollup]:
    """
    Group invoices into derived customers keyed by mobile number.

    There is no customer table; the display name is taken from the customer's
    most recent invoice. Rows are expected newest first, as `list_balances`
    returns them. Result is ordered by total sales, largest first.
    """
    grouped: Dict[str, Dict[str, Any]] = {}
    for row in rows:
        key = normalize_mobile(row["mobile_number"])
        entry = grouped.get(key)
        if entry is None:
            entry = grouped[key] = {
                "mobile_number": row["mobile_number"].strip(),
                "customer_name": row["customer_name"],
                "invoice_count": 0,
                "total_sales": Decimal("0"),
                "total_paid": Decimal("0"),
            }
        entry["invoice_count"] += 1
        entry["total_sales"] += Decimal(row["total_amount"])
        entry["total_paid"] += Decimal(row["paid_amount"])

    rollups = [
        CustomerRollup(total_pending=e["total_sales"] - e["total_paid"], **e)
        for e in grouped.values()
    ]
    rollups.sort(key=lambda r: r.total_sales, reverse=True)
    return rollups


def summary_for_customer(conn: Connection, mobile_number: Optional[str]) -> Summary:
    if mobile_number is None or not mobile_number.strip():
        raise ValidationError("Mobile Number is required")
    return summarize(invoices_repo.list_balances(conn, mobile_number=mobile_number))


def summary_all(conn: Connection) -> Summary:
    return summarize(invoices_repo.list_balances(conn))


def list_customers(conn: Connection, limit: Optional[int] = None) -> List[CustomerRollup]:
    rollups = customer_rollups(invoices_repo.list_balances(conn))
    return rollups[:limit] if limit is not None else rollups
