import re
from typing import Iterable, Optional

from psycopg import Connection

from ..repos import invoices as invoices_repo

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_invoice_no(value: Optional[str]) -> Optional[int]:
    """
    Read the leading integer of an invoice number ("42", " 7", "12-A").

    Returns None when the value does not start with digits, so numbers such as
    "INV-0042" do not take part in numbering.
    """
    if value is None:
        return None
    match = _LEADING_INT.match(str(value))
    if not match:
        return None
    return int(match.group(1))


def next_invoice_number(invoice_nos: Iterable[Optional[str]]) -> int:
    highest = 0
    for value in invoice_nos:
        number = parse_invoice_no(value)
        if number is not None and number > highest:
            highest = number
    return highest + 1


def suggest_next_invoice_number(conn: Connection) -> int:
    # Advisory only: nothing is reserved, two clients can get the same number.
    return next_invoice_number(invoices_repo.list_invoice_numbers(conn))
