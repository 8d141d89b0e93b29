import logging
from decimal import Decimal

from psycopg import Connection

from ..errors import NotFoundError
from ..models.invoice import Invoice
from ..repos import invoices as invoices_repo
from .common import parse_id, to_cents
from .invoices import to_invoice

logger = logging.getLogger(__name__)


def set_paid_amount(conn: Connection, invoice_id: str, paid_amount: Decimal) -> Invoice:
    """
    Replace the amount paid to date and recompute the outstanding balance.

    `paid_amount` is the new absolute total, not an increment. It is not
    bounded: overpaying leaves a negative balance and a negative amount
    raises the balance above the invoice total. Concurrent callers race and
    the last write wins; use `record_payment` to add to the current value.
    """
    uid = parse_id(invoice_id, "Invoice")
    row = invoices_repo.set_paid_amount(conn, uid, to_cents(paid_amount))
    if row is None:
        raise NotFoundError("Invoice not found")
    invoice = to_invoice(row)
    logger.info(
        "Invoice %s paid set to %s (left %s)", invoice.id, invoice.paid_amount, invoice.left_amount
    )
    return invoice


def record_payment(conn: Connection, invoice_id: str, amount: Decimal) -> Invoice:
    """Add `amount` to the paid total in a single UPDATE."""
    uid = parse_id(invoice_id, "Invoice")
    row = invoices_repo.add_payment(conn, uid, to_cents(amount))
    if row is None:
        raise NotFoundError("Invoice not found")
    invoice = to_invoice(row)
    logger.info(
        "Invoice %s payment of %s recorded (paid %s, left %s)",
        invoice.id, to_cents(amount), invoice.paid_amount, invoice.left_amount,
    )
    return invoice
