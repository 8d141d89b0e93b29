import logging
from typing import Any, Dict, List, Optional

from psycopg import Connection

from ..errors import InvariantViolation, NotFoundError
from ..models.invoice import Invoice, InvoiceCreate, InvoicePatch
from ..repos import invoices as invoices_repo
from .common import parse_id, to_cents

logger = logging.getLogger(__name__)


def to_invoice(row: Dict[str, Any]) -> Invoice:
    """
    Build the API model from a stored row and re-check the balance.

    The table carries the same CHECK constraint; this catches rows written
    outside the repo functions (manual fixes, old imports).
    """
    invoice = Invoice.model_validate(row)
    if invoice.left_amount != invoice.total_amount - invoice.paid_amount:
        logger.error(
            "Invoice %s balance mismatch: total=%s paid=%s left=%s",
            invoice.id, invoice.total_amount, invoice.paid_amount, invoice.left_amount,
        )
        raise InvariantViolation("Invoice balance is inconsistent")
    return invoice


def _require(row: Optional[Dict[str, Any]]) -> Invoice:
    if row is None:
        raise NotFoundError("Invoice not found")
    return to_invoice(row)


def create_invoice(conn: Connection, draft: InvoiceCreate) -> Invoice:
    payload = draft.model_dump(exclude={"items"})
    payload["total_amount"] = to_cents(draft.total_amount)
    # items are embedded as stored on the wire, camelCase keys included
    payload["items"] = [item.model_dump(mode="json", by_alias=True) for item in draft.items]
    invoice = to_invoice(invoices_repo.insert_invoice(conn, payload))
    logger.info(
        "Created invoice %s (no=%s, total=%s) for %s",
        invoice.id, invoice.invoice_no, invoice.total_amount, invoice.mobile_number,
    )
    return invoice


def list_invoices(conn: Connection) -> List[Invoice]:
    return [to_invoice(row) for row in invoices_repo.list_invoices(conn)]


def get_invoice(conn: Connection, invoice_id: str) -> Invoice:
    return _require(invoices_repo.get_invoice(conn, parse_id(invoice_id, "Invoice")))


def update_invoice(conn: Connection, invoice_id: str, patch: InvoicePatch) -> Invoice:
    fields = patch.model_dump(exclude_none=True)
    invoice = _require(
        invoices_repo.update_invoice_fields(conn, parse_id(invoice_id, "Invoice"), fields)
    )
    if fields:
        logger.info("Updated invoice %s fields %s", invoice.id, sorted(fields))
    return invoice


def delete_invoice(conn: Connection, invoice_id: str) -> None:
    uid = parse_id(invoice_id, "Invoice")
    if not invoices_repo.delete_invoice(conn, uid):
        logger.info("Invoice %s not found for deletion", invoice_id)
        raise NotFoundError("Invoice not found")
    logger.info("Deleted invoice %s", uid)
