from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query
from psycopg import Connection

from ..db import get_conn
from ..models.invoice import (
    CustomerRollup,
    Invoice,
    InvoiceCreate,
    InvoicePatch,
    Message,
    NextInvoiceNumber,
    PaymentIncrement,
    PaymentUpdate,
    Summary,
)
from ..models.tax import TaxBreakdown, TaxPreviewRequest
from ..services import invoices as invoice_service
from ..services import payments as payment_service
from ..services import summary as summary_service
from ..services.numbering import suggest_next_invoice_number
from ..services.tax import compute_totals

router = APIRouter(prefix="/invoice", tags=["invoices"])

# Fixed paths are declared before "/{invoice_id}" so they are matched first.

@router.post("", response_model=Invoice, status_code=201)
def create_invoice(draft: InvoiceCreate = Body(...), conn: Connection = Depends(get_conn)):
    return invoice_service.create_invoice(conn, draft)

# List invoices, newest first
@router.get("", response_model=List[Invoice])
def list_invoices(conn: Connection = Depends(get_conn)):
    return invoice_service.list_invoices(conn)

# Suggested number for a new invoice form; not reserved
@router.get("/next-number", response_model=NextInvoiceNumber)
def next_number(conn: Connection = Depends(get_conn)):
    return NextInvoiceNumber(next_invoice_no=suggest_next_invoice_number(conn))

# Server-side preview of the GST calculation; nothing is stored
@router.post("/tax-preview", response_model=TaxBreakdown)
def tax_preview(payload: TaxPreviewRequest = Body(...)):
    return compute_totals(payload.items, use_integrated_tax=payload.use_integrated_tax)

@router.get("/customer-summary", response_model=Summary)
def customer_summary(
    mobile_number: Optional[str] = Query(None, alias="mobileNumber"),
    conn: Connection = Depends(get_conn),
):
    return summary_service.summary_for_customer(conn, mobile_number)

@router.get("/all-summary", response_model=Summary)
def all_summary(conn: Connection = Depends(get_conn)):
    return summary_service.summary_all(conn)

# Derived customers (grouped by mobile number), biggest spenders first
@router.get("/customers", response_model=List[CustomerRollup])
def list_customers(
    limit: Optional[int] = Query(None, ge=1, le=500),
    conn: Connection = Depends(get_conn),
):
    return summary_service.list_customers(conn, limit=limit)

@router.get("/{invoice_id}", response_model=Invoice)
def get_invoice(invoice_id: str, conn: Connection = Depends(get_conn)):
    return invoice_service.get_invoice(conn, invoice_id)

# Identity fields only; money moves through the payment endpoints
@router.put("/{invoice_id}", response_model=Invoice)
def update_invoice(invoice_id: str, patch: InvoicePatch = Body(...), conn: Connection = Depends(get_conn)):
    return invoice_service.update_invoice(conn, invoice_id, patch)

# paidAmount is the new absolute total paid, not a delta
@router.put("/{invoice_id}/payment", response_model=Invoice)
def update_payment(invoice_id: str, payment: PaymentUpdate = Body(...), conn: Connection = Depends(get_conn)):
    return payment_service.set_paid_amount(conn, invoice_id, payment.paid_amount)

# Incremental payment, applied atomically
@router.post("/{invoice_id}/payments", response_model=Invoice)
def record_payment(invoice_id: str, payment: PaymentIncrement = Body(...), conn: Connection = Depends(get_conn)):
    return payment_service.record_payment(conn, invoice_id, payment.amount)

@router.delete("/{invoice_id}", response_model=Message)
def delete_invoice(invoice_id: str, conn: Connection = Depends(get_conn)):
    invoice_service.delete_invoice(conn, invoice_id)
    return Message(message="Invoice deleted successfully")
