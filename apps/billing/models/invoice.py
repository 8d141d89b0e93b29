from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional
from uuid import UUID

from pydantic import AliasChoices, Field, computed_field, field_validator

from .base import Amount, CamelModel, Money

PAID = "Paid"
PARTIAL = "Partial"
UNPAID = "Unpaid"


def payment_status(paid_amount: Decimal, left_amount: Decimal) -> str:
    if left_amount <= 0:
        return PAID
    if paid_amount > 0:
        return PARTIAL
    return UNPAID


class InvoiceItem(CamelModel):
    description: str = Field(..., min_length=1)
    quantity: Money = Field(
        ...,
        validation_alias=AliasChoices("quantity", "qty"),
        serialization_alias="quantity",
    )
    hsn_code: Optional[str] = None
    unit_price: Money
    # caller-computed quantity * unit_price; stored as sent
    line_total: Money = Field(
        ...,
        validation_alias=AliasChoices("lineTotal", "line_total", "total"),
        serialization_alias="lineTotal",
    )


class InvoiceCreate(CamelModel):
    customer_name: str = Field(..., min_length=1)
    mobile_number: str = Field(..., min_length=1)
    total_amount: Money
    items: List[InvoiceItem] = Field(default_factory=list)
    invoice_no: Optional[str] = None
    purchase_date: Optional[datetime] = None
    invoice_date: Optional[datetime] = None
    due_date: Optional[datetime] = None

    @field_validator("invoice_no", mode="before")
    @classmethod
    def _invoice_no_as_text(cls, value: Any) -> Any:
        # the numbering endpoint hands out integers; clients echo them back
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(int(value)) if float(value).is_integer() else str(value)
        return value

    @field_validator("customer_name", "mobile_number")
    @classmethod
    def _strip_identity(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class InvoicePatch(CamelModel):
    """Only identity fields are editable; money fields have their own endpoints."""

    customer_name: Optional[str] = None
    mobile_number: Optional[str] = None

    @field_validator("customer_name", "mobile_number")
    @classmethod
    def _strip_identity(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class PaymentUpdate(CamelModel):
    # new absolute total paid to date, not an increment
    paid_amount: Money


class PaymentIncrement(CamelModel):
    amount: Money


class Invoice(CamelModel):
    id: UUID
    customer_name: str
    mobile_number: str
    invoice_no: Optional[str] = None
    purchase_date: datetime
    invoice_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    items: List[InvoiceItem] = Field(default_factory=list)
    total_amount: Money
    paid_amount: Money
    left_amount: Money
    created_at: datetime

    @computed_field
    @property
    def status(self) -> str:
        return payment_status(self.paid_amount, self.left_amount)


class NextInvoiceNumber(CamelModel):
    next_invoice_no: int


class Summary(CamelModel):
    total_sales: Amount = Decimal("0")
    total_paid: Amount = Decimal("0")
    total_pending: Amount = Decimal("0")


class CustomerRollup(CamelModel):
    mobile_number: str
    customer_name: str
    invoice_count: int
    total_sales: Amount
    total_paid: Amount
    total_pending: Amount


class Message(CamelModel):
    message: str
