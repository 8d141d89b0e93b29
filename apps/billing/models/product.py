from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import Field, computed_field, field_validator

from .base import Amount, CamelModel, Money
from ..services import stock


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    # an empty barcode means "no barcode", not a second product with ""
    if value is None:
        return None
    value = value.strip()
    return value or None


class ProductCreate(CamelModel):
    name: str = Field(..., min_length=1)
    default_price: Money
    description: Optional[str] = None
    hsn_code: Optional[str] = None
    barcode: Optional[str] = None
    qr_code: Optional[str] = None
    unit: str = "pcs"
    tax_rate: Money = Decimal("0")
    quantity: Money = Decimal("0")
    reorder_level: Money = Decimal("5")

    @field_validator("barcode", "qr_code")
    @classmethod
    def _codes(cls, value: Optional[str]) -> Optional[str]:
        return _blank_to_none(value)

    @field_validator("name")
    @classmethod
    def _name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class ProductPatch(CamelModel):
    """Partial update; only keys present in the request body are applied."""

    name: Optional[str] = None
    default_price: Optional[Money] = None
    description: Optional[str] = None
    hsn_code: Optional[str] = None
    barcode: Optional[str] = None
    qr_code: Optional[str] = None
    unit: Optional[str] = None
    tax_rate: Optional[Money] = None
    quantity: Optional[Money] = None
    reorder_level: Optional[Money] = None

    @field_validator("barcode", "qr_code")
    @classmethod
    def _codes(cls, value: Optional[str]) -> Optional[str]:
        return _blank_to_none(value)

    @field_validator("name")
    @classmethod
    def _name(cls, value: Optional[str]) -> Optional[str]:
        # blank names are rejected by the service with its own message
        return value.strip() if value is not None else None


class Restock(CamelModel):
    quantity: Money


class Product(CamelModel):
    id: UUID
    name: str
    default_price: Money
    description: Optional[str] = None
    hsn_code: Optional[str] = None
    barcode: Optional[str] = None
    qr_code: Optional[str] = None
    unit: Optional[str] = "pcs"
    tax_rate: Money = Decimal("0")
    quantity: Money = Decimal("0")
    reorder_level: Money = Decimal("5")
    created_at: datetime

    @computed_field(alias="stockStatus")
    @property
    def stock_status(self) -> str:
        return stock.stock_status(self.quantity, self.reorder_level)


class LowStockReport(CamelModel):
    out_of_stock_count: int
    low_stock_count: int
    estimated_restock_cost: Amount
    items: List[Product]
