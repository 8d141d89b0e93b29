from typing import Any, List

from pydantic import Field

from .base import Amount, CamelModel


class TaxPreviewRequest(CamelModel):
    # items are left loose; the calculator coerces whatever it is given
    items: List[Any] = Field(default_factory=list)
    use_integrated_tax: bool = False


class TaxBreakdown(CamelModel):
    subtotal: Amount
    state_tax: Amount
    central_tax: Amount
    integrated_tax: Amount
    total_tax: Amount
    grand_total: Amount
