from decimal import Decimal, InvalidOperation, localcontext
from typing import Any, Iterable, Mapping

from ..models.base import MONEY_LIMIT
from ..models.tax import TaxBreakdown
from .common import to_cents

# GST rates applied to every invoice; Product.tax_rate is not consulted.
INTEGRATED_TAX_RATE = Decimal("0.18")
HALF_TAX_RATE = Decimal("0.09")

ZERO = Decimal("0")

_QUANTITY_KEYS = ("quantity", "qty")
_UNIT_PRICE_KEYS = ("unitPrice", "unit_price")

def to_decimal(value: Any) -> Decimal:
    """Coerce a loosely-typed numeric input to Decimal; anything unusable is 0."""
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        number = value
    else:
        try:
            number = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return ZERO
    if not number.is_finite() or abs(number) >= MONEY_LIMIT:
        return ZERO
    return number

def _item_value(item: Any, keys: Iterable[str]) -> Any:
    for key in keys:
        if isinstance(item, Mapping):
            if key in item:
                return item[key]
        elif hasattr(item, key):
            return getattr(item, key)
    return None


def compute_totals(items: Iterable[Any], use_integrated_tax: bool = False) -> TaxBreakdown:
    """
    Compute subtotal, GST split and grand total for a list of line items.

    Items may be mappings (camelCase or snake_case keys) or objects exposing
    `quantity`/`unit_price`. Missing or malformed numbers count as 0, so this
    never raises. Totals are accumulated at full precision and only the
    returned figures are rounded to cents. Inputs at or beyond MONEY_LIMIT
    count as 0; the wider context holds the product of two in-range values.
    """
    with localcontext() as ctx:
        ctx.prec = 60
        subtotal = ZERO
        for item in items or ():
            quantity = to_decimal(_item_value(item, _QUANTITY_KEYS))
            unit_price = to_decimal(_item_value(item, _UNIT_PRICE_KEYS))
            subtotal += quantity * unit_price

        state_tax = central_tax = integrated_tax = ZERO
        if use_integrated_tax:
            integrated_tax = subtotal * INTEGRATED_TAX_RATE
            total_tax = integrated_tax
        else:
            half_tax = subtotal * HALF_TAX_RATE
            state_tax = half_tax
            central_tax = half_tax
            total_tax = state_tax + central_tax

        grand_total = subtotal + total_tax

        return TaxBreakdown(
            subtotal=to_cents(subtotal),
            state_tax=to_cents(state_tax),
            central_tax=to_cents(central_tax),
            integrated_tax=to_cents(integrated_tax),
            total_tax=to_cents(total_tax),
            grand_total=to_cents(grand_total),
        )
