from decimal import Decimal, ROUND_HALF_UP
from uuid import UUID

from ..errors import NotFoundError

CENTS = Decimal("0.01")


def parse_id(value, label: str) -> UUID:
    """Turn a path id into a UUID; ids that cannot exist are simply not found."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise NotFoundError(f"{label} not found") from None


def to_cents(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)
