from decimal import Decimal
from typing import Any, Dict, Iterable, List

from ..settings import settings
from .tax import to_decimal

CRITICAL = "Critical"
LOW_STOCK = "Low Stock"
IN_STOCK = "In Stock"

_PRIORITY = {CRITICAL: 1, LOW_STOCK: 2, IN_STOCK: 3}


def effective_reorder_level(reorder_level: Any) -> Decimal:
    """A missing, zero or negative reorder level falls back to the default."""
    level = to_decimal(reorder_level)
    if level <= 0:
        return Decimal(settings.DEFAULT_REORDER_LEVEL)
    return level


def stock_status(quantity: Any, reorder_level: Any) -> str:
    qty = to_decimal(quantity)
    if qty <= 0:
        return CRITICAL
    if qty <= effective_reorder_level(reorder_level):
        return LOW_STOCK
    return IN_STOCK


def restock_cost(quantity: Any, reorder_level: Any, unit_price: Any) -> Decimal:
    """Cost of topping a product up to twice its reorder level."""
    qty = to_decimal(quantity)
    reorder = effective_reorder_level(reorder_level)
    if qty > reorder:
        return Decimal("0")
    return (reorder * 2 - qty) * to_decimal(unit_price)


def low_stock_report(products: Iterable[Any]) -> Dict[str, Any]:
    """
    Summarise catalog stock for the low-stock alerts view.

    Returns counts of out-of-stock and low-stock products, the estimated cost
    of restocking every product at or under its reorder level (priced at
    `default_price`), and the alerting products ordered Critical first.
    """
    out_of_stock = 0
    low_stock = 0
    cost = Decimal("0")
    alerts: List[Any] = []

    for product in products:
        status = stock_status(product.quantity, product.reorder_level)
        if status == CRITICAL:
            out_of_stock += 1
        elif status == LOW_STOCK:
            low_stock += 1
        if status != IN_STOCK:
            alerts.append(product)
        cost += restock_cost(product.quantity, product.reorder_level, product.default_price)

    # sorted() is stable, so newest-first order survives within a status
    alerts = sorted(alerts, key=lambda p: _PRIORITY[stock_status(p.quantity, p.reorder_level)])

    return {
        "out_of_stock_count": out_of_stock,
        "low_stock_count": low_stock,
        "estimated_restock_cost": cost,
        "items": alerts,
    }
