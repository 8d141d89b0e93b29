from decimal import Decimal

from apps.billing.services.tax import compute_totals, to_decimal


def test_intra_state_splits_into_cgst_and_sgst():
    result = compute_totals([{"qty": 2, "unitPrice": 100}])

    assert result.subtotal == Decimal("200.00")
    assert result.state_tax == Decimal("18.00")
    assert result.central_tax == Decimal("18.00")
    assert result.integrated_tax == Decimal("0.00")
    assert result.total_tax == Decimal("36.00")
    assert result.grand_total == Decimal("236.00")


def test_inter_state_uses_single_igst():
    result = compute_totals([{"qty": 2, "unitPrice": 100}], use_integrated_tax=True)

    assert result.subtotal == Decimal("200.00")
    assert result.integrated_tax == Decimal("36.00")
    assert result.state_tax == Decimal("0.00")
    assert result.central_tax == Decimal("0.00")
    assert result.total_tax == Decimal("36.00")
    assert result.grand_total == Decimal("236.00")


def test_malformed_numbers_count_as_zero():
    items = [
        {"quantity": "abc", "unitPrice": 50},
        {"quantity": 3},
        {"quantity": None, "unitPrice": None},
        {"quantity": float("nan"), "unitPrice": 10},
        {"quantity": "1", "unit_price": "19.99"},
    ]
    result = compute_totals(items)

    assert result.subtotal == Decimal("19.99")
    assert result.grand_total == Decimal("23.59")


def test_no_items_is_all_zero():
    result = compute_totals([])
    assert result.grand_total == Decimal("0.00")
    assert compute_totals(None).subtotal == Decimal("0.00")


def test_rounding_happens_once_on_the_totals():
    # 3 x 33.33 = 99.99; 9% = 8.9991 each side
    result = compute_totals([{"quantity": 3, "unitPrice": "33.33"}])

    assert result.state_tax == Decimal("9.00")
    assert result.total_tax == Decimal("18.00")
    assert result.grand_total == Decimal("117.99")


def test_accepts_objects_with_attributes():
    class Line:
        quantity = 4
        unit_price = Decimal("2.50")

    assert compute_totals([Line()]).subtotal == Decimal("10.00")


def test_to_decimal_rejects_booleans_and_infinity():
    assert to_decimal(True) == 0
    assert to_decimal("inf") == 0
    assert to_decimal(" 12.5 ") == Decimal("12.5")


def test_oversized_numbers_count_as_zero():
    items = [
        {"quantity": "1e30", "unitPrice": 1},
        {"quantity": 1, "unitPrice": 10**20},
        {"quantity": 2, "unitPrice": 5},
    ]
    result = compute_totals(items)

    assert result.subtotal == Decimal("10.00")
    assert result.grand_total == Decimal("11.80")


def test_largest_storable_values_do_not_overflow():
    top = "9999999999999999.99"
    result = compute_totals([{"quantity": top, "unitPrice": top}], use_integrated_tax=True)

    assert result.subtotal > Decimal("1e31")
    assert result.grand_total > result.subtotal
