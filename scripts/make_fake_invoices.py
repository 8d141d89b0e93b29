#!/usr/bin/env python3
"""
make_fake_invoices.py

Generate demo GST invoices for the billing API.
- JSON output: one create-request body per file (POST /invoice shape)
- Database output: invoices written through the service layer, with a
  random share of them partly or fully paid
- Edge cases: repeat customers, overpayments, non-numeric invoice numbers

Usage examples:
  python scripts/make_fake_invoices.py --json data/samples/invoices_json --n 20
  python scripts/make_fake_invoices.py --db --n 50 --igst-share 0.3

Dependencies:
  pip install faker

This script is deterministic per --seed to make debugging easier.
"""
from __future__ import annotations
import argparse
import json
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path
from random import Random
from typing import List

try:
    from faker import Faker
except Exception as e:
    raise SystemExit("Please install 'faker' (pip install faker)")

from apps.billing.services.tax import compute_totals

CATALOG = [
    ("8501", "Ceiling Fan 1200mm", 1850.0),
    ("8536", "Modular Switch 6A", 45.0),
    ("8544", "Copper Wire 1.5 sqmm (90m)", 1390.0),
    ("8539", "LED Bulb 9W", 99.0),
    ("8516", "Electric Kettle 1.5L", 749.0),
    ("8414", "Exhaust Fan 150mm", 920.0),
    ("9405", "LED Batten 20W", 310.0),
]


@dataclass
class LineItem:
    description: str
    hsn_code: str
    quantity: int
    unit_price: float

    @property
    def line_total(self) -> float:
        return round(self.quantity * self.unit_price, 2)

    def as_body(self) -> dict:
        return {
            "description": self.description,
            "hsnCode": self.hsn_code,
            "quantity": self.quantity,
            "unitPrice": self.unit_price,
            "lineTotal": self.line_total,
        }


@dataclass
class FakeInvoice:
    invoice_no: str
    customer_name: str
    mobile_number: str
    purchase_date: datetime
    items: List[LineItem]
    use_igst: bool
    paid_share: float

    @property
    def total_amount(self) -> Decimal:
        breakdown = compute_totals(
            [{"quantity": li.quantity, "unitPrice": li.unit_price} for li in self.items],
            use_integrated_tax=self.use_igst,
        )
        return breakdown.grand_total

    def as_body(self) -> dict:
        return {
            "invoiceNo": self.invoice_no,
            "customerName": self.customer_name,
            "mobileNumber": self.mobile_number,
            "purchaseDate": self.purchase_date.isoformat(),
            "dueDate": (self.purchase_date + timedelta(days=15)).isoformat(),
            "items": [li.as_body() for li in self.items],
            "totalAmount": float(self.total_amount),
        }


def random_line_item(rng: Random) -> LineItem:
    hsn, desc, base = rng.choice(CATALOG)
    qty = rng.randint(1, 10)
    unit_price = round(base * (0.9 + rng.random() * 0.2), 2)  # ±10%
    return LineItem(description=desc, hsn_code=hsn, quantity=qty, unit_price=unit_price)


def build_invoices(rng: Random, fake: Faker, n: int, igst_share: float) -> List[FakeInvoice]:
    # a small customer pool so summaries have repeat buyers
    customers = [(fake.name(), fake.msisdn()[-10:]) for _ in range(max(1, n // 3))]
    invoices: List[FakeInvoice] = []
    now = datetime.now(timezone.utc)
    for i in range(n):
        name, mobile = rng.choice(customers)
        number = str(i + 1)
        if rng.random() < 0.05:
            number = f"MANUAL-{i + 1}"  # ignored by next-number suggestions
        invoices.append(FakeInvoice(
            invoice_no=number,
            customer_name=name,
            mobile_number=mobile,
            purchase_date=now - timedelta(days=rng.randint(0, 90)),
            items=[random_line_item(rng) for _ in range(rng.randint(1, 6))],
            use_igst=rng.random() < igst_share,
            # unpaid, partial, paid, and the occasional overpayment
            paid_share=rng.choice([0.0, 0.0, 0.25, 0.5, 1.0, 1.0, 1.1]),
        ))
    return invoices


def write_json(outdir: Path, invoices: List[FakeInvoice]) -> None:
    outdir.mkdir(parents=True, exist_ok=True)
    for inv in invoices:
        path = outdir / f"invoice_{inv.invoice_no}.json"
        path.write_text(json.dumps(inv.as_body(), indent=2))


def write_db(invoices: List[FakeInvoice]) -> None:
    from apps.billing.db import pool
    from apps.billing.models.invoice import InvoiceCreate
    from apps.billing.services.invoices import create_invoice
    from apps.billing.services.payments import set_paid_amount

    pool.open(wait=True)
    try:
        with pool.connection() as conn:
            for inv in invoices:
                created = create_invoice(conn, InvoiceCreate.model_validate(inv.as_body()))
                if inv.paid_share:
                    paid = created.total_amount * Decimal(str(inv.paid_share))
                    set_paid_amount(conn, str(created.id), paid)
    finally:
        pool.close()


def main() -> None:
    ap = argparse.ArgumentParser(description="Generate demo GST invoices")
    ap.add_argument("--json", type=Path, help="Output directory for per-invoice JSON files")
    ap.add_argument("--db", action="store_true", help="Insert the invoices into DATABASE_URL")
    ap.add_argument("--n", type=int, default=12, help="Number of invoices to generate")
    ap.add_argument("--igst-share", type=float, default=0.2, help="Fraction of inter-state (IGST) invoices")
    ap.add_argument("--seed", type=int, default=42, help="RNG seed for reproducibility")
    args = ap.parse_args()

    rng = Random(args.seed)
    fake = Faker("en_IN")
    Faker.seed(args.seed)

    invoices = build_invoices(rng, fake, args.n, args.igst_share)

    if args.json:
        write_json(args.json, invoices)
        print(f"[ok] Wrote {len(invoices)} JSON files to {args.json}")

    if args.db:
        write_db(invoices)
        print(f"[ok] Inserted {len(invoices)} invoices")

    if not (args.json or args.db):
        print("No outputs selected. Use --json/--db.")


if __name__ == "__main__":
    main()
