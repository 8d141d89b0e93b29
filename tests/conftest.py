import copy
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from psycopg import errors as pg_errors

from apps.billing.db import get_conn
from apps.billing.main import app
from apps.billing.models.base import MONEY_LIMIT
from apps.billing.repos import invoices as invoices_repo
from apps.billing.repos import products as products_repo
from apps.billing.services.summary import normalize_mobile


def _numeric(value):
    # NUMERIC(18,2) overflow, as Postgres reports it
    if abs(value) >= MONEY_LIMIT:
        raise pg_errors.NumericValueOutOfRange("numeric field overflow")
    return value


class InMemoryStore:
    """
    Stand-in for the two Postgres tables, exposing the same functions as the
    repo modules. Rows are plain dicts shaped like `dict_row` results.
    """

    def __init__(self):
        self.invoices = {}
        self.products = {}
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _now(self):
        self._clock += timedelta(seconds=1)
        return self._clock

    # --- invoices -------------------------------------------------------

    def insert_invoice(self, conn, payload):
        now = self._now()
        total = Decimal(payload["total_amount"])
        row = {
            "id": uuid.uuid4(),
            "customer_name": payload["customer_name"],
            "mobile_number": payload["mobile_number"],
            "invoice_no": payload.get("invoice_no"),
            "purchase_date": payload.get("purchase_date") or now,
            "invoice_date": payload.get("invoice_date") or now,
            "due_date": payload.get("due_date"),
            "items": copy.deepcopy(payload.get("items") or []),
            "total_amount": total,
            "paid_amount": Decimal("0"),
            "left_amount": total,
            "created_at": now,
        }
        self.invoices[row["id"]] = row
        return copy.deepcopy(row)

    def list_invoices(self, conn):
        rows = sorted(self.invoices.values(), key=lambda r: r["created_at"], reverse=True)
        return copy.deepcopy(rows)

    def get_invoice(self, conn, invoice_id):
        row = self.invoices.get(invoice_id)
        return copy.deepcopy(row) if row else None

    def update_invoice_fields(self, conn, invoice_id, fields):
        row = self.invoices.get(invoice_id)
        if row is None:
            return None
        for key in ("customer_name", "mobile_number"):
            if key in fields:
                row[key] = fields[key]
        return copy.deepcopy(row)

    def set_paid_amount(self, conn, invoice_id, paid_amount):
        row = self.invoices.get(invoice_id)
        if row is None:
            return None
        left = _numeric(row["total_amount"] - paid_amount)
        row["paid_amount"] = paid_amount
        row["left_amount"] = left
        return copy.deepcopy(row)

    def add_payment(self, conn, invoice_id, amount):
        row = self.invoices.get(invoice_id)
        if row is None:
            return None
        paid = _numeric(row["paid_amount"] + amount)
        left = _numeric(row["left_amount"] - amount)
        row["paid_amount"] = paid
        row["left_amount"] = left
        return copy.deepcopy(row)

    def delete_invoice(self, conn, invoice_id):
        return self.invoices.pop(invoice_id, None) is not None

    def list_invoice_numbers(self, conn):
        return [row["invoice_no"] for row in self.invoices.values()]

    def list_balances(self, conn, mobile_number=None):
        rows = self.list_invoices(conn)
        if mobile_number is not None:
            wanted = normalize_mobile(mobile_number)
            rows = [r for r in rows if normalize_mobile(r["mobile_number"]) == wanted]
        return rows

    # --- products -------------------------------------------------------

    def _check_unique(self, candidate, exclude_id=None):
        for other in self.products.values():
            if other["id"] == exclude_id:
                continue
            for key in ("barcode", "qr_code"):
                if candidate.get(key) is not None and candidate.get(key) == other.get(key):
                    raise pg_errors.UniqueViolation(f"duplicate key value violates unique constraint on {key}")

    def insert_product(self, conn, payload):
        row = {
            "id": uuid.uuid4(),
            "name": payload["name"],
            "description": payload.get("description"),
            "hsn_code": payload.get("hsn_code"),
            "default_price": payload["default_price"],
            "barcode": payload.get("barcode"),
            "qr_code": payload.get("qr_code"),
            "unit": payload.get("unit", "pcs"),
            "tax_rate": payload.get("tax_rate", Decimal("0")),
            "quantity": payload.get("quantity", Decimal("0")),
            "reorder_level": payload.get("reorder_level", Decimal("5")),
            "created_at": self._now(),
        }
        self._check_unique(row)
        self.products[row["id"]] = row
        return copy.deepcopy(row)

    def list_products(self, conn):
        rows = sorted(self.products.values(), key=lambda r: r["created_at"], reverse=True)
        return copy.deepcopy(rows)

    def get_product(self, conn, product_id):
        row = self.products.get(product_id)
        return copy.deepcopy(row) if row else None

    def find_product_by_code(self, conn, code):
        for row in self.list_products(conn):
            if row["barcode"] == code or row["qr_code"] == code:
                return row
        return None

    def find_barcode_owner(self, conn, barcode, exclude_id=None):
        for row in self.products.values():
            if row["barcode"] == barcode and row["id"] != exclude_id:
                return row["id"]
        return None

    def update_product_fields(self, conn, product_id, fields):
        row = self.products.get(product_id)
        if row is None:
            return None
        updated = {**row, **{k: v for k, v in fields.items() if k in products_repo.EDITABLE_FIELDS}}
        self._check_unique(updated, exclude_id=product_id)
        self.products[product_id] = updated
        return copy.deepcopy(updated)

    def restock_product(self, conn, product_id, quantity):
        row = self.products.get(product_id)
        if row is None:
            return None
        row["quantity"] = _numeric(row["quantity"] + quantity)
        return copy.deepcopy(row)

    def delete_product(self, conn, product_id):
        return self.products.pop(product_id, None) is not None


INVOICE_REPO_FUNCTIONS = (
    "insert_invoice", "list_invoices", "get_invoice", "update_invoice_fields",
    "set_paid_amount", "add_payment", "delete_invoice", "list_invoice_numbers",
    "list_balances",
)
PRODUCT_REPO_FUNCTIONS = (
    "insert_product", "list_products", "get_product", "find_product_by_code",
    "find_barcode_owner", "update_product_fields", "restock_product", "delete_product",
)


@pytest.fixture
def store(monkeypatch):
    store = InMemoryStore()
    for name in INVOICE_REPO_FUNCTIONS:
        monkeypatch.setattr(invoices_repo, name, getattr(store, name))
    for name in PRODUCT_REPO_FUNCTIONS:
        monkeypatch.setattr(products_repo, name, getattr(store, name))
    return store


@pytest.fixture
def client(store):
    def fake_conn():
        yield None

    app.dependency_overrides[get_conn] = fake_conn
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_invoice(client):
    def _make(**overrides):
        body = {
            "customerName": "Ravi Kumar",
            "mobileNumber": "9999999999",
            "invoiceNo": "1",
            "items": [
                {"description": "LED Bulb 9W", "quantity": 2, "unitPrice": 100, "lineTotal": 200, "hsnCode": "8539"},
            ],
            "totalAmount": 236,
        }
        body.update(overrides)
        resp = client.post("/invoice", json=body)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make


@pytest.fixture
def make_product(client):
    def _make(**overrides):
        body = {"name": "Ceiling Fan", "defaultPrice": 1850, "hsnCode": "8501"}
        body.update(overrides)
        resp = client.post("/products", json=body)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make
