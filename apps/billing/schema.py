from psycopg import Connection

DDL = """
-- Enable pgcrypto for UUID generation
CREATE EXTENSION IF NOT EXISTS pgcrypto;

-- Invoices: one row per bill, line items embedded as a JSON array.
-- invoice_no is intentionally not unique; numbers are suggested, not reserved.
CREATE TABLE IF NOT EXISTS invoices (
  id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
  customer_name TEXT NOT NULL,
  mobile_number TEXT NOT NULL,
  invoice_no TEXT,
  purchase_date TIMESTAMPTZ NOT NULL DEFAULT now(),
  invoice_date TIMESTAMPTZ DEFAULT now(),
  due_date TIMESTAMPTZ,
  items JSONB NOT NULL DEFAULT '[]'::jsonb,
  total_amount NUMERIC(18,2) NOT NULL,
  paid_amount NUMERIC(18,2) NOT NULL DEFAULT 0,
  left_amount NUMERIC(18,2) NOT NULL,
  created_at TIMESTAMPTZ NOT NULL DEFAULT clock_timestamp(),
  CONSTRAINT invoices_balance_chk CHECK (left_amount = total_amount - paid_amount)
);

CREATE INDEX IF NOT EXISTS invoices_created_at_idx ON invoices (created_at DESC);
CREATE INDEX IF NOT EXISTS invoices_mobile_idx ON invoices (lower(btrim(mobile_number)));

-- Products: the sellable catalog. Stock is tracked here but never
-- decremented by invoicing.
CREATE TABLE IF NOT EXISTS products (
  id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
  name TEXT NOT NULL,
  description TEXT,
  hsn_code TEXT,
  default_price NUMERIC(18,2) NOT NULL,
  barcode TEXT,
  qr_code TEXT,
  unit TEXT DEFAULT 'pcs',
  tax_rate NUMERIC(6,2) NOT NULL DEFAULT 0,
  quantity NUMERIC(18,2) NOT NULL DEFAULT 0,
  reorder_level NUMERIC(18,2) NOT NULL DEFAULT 5,
  created_at TIMESTAMPTZ NOT NULL DEFAULT clock_timestamp()
);

-- Unique when present (sparse)
CREATE UNIQUE INDEX IF NOT EXISTS products_barcode_uidx
  ON products (barcode) WHERE barcode IS NOT NULL;
CREATE UNIQUE INDEX IF NOT EXISTS products_qr_code_uidx
  ON products (qr_code) WHERE qr_code IS NOT NULL;
"""


def apply_schema(conn: Connection) -> None:
    """Create the tables and indexes if they are missing. Safe to re-run."""
    with conn.cursor() as cur:
        cur.execute(DDL)
