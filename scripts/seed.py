import psycopg

from apps.billing.schema import apply_schema
from apps.billing.settings import settings

DEMO_PRODUCT = {
    "name": "Test Scanner Item",
    "description": "Barcode Scanned Product",
    "hsn_code": "8501",
    "default_price": 500,
    "barcode": "12345678",
    "qr_code": "QR-TEST-001",
    "tax_rate": 18,
}

with psycopg.connect(settings.DATABASE_URL) as conn:
    apply_schema(conn)
    conn.commit()

    with conn.cursor() as cur:
        # --- Demo scanner product (idempotent) ---
        cur.execute(
            "DELETE FROM products WHERE barcode = %(barcode)s OR qr_code = %(qr_code)s",
            DEMO_PRODUCT,
        )
        cur.execute(
            """
            INSERT INTO products (name, description, hsn_code, default_price, barcode, qr_code, tax_rate)
            VALUES (%(name)s, %(description)s, %(hsn_code)s, %(default_price)s,
                    %(barcode)s, %(qr_code)s, %(tax_rate)s)
            RETURNING id
            """,
            DEMO_PRODUCT,
        )
        (product_id,) = cur.fetchone()
        conn.commit()

    print("billing schema created")
    print(f"DEMO_PRODUCT_ID={product_id}")
    print(f"Barcode: {DEMO_PRODUCT['barcode']}")
    print(f"QR: {DEMO_PRODUCT['qr_code']}")
