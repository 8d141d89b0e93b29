import uuid


def test_create_product_with_defaults(client):
    resp = client.post("/products", json={"name": "LED Bulb 9W", "defaultPrice": 99, "barcode": "111"})

    assert resp.status_code == 201
    product = resp.json()
    assert product["name"] == "LED Bulb 9W"
    assert product["defaultPrice"] == 99
    assert product["unit"] == "pcs"
    assert product["taxRate"] == 0
    assert product["quantity"] == 0
    assert product["reorderLevel"] == 5
    assert product["stockStatus"] == "Critical"


def test_create_requires_name_and_price(client):
    assert client.post("/products", json={"defaultPrice": 10}).status_code == 400
    assert client.post("/products", json={"name": "Fan"}).status_code == 400
    assert client.post("/products", json={"name": "   ", "defaultPrice": 10}).status_code == 400


def test_duplicate_barcode_is_a_conflict(client, make_product):
    first = make_product(barcode="X")

    resp = client.post("/products", json={"name": "Other", "defaultPrice": 5, "barcode": "X"})

    assert resp.status_code == 409
    assert resp.json() == {"message": "Barcode already exists"}
    products = client.get("/products").json()
    assert len(products) == 1
    assert products[0] == first


def test_duplicate_qr_code_is_a_conflict(client, make_product):
    make_product(qrCode="QR-1")

    resp = client.post("/products", json={"name": "Other", "defaultPrice": 5, "qrCode": "QR-1"})

    assert resp.status_code == 409


def test_blank_codes_do_not_collide(client, make_product):
    make_product(barcode="", qrCode="")
    second = make_product(name="Switch", barcode="  ")

    assert second["barcode"] is None


def test_fetch_by_barcode_or_qr_code(client, make_product):
    product = make_product(barcode="12345678", qrCode="QR-TEST-001")

    assert client.get("/products/fetch/12345678").json()["id"] == product["id"]
    assert client.get("/products/fetch/QR-TEST-001").json()["id"] == product["id"]

    missing = client.get("/products/fetch/nope")
    assert missing.status_code == 404
    assert missing.json() == {"message": "Product not found"}


def test_list_newest_first(client, make_product):
    a = make_product(name="A")
    b = make_product(name="B")

    assert [p["id"] for p in client.get("/products").json()] == [b["id"], a["id"]]


def test_get_product(client, make_product):
    product = make_product()
    assert client.get(f"/products/{product['id']}").json() == product
    assert client.get(f"/products/{uuid.uuid4()}").status_code == 404


def test_update_product(client, make_product):
    product = make_product(barcode="A1")

    resp = client.put(
        f"/products/{product['id']}",
        json={"defaultPrice": 1999, "quantity": 12, "id": str(uuid.uuid4())},
    )

    assert resp.status_code == 200
    updated = resp.json()
    assert updated["id"] == product["id"]
    assert updated["defaultPrice"] == 1999
    assert updated["quantity"] == 12
    assert updated["barcode"] == "A1"
    assert updated["stockStatus"] == "In Stock"


def test_update_to_taken_barcode_is_a_conflict(client, make_product):
    make_product(name="A", barcode="A1")
    b = make_product(name="B", barcode="B1")

    resp = client.put(f"/products/{b['id']}", json={"barcode": "A1"})

    assert resp.status_code == 409
    assert client.get(f"/products/{b['id']}").json()["barcode"] == "B1"


def test_update_to_taken_qr_code_is_a_conflict(client, make_product):
    make_product(name="A", qrCode="QA")
    b = make_product(name="B", qrCode="QB")

    resp = client.put(f"/products/{b['id']}", json={"qrCode": "QA"})

    assert resp.status_code == 409


def test_update_keeps_own_barcode(client, make_product):
    product = make_product(barcode="A1")

    resp = client.put(f"/products/{product['id']}", json={"barcode": "A1", "name": "Renamed"})

    assert resp.status_code == 200
    assert resp.json()["name"] == "Renamed"


def test_update_rejects_clearing_required_fields(client, make_product):
    product = make_product()
    assert client.put(f"/products/{product['id']}", json={"name": ""}).status_code == 400
    assert client.put(f"/products/{product['id']}", json={"defaultPrice": None}).status_code == 400


def test_update_strips_name(client, make_product):
    product = make_product()

    resp = client.put(f"/products/{product['id']}", json={"name": "  Fan Deluxe  "})

    assert resp.status_code == 200
    assert resp.json()["name"] == "Fan Deluxe"
    assert client.put(f"/products/{product['id']}", json={"name": " \t "}).status_code == 400


def test_update_missing_product_is_404(client):
    assert client.put(f"/products/{uuid.uuid4()}", json={"name": "X"}).status_code == 404


def test_delete_product(client, make_product):
    product = make_product()

    resp = client.delete(f"/products/{product['id']}")

    assert resp.status_code == 200
    assert resp.json() == {"message": "Product deleted successfully"}
    assert client.delete(f"/products/{product['id']}").status_code == 404


def test_restock_adds_to_quantity(client, make_product):
    product = make_product(quantity=2, reorderLevel=5)

    resp = client.post(f"/products/{product['id']}/restock", json={"quantity": 10})

    assert resp.status_code == 200
    assert resp.json()["quantity"] == 12
    assert client.post(f"/products/{product['id']}/restock", json={"quantity": 0}).status_code == 400


def test_low_stock_report(client, make_product):
    make_product(name="Fan", quantity=3, reorderLevel=5, defaultPrice=10)
    make_product(name="Wire", quantity=50, reorderLevel=5, defaultPrice=10)
    make_product(name="Bulb", quantity=0, reorderLevel=4, defaultPrice=2)

    report = client.get("/products/low-stock").json()

    assert report["outOfStockCount"] == 1
    assert report["lowStockCount"] == 1
    assert report["estimatedRestockCost"] == 86
    assert [p["name"] for p in report["items"]] == ["Bulb", "Fan"]
    assert [p["stockStatus"] for p in report["items"]] == ["Critical", "Low Stock"]


def test_editing_product_does_not_change_past_invoices(client, make_product, make_invoice):
    product = make_product(barcode="12345678", defaultPrice=500)
    scanned = client.get("/products/fetch/12345678").json()
    invoice = make_invoice(
        items=[{
            "description": scanned["name"],
            "hsnCode": scanned["hsnCode"],
            "quantity": 2,
            "unitPrice": scanned["defaultPrice"],
            "lineTotal": 2 * scanned["defaultPrice"],
        }],
        totalAmount=1180,
    )

    client.put(f"/products/{product['id']}", json={"defaultPrice": 650})
    client.delete(f"/products/{product['id']}")

    stored = client.get(f"/invoice/{invoice['id']}").json()
    assert stored["items"][0]["unitPrice"] == 500
    assert stored["items"][0]["lineTotal"] == 1000
    assert stored["totalAmount"] == 1180
