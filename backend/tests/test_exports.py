import csv
import io
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

from openpyxl import load_workbook

from strmanager.exports.csv_export import AMAZON_COLUMNS, amazon_csv, amazon_filename, amazon_rows
from strmanager.exports.pdf import inspection_summary
from strmanager.extensions import db
from strmanager.models import InventoryItem


def _ns(**kw):
    base = dict(asin=None, reorder_quantity=None, cost_per_package=None, amazon_title=None, name="Item", description=None)
    base.update(kw)
    return SimpleNamespace(**base)


def test_amazon_rows_skip_items_without_asin():
    rows = amazon_rows([
        _ns(asin="B0001", name="Coffee Pods", reorder_quantity=3, cost_per_package=Decimal("24.99"),
            description="Dark roast"),
        _ns(name="Paper Towels"),
        _ns(asin="B0002", name="Soap", amazon_title="Castile Soap 32oz"),
    ], "Beach House")

    assert rows[0] == {
        "ASIN": "B0001",
        "Merchant ID": "",
        "Quantity": 3,
        "Unit Price": "24.99",
        "Product Name": "Coffee Pods",
        "Notes": "Property: Beach House | Dark roast",
    }
    assert rows[1]["Quantity"] == 1
    assert rows[1]["Unit Price"] == ""
    assert rows[1]["Product Name"] == "Castile Soap 32oz"
    assert len(rows) == 2


def test_amazon_csv_and_filename():
    text = amazon_csv(amazon_rows([_ns(asin="B0001", description='Says "hi", twice')]))
    parsed = list(csv.reader(io.StringIO(text)))
    assert parsed[0] == AMAZON_COLUMNS
    assert parsed[1][5] == 'Says "hi", twice'

    assert amazon_filename("Beach  House ", date(2025, 5, 4)) == "amazon-order-beach-house-2025-05-04.csv"
    assert amazon_filename(None, date(2025, 5, 4)) == "amazon-order-2025-05-04.csv"


def test_inspection_summary():
    assert inspection_summary({"items": [{"completed": True}, {"completed": False}]}) == ("Incomplete", 1)
    assert inspection_summary({"items": [{"completed": True}]}) == ("Complete", 0)
    assert inspection_summary({"items": []}) == ("Incomplete", 0)


def test_amazon_csv_endpoint(client, owner, owner_headers, beach_house):
    db.session.add_all([
        InventoryItem(name="Coffee", asin="B0001", property_id=beach_house.id, reorder_quantity=2),
        InventoryItem(name="Towels", property_id=beach_house.id),
    ])
    db.session.commit()

    resp = client.get(f"/api/exports/inventory/amazon.csv?property_id={beach_house.id}", headers=owner_headers)
    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert "amazon-order-beach-house-" in resp.headers["Content-Disposition"]
    lines = resp.data.decode().splitlines()
    assert lines[0] == ",".join(AMAZON_COLUMNS)
    assert lines[1].startswith("B0001,,2,")

    resp = client.get("/api/exports/inventory/amazon.csv?property_id=master", headers=owner_headers)
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "no_items_with_asin"}


def test_pdf_reports(client, owner_headers, beach_house):
    db.session.add(InventoryItem(name="Coffee", property_id=beach_house.id, current_quantity=1, restock_threshold=3))
    db.session.commit()

    for path in ("/api/exports/inventory.pdf", "/api/exports/inspections.pdf", "/api/exports/damage-reports.pdf"):
        resp = client.get(path, headers=owner_headers)
        assert resp.status_code == 200, path
        assert resp.mimetype == "application/pdf"
        assert resp.data.startswith(b"%PDF")


def test_inventory_xlsx(client, owner_headers, beach_house):
    db.session.add(InventoryItem(name="Coffee", property_id=beach_house.id, current_quantity=1, restock_threshold=3,
                                 unit_price=Decimal("9.50")))
    db.session.commit()

    resp = client.get("/api/exports/inventory.xlsx", headers=owner_headers)
    assert resp.status_code == 200
    ws = load_workbook(io.BytesIO(resp.data)).active
    assert ws.title == "Inventory"
    assert ws["A1"].value == "Item Name"
    assert ws["A1"].font.bold
    assert [c.value for c in ws[2]][:6] == ["Coffee", "Other", 1, 3, "units", 9.5]
    assert ws["J2"].value == "Yes"


def test_inspection_and_damage_xlsx(client, owner, owner_headers, beach_house):
    client.post("/api/inspections/records", json={
        "property_id": beach_house.id, "inspection_date": "2025-04-01",
        "items": [{"description": "Check filters", "completed": True}, "Test GFCI"],
    }, headers=owner_headers)
    client.post("/api/damage-reports", json={
        "description": "Cracked tile", "location": "Bathroom", "damage_date": "2025-04-02",
        "property_id": beach_house.id, "repair_cost": "80",
    }, headers=owner_headers)

    ws = load_workbook(io.BytesIO(client.get("/api/exports/inspections.xlsx", headers=owner_headers).data)).active
    assert [c.value for c in ws[2]][:7] == ["Beach House", "N/A", "2025-04-01", "Olivia Owner", "Incomplete", 1, 2]

    ws = load_workbook(io.BytesIO(client.get("/api/exports/damage-reports.xlsx", headers=owner_headers).data)).active
    row = [c.value for c in ws[2]]
    assert row[0] == "Untitled"
    assert row[7] == 80
    assert row[8] == "Beach House"
