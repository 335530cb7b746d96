import csv
import io
import re
from datetime import date

AMAZON_COLUMNS = ["ASIN", "Merchant ID", "Quantity", "Unit Price", "Product Name", "Notes"]


def amazon_rows(items, property_name=None):
    """Rows for the Amazon Business bulk-order upload; items without an ASIN are left out."""
    prefix = f"Property: {property_name} | " if property_name else ""
    rows = []
    for i in items:
        if not i.asin:
            continue
        rows.append({
            "ASIN": i.asin,
            "Merchant ID": "",
            "Quantity": i.reorder_quantity or 1,
            "Unit Price": str(i.cost_per_package) if i.cost_per_package is not None else "",
            "Product Name": i.amazon_title or i.name,
            "Notes": prefix + (i.description or ""),
        })
    return rows


def amazon_csv(rows) -> str:
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=AMAZON_COLUMNS, lineterminator="\n")
    writer.writeheader()
    writer.writerows(rows)
    return buf.getvalue()


def amazon_filename(property_name=None, today=None):
    stamp = (today or date.today()).isoformat()
    if property_name:
        slug = re.sub(r"\s+", "-", property_name.strip()).lower()
        return f"amazon-order-{slug}-{stamp}.csv"
    return f"amazon-order-{stamp}.csv"
