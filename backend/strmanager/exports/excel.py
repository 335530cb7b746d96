import io

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from .pdf import inspection_summary

_THIN = Side(style="thin", color="D1D5DB")

HEADER_STYLE = {
    "font": Font(bold=True, color="FFFFFF"),
    "fill": PatternFill(start_color="3B82F6", end_color="3B82F6", fill_type="solid"),
    "alignment": Alignment(horizontal="center", vertical="center"),
    "border": Border(left=_THIN, right=_THIN, top=_THIN, bottom=_THIN),
}


def _apply_style(cell, style):
    for attr, value in style.items():
        setattr(cell, attr, value)


def _auto_width(ws):
    for column_cells in ws.columns:
        length = max(len(str(c.value)) if c.value is not None else 0 for c in column_cells)
        ws.column_dimensions[get_column_letter(column_cells[0].column)].width = min(length + 2, 50)


def workbook_bytes(sheet_name, headers, rows) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_name

    ws.append(headers)
    for cell in ws[1]:
        _apply_style(cell, HEADER_STYLE)
    for row in rows:
        ws.append(row)

    ws.freeze_panes = "A2"
    _auto_width(ws)

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def inventory_xlsx(items):
    headers = [
        "Item Name", "Category", "Current Stock", "Restock Level", "Unit", "Unit Price",
        "Cost per Package", "Units per Package", "Supplier", "Needs Restock", "Notes",
    ]
    rows = [
        [
            i["name"],
            i.get("category_name") or "N/A",
            i.get("current_quantity") or 0,
            i.get("restock_threshold") or 0,
            i.get("unit") or "units",
            i.get("unit_price") or 0,
            i.get("cost_per_package") or 0,
            i.get("units_per_package") or 0,
            i.get("supplier") or "N/A",
            "Yes" if i.get("needs_restock") else "No",
            i.get("notes") or "",
        ]
        for i in items
    ]
    return workbook_bytes("Inventory", headers, rows)


def inspections_xlsx(records):
    headers = ["Property", "Template", "Date", "Inspector", "Status", "Issues Found", "Total Items", "Notes"]
    rows = []
    for r in records:
        status, issues = inspection_summary(r)
        rows.append([
            r.get("property_name") or "N/A",
            r.get("template_name") or "N/A",
            r.get("inspection_date"),
            r.get("inspector_name") or "N/A",
            status,
            issues,
            len(r.get("items") or []),
            r.get("notes") or "",
        ])
    return workbook_bytes("Inspections", headers, rows)


def damage_reports_xlsx(reports):
    headers = [
        "Title", "Description", "Severity", "Status", "Location", "Responsible Party",
        "Estimated Cost", "Repair Cost", "Property", "Damage Date", "Created Date", "Notes",
    ]
    rows = [
        [
            r.get("title") or "Untitled",
            r.get("description"),
            r.get("severity"),
            r.get("status"),
            r.get("location"),
            r.get("responsible_party"),
            r.get("estimated_value") or 0,
            r.get("repair_cost") or 0,
            r.get("property_name") or "N/A",
            r.get("damage_date"),
            (r.get("created_at") or "")[:10],
            r.get("notes") or "",
        ]
        for r in reports
    ]
    return workbook_bytes("Damage Reports", headers, rows)
