"""
PDF reports built with reportlab.

The list reports take the serialized dicts the API already returns; the
claim report reads a DamageReport row directly.
"""
import io
from datetime import date
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..utils.claims import titleize

HEADER_BLUE = colors.HexColor("#3b82f6")


class ReportBuilder:
    """Collects flowables for one document and renders it to bytes."""

    def __init__(self, title, pagesize=A4):
        self.title = title
        self.pagesize = pagesize
        self.styles = getSampleStyleSheet()
        self.styles.add(ParagraphStyle(name="ReportTitle", parent=self.styles["Heading1"], fontSize=18, spaceAfter=6))
        self.styles.add(ParagraphStyle(name="Meta", parent=self.styles["Normal"], fontSize=9, textColor=colors.grey))
        self.styles.add(ParagraphStyle(name="Section", parent=self.styles["Heading2"], fontSize=13, spaceBefore=10, spaceAfter=4))
        self.styles.add(ParagraphStyle(name="Body", parent=self.styles["Normal"], fontSize=10, leading=13))
        self.story = [Paragraph(escape(title), self.styles["ReportTitle"])]

    def meta(self, text):
        self.story.append(Paragraph(escape(text), self.styles["Meta"]))

    def section(self, text):
        self.story.append(Paragraph(escape(text), self.styles["Section"]))

    def paragraph(self, text):
        self.story.append(Paragraph(escape(text).replace("\n", "<br/>"), self.styles["Body"]))

    def spacer(self, height=8):
        self.story.append(Spacer(1, height))

    def grid(self, headers, rows):
        data = [headers] + [[_cell(v) for v in row] for row in rows]
        table = Table(data, repeatRows=1)
        style = [
            ("BACKGROUND", (0, 0), (-1, 0), HEADER_BLUE),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 8),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#d1d5db")),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ]
        if rows:
            style.append(("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f3f4f6")]))
        table.setStyle(TableStyle(style))
        self.story.append(table)

    def pairs(self, rows):
        """Two-column label/value block."""
        if not rows:
            return
        table = Table([[label, _cell(value)] for label, value in rows], colWidths=[5 * cm, None])
        table.setStyle(TableStyle([
            ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 10),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
        ]))
        self.story.append(table)

    def render(self) -> bytes:
        buf = io.BytesIO()
        doc = SimpleDocTemplate(
            buf,
            pagesize=self.pagesize,
            title=self.title,
            topMargin=1.5 * cm,
            bottomMargin=1.5 * cm,
            leftMargin=1.5 * cm,
            rightMargin=1.5 * cm,
        )
        doc.build(self.story)
        return buf.getvalue()


def _cell(value):
    return "" if value is None else str(value)


def _dollars(value):
    return f"${value:,.2f}" if value else "N/A"


def _header(builder, property_name, today):
    if property_name:
        builder.meta(f"Property: {property_name}")
    builder.meta(f"Generated: {today.isoformat()}")
    builder.spacer()


def inventory_pdf(items, property_name=None, today=None):
    b = ReportBuilder("Inventory Report", pagesize=landscape(A4))
    _header(b, property_name, today or date.today())
    b.grid(
        ["Item", "Category", "Stock", "Restock Level", "Unit", "Price", "Supplier", "Needs Restock"],
        [
            [
                i["name"],
                i.get("category_name") or "N/A",
                i.get("current_quantity") or 0,
                i.get("restock_threshold") or 0,
                i.get("unit") or "units",
                f"${(i.get('unit_price') or 0):.2f}",
                i.get("supplier") or "N/A",
                "Yes" if i.get("needs_restock") else "No",
            ]
            for i in items
        ],
    )
    return b.render()


def inspection_summary(record):
    items = record.get("items") or []
    issues = sum(1 for i in items if not i.get("completed"))
    return ("Complete" if items and not issues else "Incomplete"), issues


def inspections_pdf(records, property_name=None, today=None):
    b = ReportBuilder("Inspection Report")
    _header(b, property_name, today or date.today())
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
        ])
    b.grid(["Property", "Template", "Date", "Inspector", "Status", "Issues"], rows)
    return b.render()


def damage_reports_pdf(reports, property_name=None, today=None):
    b = ReportBuilder("Damage Reports", pagesize=landscape(A4))
    _header(b, property_name, today or date.today())
    b.grid(
        ["Title", "Severity", "Status", "Location", "Responsible", "Est. Cost", "Repair Cost", "Date"],
        [
            [
                r.get("title") or "Untitled",
                r.get("severity"),
                r.get("status"),
                r.get("location"),
                titleize(r.get("responsible_party")),
                _dollars(r.get("estimated_value")),
                _dollars(r.get("repair_cost")),
                r.get("damage_date"),
            ]
            for r in reports
        ],
    )
    return b.render()


def claim_report_pdf(report, today=None):
    today = today or date.today()
    b = ReportBuilder("Damage Claim Report")
    b.meta(f"Generated: {today.strftime('%B %d, %Y')}")
    b.meta(f"Claim Status: {titleize(report.claim_status or 'not_filed')}")
    b.spacer()

    prop = report.property
    if prop is not None:
        b.section("Property Information")
        address = ", ".join(p for p in (prop.address, prop.city, f"{prop.state or ''} {prop.zip or ''}".strip()) if p)
        b.pairs([("Property Name", prop.name), ("Address", address)])

    reservation = []
    if report.guest_name:
        reservation.append(("Guest Name", report.guest_name))
    if report.reservation_id:
        reservation.append(("Booking/Reservation ID", report.reservation_id))
    if report.booking_platform:
        reservation.append(("Platform", titleize(report.booking_platform)))
    if report.check_in_date:
        reservation.append(("Check-in Date", report.check_in_date.isoformat()))
    if report.check_out_date:
        reservation.append(("Check-out Date", report.check_out_date.isoformat()))
    b.section("Reservation Details")
    b.pairs(reservation)

    damage = [
        ("Title", report.title or "N/A"),
        ("Location", report.location),
        ("Severity", (report.severity or "").capitalize()),
        ("Damage Date", report.damage_date.isoformat()),
    ]
    if report.date_damage_discovered:
        damage.append(("Date Discovered", report.date_damage_discovered.isoformat()))
    damage.append((
        "Responsible Party",
        "No Fault" if report.responsible_party == "no-fault" else (report.responsible_party or "").capitalize(),
    ))
    if report.estimated_value:
        damage.append(("Estimated Cost", _dollars(report.estimated_value)))
    if report.repair_cost:
        damage.append(("Repair Cost", _dollars(report.repair_cost)))
    b.section("Damage Details")
    b.pairs(damage)

    b.section("Description")
    b.paragraph(report.description)

    if report.resolution_sought:
        b.section("Resolution Sought")
        b.paragraph(titleize(report.resolution_sought))

    if report.claim_reference_number or report.claim_status:
        claim = []
        if report.claim_status:
            claim.append(("Status", titleize(report.claim_status)))
        if report.claim_reference_number:
            claim.append(("Reference Number", report.claim_reference_number))
        if report.claim_deadline:
            claim.append(("Filing Deadline", report.claim_deadline.isoformat()))
        b.section("Claim Information")
        b.pairs(claim)

    if report.claim_timeline_notes:
        b.section("Timeline Notes")
        b.paragraph(report.claim_timeline_notes)

    if report.notes:
        b.section("Additional Notes")
        b.paragraph(report.notes)

    before = len(report.before_photo_urls or [])
    after = len(report.photo_urls or [])
    receipts = len(report.receipt_urls or [])
    if before + after + receipts:
        attachments = []
        if before:
            attachments.append(("Before Photos", f"{before} photo(s) attached"))
        if after:
            attachments.append(("Damage Photos", f"{after} photo(s) attached"))
        if receipts:
            attachments.append(("Receipts/Quotes", f"{receipts} document(s) attached"))
        b.section("Attachments Summary")
        b.pairs(attachments)

    return b.render()
