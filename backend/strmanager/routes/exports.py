from datetime import date

from flask import Blueprint, Response, request, jsonify

from ..exports.csv_export import amazon_csv, amazon_filename, amazon_rows
from ..exports.excel import damage_reports_xlsx, inspections_xlsx, inventory_xlsx
from ..exports.pdf import damage_reports_pdf, inspections_pdf, inventory_pdf
from ..extensions import db
from ..models import DamageReport, InspectionRecord, Profile, Property
from ..utils.authz import require_role_holder
from .damage_reports import serialize_report
from .inspections import serialize_record
from .inventory import items_query, serialize_item

bp = Blueprint("exports", __name__, url_prefix="/api/exports")

XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _download(body, mimetype, filename):
    return Response(body, mimetype=mimetype, headers={"Content-Disposition": f'attachment; filename="{filename}"'})


def _property_name():
    pid = request.args.get("property_id")
    if not pid or pid == "master":
        return None
    prop = db.session.get(Property, pid)
    return prop.name if prop else None


def _stamp():
    return date.today().isoformat()


def _inspection_rows():
    q = InspectionRecord.query
    if request.args.get("property_id"):
        q = q.filter(InspectionRecord.property_id == request.args["property_id"])
    records = q.order_by(InspectionRecord.inspection_date.desc()).all()

    names = {p.id: p.full_name for p in Profile.query.all()}
    rows = []
    for r in records:
        row = serialize_record(r)
        row["inspector_name"] = names.get(r.performed_by)
        rows.append(row)
    return rows


def _damage_rows():
    q = DamageReport.query
    if request.args.get("property_id"):
        q = q.filter(DamageReport.property_id == request.args["property_id"])
    return [serialize_report(r) for r in q.order_by(DamageReport.damage_date.desc()).all()]


@bp.route("/inventory/amazon.csv", methods=["GET"])
@require_role_holder
def inventory_amazon_csv():
    name = _property_name()
    rows = amazon_rows(items_query().all(), name)
    if not rows:
        return jsonify({"error": "no_items_with_asin"}), 404
    return _download(amazon_csv(rows), "text/csv", amazon_filename(name))


@bp.route("/inventory.pdf", methods=["GET"])
@require_role_holder
def inventory_report_pdf():
    items = [serialize_item(i) for i in items_query().all()]
    return _download(inventory_pdf(items, _property_name()), "application/pdf", f"inventory-report-{_stamp()}.pdf")


@bp.route("/inventory.xlsx", methods=["GET"])
@require_role_holder
def inventory_report_xlsx():
    items = [serialize_item(i) for i in items_query().all()]
    return _download(inventory_xlsx(items), XLSX, f"inventory-report-{_stamp()}.xlsx")


@bp.route("/inspections.pdf", methods=["GET"])
@require_role_holder
def inspection_report_pdf():
    body = inspections_pdf(_inspection_rows(), _property_name())
    return _download(body, "application/pdf", f"inspection-report-{_stamp()}.pdf")


@bp.route("/inspections.xlsx", methods=["GET"])
@require_role_holder
def inspection_report_xlsx():
    return _download(inspections_xlsx(_inspection_rows()), XLSX, f"inspection-report-{_stamp()}.xlsx")


@bp.route("/damage-reports.pdf", methods=["GET"])
@require_role_holder
def damage_report_pdf():
    body = damage_reports_pdf(_damage_rows(), _property_name())
    return _download(body, "application/pdf", f"damage-reports-{_stamp()}.pdf")


@bp.route("/damage-reports.xlsx", methods=["GET"])
@require_role_holder
def damage_report_xlsx():
    return _download(damage_reports_xlsx(_damage_rows()), XLSX, f"damage-reports-{_stamp()}.xlsx")
