import logging
from datetime import date

from flask import Blueprint, Response, request, jsonify

from ..exports.pdf import claim_report_pdf
from ..extensions import db
from ..models import DamageReport, Property
from ..storage import upload_files
from ..utils.authz import current_user_id, require_any_role, require_role_holder
from ..utils.claims import claim_deadline_info
from ..utils.pagination import paginate
from ..utils.validation import (
    require_fields, check_choice, parse_bool, parse_date, parse_money, money, iso,
)

logger = logging.getLogger(__name__)

bp = Blueprint("damage_reports", __name__, url_prefix="/api/damage-reports")

BUCKET = "damage-report-photos"

SEVERITIES = ("minor", "moderate", "severe")
STATUSES = ("reported", "assessed", "approved", "in-repair", "completed", "resolved")
RESPONSIBLE_PARTIES = ("guest", "staff", "vendor", "wear", "no-fault")
BOOKING_PLATFORMS = ("airbnb", "vrbo", "booking_com", "direct", "direct_booking", "other")
CLAIM_STATUSES = ("not_filed", "filed_with_platform", "under_review", "approved", "denied", "paid")
RESOLUTIONS = ("full_replacement", "partial_reimbursement", "repair_only", "insurance_claim")

CHOICES = {
    "severity": SEVERITIES,
    "status": STATUSES,
    "responsible_party": RESPONSIBLE_PARTIES,
    "booking_platform": BOOKING_PLATFORMS,
    "claim_status": CLAIM_STATUSES,
    "resolution_sought": RESOLUTIONS,
}

OPTIONAL_CHOICES = ("booking_platform", "claim_status", "resolution_sought")

CLOSED_STATUSES = ("completed", "resolved")

# ?kind= on photo upload -> list column
PHOTO_KINDS = {
    "damage": "photo_urls",
    "before": "before_photo_urls",
    "receipt": "receipt_urls",
}

TEXT_FIELDS = (
    "title", "description", "location", "claim_number", "work_order_number", "notes",
    "guest_name", "reservation_id", "claim_reference_number", "claim_timeline_notes",
)
DATE_FIELDS = (
    "damage_date", "repair_date", "check_in_date", "check_out_date",
    "date_damage_discovered", "claim_deadline",
)
MONEY_FIELDS = ("estimated_value", "repair_cost")
BOOL_FIELDS = ("repair_completed", "insurance_claim_filed", "work_order_issued")


def serialize_report(r: DamageReport, today=None):
    out = {f: getattr(r, f) for f in TEXT_FIELDS + BOOL_FIELDS + tuple(CHOICES)}
    out.update({f: iso(getattr(r, f)) for f in DATE_FIELDS})
    out.update({f: money(getattr(r, f)) for f in MONEY_FIELDS})
    out.update({
        "id": r.id,
        "property_id": r.property_id,
        "property_name": r.property.name if r.property else None,
        "reported_by": r.reported_by,
        "photo_urls": list(r.photo_urls or []),
        "before_photo_urls": list(r.before_photo_urls or []),
        "receipt_urls": list(r.receipt_urls or []),
        "claim": claim_deadline_info(r, today),
        "created_at": iso(r.created_at),
    })
    return out


def _apply(r: DamageReport, data):
    for field, choices in CHOICES.items():
        err = check_choice(data, field, choices)
        if err:
            return err
        if data.get(field):
            setattr(r, field, data[field])
        elif field in data and field in OPTIONAL_CHOICES:
            setattr(r, field, None)

    for f in TEXT_FIELDS:
        if f in data:
            setattr(r, f, data[f])

    for f in DATE_FIELDS:
        if f in data:
            value = None
            if data[f]:
                value = parse_date(data[f])
                if value is None:
                    return jsonify({"error": "invalid_date", "field": f}), 400
            setattr(r, f, value)

    for f in MONEY_FIELDS:
        if f in data:
            value = None
            if data[f] not in (None, ""):
                value = parse_money(data[f])
                if value is None:
                    return jsonify({"error": "invalid_amount", "field": f}), 400
            setattr(r, f, value)

    for f in BOOL_FIELDS:
        if f in data:
            setattr(r, f, parse_bool(data[f]))

    if "property_id" in data:
        pid = data["property_id"] or None
        if pid and not db.session.get(Property, pid):
            return jsonify({"error": "property_not_found"}), 404
        r.property_id = pid

    missing = [f for f in ("description", "location", "damage_date") if not getattr(r, f)]
    if missing:
        return jsonify({"error": "missing_fields", "fields": missing}), 400

    if r.check_in_date and r.check_out_date and r.check_out_date < r.check_in_date:
        return jsonify({"error": "check_out_before_check_in"}), 400

    return None


@bp.route("", methods=["GET"])
@require_role_holder
def list_reports():
    q = DamageReport.query
    if request.args.get("property_id"):
        q = q.filter(DamageReport.property_id == request.args["property_id"])
    if request.args.get("status"):
        q = q.filter(DamageReport.status == request.args["status"])
    q = q.order_by(DamageReport.damage_date.desc(), DamageReport.created_at.desc())

    today = date.today()
    return jsonify(paginate(q, lambda r: serialize_report(r, today)))


@bp.route("/<report_id>", methods=["GET"])
@require_role_holder
def get_report(report_id):
    return jsonify(serialize_report(db.get_or_404(DamageReport, report_id)))


@bp.route("", methods=["POST"])
@require_role_holder
def create_report():
    data = request.get_json(silent=True)
    err = require_fields(data, ["description", "location", "damage_date"])
    if err:
        return err

    r = DamageReport(
        photo_urls=[], before_photo_urls=[], receipt_urls=[],
        severity="minor", status="reported", responsible_party="guest",
        claim_status="not_filed", reported_by=current_user_id(),
    )
    err = _apply(r, data)
    if err:
        return err

    db.session.add(r)
    db.session.commit()
    logger.info("damage report created id=%s property=%s", r.id, r.property_id)
    return jsonify(serialize_report(r)), 201


@bp.route("/<report_id>", methods=["PATCH", "PUT"])
@require_role_holder
def update_report(report_id):
    r = db.get_or_404(DamageReport, report_id)
    data = request.get_json(silent=True)
    if data is None:
        return jsonify({"error": "invalid_json"}), 400

    with db.session.no_autoflush:
        err = _apply(r, data)
    if err:
        db.session.rollback()
        return err

    db.session.commit()
    return jsonify(serialize_report(r))


@bp.route("/<report_id>", methods=["DELETE"])
@require_any_role("owner", "manager")
def delete_report(report_id):
    r = db.get_or_404(DamageReport, report_id)
    db.session.delete(r)
    db.session.commit()
    return jsonify({"message": "damage report deleted"})


@bp.route("/<report_id>/photos", methods=["POST"])
@require_role_holder
def upload_photos(report_id):
    r = db.get_or_404(DamageReport, report_id)
    kind = request.args.get("kind", "damage")
    column = PHOTO_KINDS.get(kind)
    if column is None:
        return jsonify({"error": "invalid_choice", "field": "kind", "choices": list(PHOTO_KINDS)}), 400

    files = request.files.getlist("files")
    if not files:
        return jsonify({"error": "no_files"}), 400

    urls, errors = upload_files(BUCKET, r.id, files)
    if urls:
        setattr(r, column, list(getattr(r, column) or []) + urls)
        db.session.commit()

    return jsonify({column: getattr(r, column), "uploaded": urls, "errors": errors}), 201 if urls else 400


@bp.route("/<report_id>/claim.pdf", methods=["GET"])
@require_role_holder
def claim_pdf(report_id):
    r = db.get_or_404(DamageReport, report_id)
    pdf = claim_report_pdf(r)
    filename = f"damage-claim-{(r.reservation_id or r.id[:8])}.pdf"
    return Response(
        pdf,
        mimetype="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
