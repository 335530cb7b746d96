import logging
from datetime import date

from flask import Blueprint, request, jsonify

from ..extensions import db
from ..models import Property, Warranty
from ..storage import upload_files
from ..utils.authz import current_user_id, require_any_role, require_role_holder
from ..utils.validation import require_fields, parse_money, parse_int, money, iso
from ..utils.warranty import (
    DURATION_TYPES, FILTERS, FILTER_ACTIVE,
    assemble_hierarchy, calc_expiration_date, classify_status, present, to_date,
)

logger = logging.getLogger(__name__)

bp = Blueprint("warranties", __name__, url_prefix="/api/warranties")

BUCKET = "warranty-attachments"

TEXT_FIELDS = (
    "product_name", "description", "vendor", "manufacturer", "manufacturer_contact",
    "vendor_contact", "purchased_from", "notes",
)


def warranty_row(w: Warranty):
    return {
        "id": w.id,
        "property_id": w.property_id,
        "property_name": w.property.name if w.property else None,
        "parent_warranty_id": w.parent_warranty_id,
        "product_name": w.product_name,
        "description": w.description,
        "vendor": w.vendor,
        "manufacturer": w.manufacturer,
        "manufacturer_contact": w.manufacturer_contact,
        "vendor_contact": w.vendor_contact,
        "purchased_from": w.purchased_from,
        "cost": money(w.cost),
        "purchase_date": iso(w.purchase_date),
        "warranty_duration_type": w.warranty_duration_type,
        "warranty_duration_custom_days": w.warranty_duration_custom_days,
        "warranty_expiration_date": iso(w.warranty_expiration_date),
        "attachment_urls": list(w.attachment_urls or []),
        "notes": w.notes,
        "created_by": w.created_by,
        "created_at": iso(w.created_at),
    }


def with_status(row, today):
    row = dict(row, status=classify_status(row["warranty_expiration_date"], today))
    if "sub_warranties" in row:
        row["sub_warranties"] = [with_status(c, today) for c in row["sub_warranties"]]
    return row


def serialize_warranty(w: Warranty, today=None):
    today = today or date.today()
    row = warranty_row(w)
    if w.parent_warranty_id is None:
        row["sub_warranties"] = [warranty_row(c) for c in w.children]
    return with_status(row, today)


def _apply(w: Warranty, data):
    """Copy validated fields from a request body onto w; returns an error response or None."""
    for f in TEXT_FIELDS:
        if f in data:
            setattr(w, f, data[f])
    if not w.product_name:
        return jsonify({"error": "missing_fields", "fields": ["product_name"]}), 400

    if "cost" in data:
        if data["cost"] in (None, ""):
            w.cost = None
        else:
            cost = parse_money(data["cost"])
            if cost is None:
                return jsonify({"error": "invalid_amount", "field": "cost"}), 400
            w.cost = cost

    if "purchase_date" in data:
        purchase = to_date(data["purchase_date"])
        if purchase is None:
            return jsonify({"error": "invalid_date", "field": "purchase_date"}), 400
        w.purchase_date = purchase

    if "warranty_duration_type" in data:
        if data["warranty_duration_type"] not in DURATION_TYPES:
            return jsonify({
                "error": "invalid_choice",
                "field": "warranty_duration_type",
                "choices": list(DURATION_TYPES),
            }), 400
        w.warranty_duration_type = data["warranty_duration_type"]

    if "warranty_duration_custom_days" in data:
        raw = data["warranty_duration_custom_days"]
        w.warranty_duration_custom_days = None if raw in (None, "") else parse_int(raw)

    if w.warranty_duration_type == "custom":
        if not w.warranty_duration_custom_days or w.warranty_duration_custom_days <= 0:
            return jsonify({"error": "invalid_custom_days", "field": "warranty_duration_custom_days"}), 400
    else:
        w.warranty_duration_custom_days = None

    if "property_id" in data:
        pid = data["property_id"] or None
        if pid and not db.session.get(Property, pid):
            return jsonify({"error": "property_not_found"}), 404
        w.property_id = pid

    if "parent_warranty_id" in data:
        parent_id = data["parent_warranty_id"] or None
        if parent_id:
            parent = db.session.get(Warranty, parent_id)
            if not parent:
                return jsonify({"error": "parent_not_found"}), 404
            if parent.id == w.id:
                return jsonify({"error": "parent_is_self"}), 400
            if parent.parent_warranty_id is not None:
                return jsonify({"error": "parent_is_sub_warranty"}), 400
            if w.id and w.children:
                return jsonify({"error": "has_sub_warranties"}), 400
        w.parent_warranty_id = parent_id

    # stored, so recomputed on every write that can move it
    w.warranty_expiration_date = calc_expiration_date(
        w.purchase_date, w.warranty_duration_type, w.warranty_duration_custom_days
    )
    return None


@bp.route("", methods=["GET"])
@require_role_holder
def list_warranties():
    status = request.args.get("status", FILTER_ACTIVE)
    if status not in FILTERS:
        return jsonify({"error": "invalid_choice", "field": "status", "choices": list(FILTERS)}), 400

    q = request.args.get("q")
    today = date.today()

    # soonest expiry first, so sub_warranties come out in that order too
    query = Warranty.query.order_by(Warranty.warranty_expiration_date.asc(), Warranty.created_at.asc())
    rows = [warranty_row(w) for w in query.all()]
    tree = assemble_hierarchy(rows)
    tree = present(tree, status=status, query=q, today=today)
    return jsonify([with_status(r, today) for r in tree])


@bp.route("/<warranty_id>", methods=["GET"])
@require_role_holder
def get_warranty(warranty_id):
    w = db.get_or_404(Warranty, warranty_id)
    return jsonify(serialize_warranty(w))


@bp.route("", methods=["POST"])
@require_any_role("owner", "manager")
def create_warranty():
    data = request.get_json(silent=True)
    err = require_fields(data, ["product_name", "purchase_date", "warranty_duration_type"])
    if err:
        return err

    w = Warranty(attachment_urls=[], created_by=current_user_id())
    err = _apply(w, data)
    if err:
        return err

    db.session.add(w)
    db.session.commit()
    logger.info("warranty created id=%s expires=%s", w.id, w.warranty_expiration_date)
    return jsonify(serialize_warranty(w)), 201


@bp.route("/<warranty_id>", methods=["PATCH", "PUT"])
@require_any_role("owner", "manager")
def update_warranty(warranty_id):
    w = db.get_or_404(Warranty, warranty_id)
    data = request.get_json(silent=True)
    if data is None:
        return jsonify({"error": "invalid_json"}), 400

    with db.session.no_autoflush:
        err = _apply(w, data)
    if err:
        db.session.rollback()
        return err

    db.session.commit()
    return jsonify(serialize_warranty(w))


@bp.route("/<warranty_id>", methods=["DELETE"])
@require_any_role("owner", "manager")
def delete_warranty(warranty_id):
    w = db.get_or_404(Warranty, warranty_id)
    removed = 1 + len(w.children)

    db.session.delete(w)
    db.session.commit()

    logger.info("warranty deleted id=%s (%d rows)", warranty_id, removed)
    return jsonify({"message": "warranty deleted", "deleted": removed})


@bp.route("/<warranty_id>/attachments", methods=["POST"])
@require_any_role("owner", "manager")
def upload_attachments(warranty_id):
    w = db.get_or_404(Warranty, warranty_id)
    files = request.files.getlist("files")
    if not files:
        return jsonify({"error": "no_files"}), 400

    urls, errors = upload_files(BUCKET, w.id, files)
    if urls:
        w.attachment_urls = list(w.attachment_urls or []) + urls
        db.session.commit()

    return jsonify({
        "attachment_urls": w.attachment_urls,
        "uploaded": urls,
        "errors": errors,
    }), 201 if urls else 400
