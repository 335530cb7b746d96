from flask import Blueprint, request, jsonify

from ..extensions import db
from ..models import Asset, Property, Warranty
from ..storage import upload_files
from ..utils.authz import current_user_id, require_any_role, require_role_holder
from ..utils.validation import require_fields, parse_date, parse_money, money, iso

bp = Blueprint("assets", __name__, url_prefix="/api/assets")

BUCKET = "asset-photos"

TEXT_FIELDS = (
    "name", "category", "brand", "model_number", "color_finish", "dimensions",
    "material_type", "supplier", "location_in_property", "condition",
    "serial_number", "description",
)


def serialize_asset(a: Asset):
    out = {f: getattr(a, f) for f in TEXT_FIELDS}
    out.update({
        "id": a.id,
        "cost": money(a.cost),
        "purchase_date": iso(a.purchase_date),
        "property_id": a.property_id,
        "property_name": a.property.name if a.property else None,
        "photo_urls": list(a.photo_urls or []),
        "warranty_id": a.warranty_id,
        "created_at": iso(a.created_at),
    })
    return out


def _apply(a: Asset, data):
    for f in TEXT_FIELDS:
        if f in data:
            setattr(a, f, data[f])
    if not a.name:
        return jsonify({"error": "missing_fields", "fields": ["name"]}), 400

    if "cost" in data:
        a.cost = None
        if data["cost"] not in (None, ""):
            a.cost = parse_money(data["cost"])
            if a.cost is None:
                return jsonify({"error": "invalid_amount", "field": "cost"}), 400

    if "purchase_date" in data:
        a.purchase_date = None
        if data["purchase_date"]:
            a.purchase_date = parse_date(data["purchase_date"])
            if a.purchase_date is None:
                return jsonify({"error": "invalid_date", "field": "purchase_date"}), 400

    if "property_id" in data:
        pid = data["property_id"] or None
        if pid and not db.session.get(Property, pid):
            return jsonify({"error": "property_not_found"}), 404
        a.property_id = pid

    if "warranty_id" in data:
        wid = data["warranty_id"] or None
        if wid and not db.session.get(Warranty, wid):
            return jsonify({"error": "warranty_not_found"}), 404
        a.warranty_id = wid

    return None


@bp.route("", methods=["GET"])
@require_role_holder
def list_assets():
    q = Asset.query
    if request.args.get("property_id"):
        q = q.filter(Asset.property_id == request.args["property_id"])
    return jsonify([serialize_asset(a) for a in q.order_by(Asset.name.asc()).all()])


@bp.route("/<asset_id>", methods=["GET"])
@require_role_holder
def get_asset(asset_id):
    return jsonify(serialize_asset(db.get_or_404(Asset, asset_id)))


@bp.route("", methods=["POST"])
@require_any_role("owner", "manager")
def create_asset():
    data = request.get_json(silent=True)
    err = require_fields(data, ["name"])
    if err:
        return err

    a = Asset(photo_urls=[], created_by=current_user_id())
    err = _apply(a, data)
    if err:
        return err

    db.session.add(a)
    db.session.commit()
    return jsonify(serialize_asset(a)), 201


@bp.route("/<asset_id>", methods=["PATCH", "PUT"])
@require_any_role("owner", "manager")
def update_asset(asset_id):
    a = db.get_or_404(Asset, asset_id)
    data = request.get_json(silent=True)
    if data is None:
        return jsonify({"error": "invalid_json"}), 400

    with db.session.no_autoflush:
        err = _apply(a, data)
    if err:
        db.session.rollback()
        return err

    db.session.commit()
    return jsonify(serialize_asset(a))


@bp.route("/<asset_id>", methods=["DELETE"])
@require_any_role("owner", "manager")
def delete_asset(asset_id):
    a = db.get_or_404(Asset, asset_id)
    db.session.delete(a)
    db.session.commit()
    return jsonify({"message": "asset deleted"})


@bp.route("/<asset_id>/photos", methods=["POST"])
@require_any_role("owner", "manager")
def upload_photos(asset_id):
    a = db.get_or_404(Asset, asset_id)
    files = request.files.getlist("files")
    if not files:
        return jsonify({"error": "no_files"}), 400

    urls, errors = upload_files(BUCKET, a.id, files)
    if urls:
        a.photo_urls = list(a.photo_urls or []) + urls
        db.session.commit()

    return jsonify({"photo_urls": a.photo_urls, "uploaded": urls, "errors": errors}), 201 if urls else 400
