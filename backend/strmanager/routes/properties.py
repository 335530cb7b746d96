from flask import Blueprint, request, jsonify

from ..extensions import db
from ..models import Property, UserProperty
from ..utils.authz import current_roles, current_user_id, require_any_role, require_role_holder
from ..utils.validation import require_fields

bp = Blueprint("properties", __name__, url_prefix="/api/properties")

session = db.session

FIELDS = ("name", "address", "city", "state", "zip")


def serialize_property(p: Property):
    return {
        "id": p.id,
        "name": p.name,
        "address": p.address,
        "city": p.city,
        "state": p.state,
        "zip": p.zip,
    }


def visible_property_ids():
    """None for owners (everything), otherwise the caller's assignments."""
    if "owner" in current_roles():
        return None
    rows = UserProperty.query.filter(UserProperty.user_id == current_user_id()).all()
    return {r.property_id for r in rows}


@bp.route("", methods=["POST"])
@require_any_role("owner")
def create_property():
    data = request.get_json(silent=True)
    err = require_fields(data, ["name"])
    if err:
        return err

    item = Property(created_by=current_user_id(), **{f: data.get(f) for f in FIELDS})
    session.add(item)
    session.commit()
    return jsonify(serialize_property(item)), 201


@bp.route("", methods=["GET"])
@require_role_holder
def list_properties():
    q = Property.query.order_by(Property.name.asc())
    allowed = visible_property_ids()
    if allowed is not None:
        q = q.filter(Property.id.in_(allowed))
    return jsonify([serialize_property(p) for p in q.all()])


@bp.route("/<property_id>", methods=["GET"])
@require_role_holder
def get_property(property_id):
    item = db.get_or_404(Property, property_id)
    allowed = visible_property_ids()
    if allowed is not None and item.id not in allowed:
        return jsonify({"error": "not_found"}), 404
    return jsonify(serialize_property(item))


@bp.route("/<property_id>", methods=["PATCH", "PUT"])
@require_any_role("owner")
def patch_property(property_id):
    item = db.get_or_404(Property, property_id)
    data = request.get_json(silent=True) or {}

    for f in FIELDS:
        if f in data:
            setattr(item, f, data[f])
    if not item.name:
        session.rollback()
        return jsonify({"error": "missing_fields", "fields": ["name"]}), 400

    session.commit()
    return jsonify(serialize_property(item))


@bp.route("/<property_id>", methods=["DELETE"])
@require_any_role("owner")
def delete_property(property_id):
    item = db.get_or_404(Property, property_id)

    session.delete(item)
    session.commit()

    return jsonify({"message": "property deleted"})
