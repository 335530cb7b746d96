import logging

from flask import Blueprint, request, jsonify

from ..extensions import db
from ..models import InventoryCategory, InventoryItem, InventoryUpdate, Property
from ..storage import upload_files
from ..utils.authz import current_user_id, require_any_role, require_role_holder
from ..utils.inventory import copy_masters_to_property, needs_restock, set_quantity, stock_status
from ..utils.pagination import paginate
from ..utils.validation import require_fields, parse_bool, parse_int, parse_money, money, iso

logger = logging.getLogger(__name__)

bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")

BUCKET = "inventory-images"

TEXT_FIELDS = (
    "name", "unit", "supplier", "description", "notes", "amazon_image_url",
    "amazon_title", "amazon_link", "asin", "reorder_link", "image_url", "barcode",
)
INT_FIELDS = ("current_quantity", "restock_threshold", "reorder_quantity", "units_per_package")
MONEY_FIELDS = ("unit_price", "cost_per_package")


def serialize_category(c: InventoryCategory):
    return {
        "id": c.id,
        "name": c.name,
        "description": c.description,
        "is_predefined": c.is_predefined,
    }


def serialize_item(i: InventoryItem):
    out = {f: getattr(i, f) for f in TEXT_FIELDS + INT_FIELDS}
    out.update({f: money(getattr(i, f)) for f in MONEY_FIELDS})
    out.update({
        "id": i.id,
        "category_id": i.category_id,
        "category_name": i.category.name if i.category else "Other",
        "property_id": i.property_id,
        "property_name": i.property.name if i.property else None,
        "restock_requested": i.restock_requested,
        "stock_status": stock_status(i.current_quantity, i.restock_threshold),
        "needs_restock": needs_restock(i),
        "updated_at": iso(i.updated_at),
    })
    return out


def serialize_update(u: InventoryUpdate):
    return {
        "id": u.id,
        "item_id": u.item_id,
        "previous_quantity": u.previous_quantity,
        "new_quantity": u.new_quantity,
        "change_type": u.change_type,
        "notes": u.notes,
        "updated_by": u.updated_by,
        "created_at": iso(u.created_at),
    }


def items_query():
    """Items filtered by ?property_id; 'master' selects the unassigned templates."""
    q = InventoryItem.query
    pid = request.args.get("property_id")
    if pid == "master":
        q = q.filter(InventoryItem.property_id.is_(None))
    elif pid:
        q = q.filter(InventoryItem.property_id == pid)
    if request.args.get("category_id"):
        q = q.filter(InventoryItem.category_id == request.args["category_id"])
    return q.order_by(InventoryItem.name.asc())


def _apply(item: InventoryItem, data):
    for f in TEXT_FIELDS:
        if f in data:
            setattr(item, f, data[f])
    if not item.name:
        return jsonify({"error": "missing_fields", "fields": ["name"]}), 400

    for f in INT_FIELDS:
        if f in data:
            if data[f] in (None, "") and f in ("reorder_quantity", "units_per_package"):
                setattr(item, f, None)
                continue
            v = parse_int(data[f], minimum=0)
            if v is None:
                return jsonify({"error": "invalid_number", "field": f}), 400
            setattr(item, f, v)

    for f in MONEY_FIELDS:
        if f in data:
            if data[f] in (None, ""):
                setattr(item, f, None)
                continue
            v = parse_money(data[f])
            if v is None:
                return jsonify({"error": "invalid_amount", "field": f}), 400
            setattr(item, f, v)

    if "restock_requested" in data:
        item.restock_requested = parse_bool(data["restock_requested"])

    if "category_id" in data:
        cid = data["category_id"] or None
        if cid and not db.session.get(InventoryCategory, cid):
            return jsonify({"error": "category_not_found"}), 404
        item.category_id = cid

    if "property_id" in data:
        pid = data["property_id"] or None
        if pid and not db.session.get(Property, pid):
            return jsonify({"error": "property_not_found"}), 404
        item.property_id = pid

    return None


# categories

@bp.route("/categories", methods=["GET"])
@require_role_holder
def list_categories():
    rows = InventoryCategory.query.order_by(InventoryCategory.name.asc()).all()
    return jsonify([serialize_category(c) for c in rows])


@bp.route("/categories", methods=["POST"])
@require_any_role("owner", "manager")
def create_category():
    data = request.get_json(silent=True)
    err = require_fields(data, ["name"])
    if err:
        return err

    name = data["name"].strip()
    if InventoryCategory.query.filter(db.func.lower(InventoryCategory.name) == name.lower()).first():
        return jsonify({"error": "category_exists"}), 409

    c = InventoryCategory(name=name, description=data.get("description"), created_by=current_user_id())
    db.session.add(c)
    db.session.commit()
    return jsonify(serialize_category(c)), 201


@bp.route("/categories/<category_id>", methods=["PATCH", "PUT"])
@require_any_role("owner", "manager")
def update_category(category_id):
    c = db.get_or_404(InventoryCategory, category_id)
    data = request.get_json(silent=True) or {}
    if c.is_predefined:
        return jsonify({"error": "category_predefined"}), 400

    if data.get("name"):
        c.name = data["name"].strip()
    if "description" in data:
        c.description = data["description"]
    db.session.commit()
    return jsonify(serialize_category(c))


@bp.route("/categories/<category_id>", methods=["DELETE"])
@require_any_role("owner", "manager")
def delete_category(category_id):
    c = db.get_or_404(InventoryCategory, category_id)
    if c.is_predefined:
        return jsonify({"error": "category_predefined"}), 400
    db.session.delete(c)
    db.session.commit()
    return jsonify({"message": "category deleted"})


# items

@bp.route("/items", methods=["GET"])
@require_role_holder
def list_items():
    return jsonify([serialize_item(i) for i in items_query().all()])


@bp.route("/items/<item_id>", methods=["GET"])
@require_role_holder
def get_item(item_id):
    return jsonify(serialize_item(db.get_or_404(InventoryItem, item_id)))


@bp.route("/items", methods=["POST"])
@require_any_role("owner", "manager")
def create_item():
    data = request.get_json(silent=True)
    err = require_fields(data, ["name"])
    if err:
        return err

    item = InventoryItem(current_quantity=0, restock_threshold=0, created_by=current_user_id())
    err = _apply(item, data)
    if err:
        return err

    db.session.add(item)
    db.session.commit()
    return jsonify(serialize_item(item)), 201


@bp.route("/items/<item_id>", methods=["PATCH", "PUT"])
@require_any_role("owner", "manager")
def update_item(item_id):
    item = db.get_or_404(InventoryItem, item_id)
    data = request.get_json(silent=True)
    if data is None:
        return jsonify({"error": "invalid_json"}), 400

    previous = item.current_quantity
    with db.session.no_autoflush:
        err = _apply(item, data)
    if err:
        db.session.rollback()
        return err

    if item.current_quantity != previous:
        # route quantity edits through the change log
        new_quantity = item.current_quantity
        item.current_quantity = previous
        set_quantity(item, new_quantity, current_user_id(), change_type="edit")
    else:
        db.session.commit()
    return jsonify(serialize_item(item))


@bp.route("/items/<item_id>", methods=["DELETE"])
@require_any_role("owner", "manager")
def delete_item(item_id):
    item = db.get_or_404(InventoryItem, item_id)
    db.session.delete(item)
    db.session.commit()
    return jsonify({"message": "item deleted"})


@bp.route("/items/<item_id>/stock", methods=["PATCH"])
@require_role_holder
def update_stock(item_id):
    item = db.get_or_404(InventoryItem, item_id)
    data = request.get_json(silent=True)
    err = require_fields(data, ["quantity"])
    if err:
        return err

    try:
        quantity = int(data["quantity"])
    except (TypeError, ValueError):
        return jsonify({"error": "invalid_number", "field": "quantity"}), 400

    log = set_quantity(
        item,
        quantity,
        current_user_id(),
        change_type=data.get("change_type") or "manual_count",
        notes=data.get("notes"),
    )
    return jsonify({"item": serialize_item(item), "update": serialize_update(log)})


@bp.route("/items/<item_id>/history", methods=["GET"])
@require_role_holder
def stock_history(item_id):
    db.get_or_404(InventoryItem, item_id)
    q = (
        InventoryUpdate.query
        .filter(InventoryUpdate.item_id == item_id)
        .order_by(InventoryUpdate.created_at.desc())
    )
    return jsonify(paginate(q, serialize_update))


@bp.route("/items/<item_id>/image", methods=["POST"])
@require_any_role("owner", "manager")
def upload_image(item_id):
    item = db.get_or_404(InventoryItem, item_id)
    f = request.files.get("file")
    if f is None:
        return jsonify({"error": "no_files"}), 400

    urls, errors = upload_files(BUCKET, item.id, [f])
    if not urls:
        return jsonify({"error": "upload_failed", "errors": errors}), 400

    item.image_url = urls[0]
    db.session.commit()
    return jsonify(serialize_item(item)), 201


@bp.route("/assign", methods=["POST"])
@require_any_role("owner", "manager")
def assign_to_property():
    data = request.get_json(silent=True)
    err = require_fields(data, ["property_id", "item_ids"])
    if err:
        return err

    if not db.session.get(Property, data["property_id"]):
        return jsonify({"error": "property_not_found"}), 404

    ids = list(data["item_ids"] or [])
    masters = (
        InventoryItem.query
        .filter(InventoryItem.id.in_(ids), InventoryItem.property_id.is_(None))
        .order_by(InventoryItem.name.asc())
        .all()
    )
    found = {m.id for m in masters}
    missing = [i for i in ids if i not in found]
    if missing:
        return jsonify({"error": "master_items_not_found", "ids": missing}), 404

    thresholds = {}
    for key, value in (data.get("thresholds") or {}).items():
        v = parse_int(value, minimum=0)
        if v is None:
            return jsonify({"error": "invalid_number", "field": f"thresholds.{key}"}), 400
        thresholds[key] = v

    created, skipped = copy_masters_to_property(masters, data["property_id"], current_user_id(), thresholds)
    logger.info("assigned %d master items to property %s (%d skipped)", len(created), data["property_id"], len(skipped))
    return jsonify({"created": [serialize_item(i) for i in created], "skipped": skipped}), 201


@bp.route("/low-stock", methods=["GET"])
@require_role_holder
def low_stock():
    q = items_query().filter(InventoryItem.current_quantity <= InventoryItem.restock_threshold)
    return jsonify([serialize_item(i) for i in q.all()])
