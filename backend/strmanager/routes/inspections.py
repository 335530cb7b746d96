import uuid

from flask import Blueprint, request, jsonify

from ..extensions import db
from ..models import InspectionAssignment, InspectionRecord, InspectionTemplate, Profile, Property
from ..utils.authz import current_user_id, require_any_role, require_role_holder
from ..utils.pagination import paginate
from ..utils.schedule import FREQUENCY_TYPES, next_occurrence
from ..utils.validation import require_fields, check_choice, parse_bool, parse_date, parse_int, iso

bp = Blueprint("inspections", __name__, url_prefix="/api/inspections")

NOTIFICATION_METHODS = ("email", "in_app", "both")


def serialize_template(t: InspectionTemplate):
    return {
        "id": t.id,
        "name": t.name,
        "items": list(t.items or []),
        "is_predefined": t.is_predefined,
        "frequency_type": t.frequency_type,
        "frequency_days": t.frequency_days,
        "notifications_enabled": t.notifications_enabled,
        "notification_method": t.notification_method,
        "notification_days_ahead": t.notification_days_ahead,
        "next_occurrence": iso(t.next_occurrence),
        "property_id": t.property_id,
        "created_at": iso(t.created_at),
    }


def serialize_record(r: InspectionRecord):
    return {
        "id": r.id,
        "template_id": r.template_id,
        "template_name": r.template.name if r.template else None,
        "property_id": r.property_id,
        "property_name": r.property.name if r.property else None,
        "inspection_date": iso(r.inspection_date),
        "next_due_date": iso(r.next_due_date),
        "items": list(r.items or []),
        "notes": r.notes,
        "performed_by": r.performed_by,
        "entered_by": r.entered_by,
        "created_at": iso(r.created_at),
    }


def serialize_assignment(a: InspectionAssignment):
    return {
        "id": a.id,
        "template_id": a.template_id,
        "template_name": a.template.name if a.template else None,
        "assigned_to": a.assigned_to,
        "assignee_name": a.assignee.full_name if a.assignee else None,
        "assigned_by": a.assigned_by,
        "created_at": iso(a.created_at),
    }


def normalize_items(raw, record=False):
    """Checklist entries in order; ids are generated where missing. None on bad input."""
    if not isinstance(raw, list):
        return None
    out = []
    for entry in raw:
        if isinstance(entry, str):
            entry = {"description": entry}
        if not isinstance(entry, dict) or not str(entry.get("description") or "").strip():
            return None
        item = {
            "id": str(entry.get("id") or uuid.uuid4()),
            "description": str(entry["description"]).strip(),
            "notes": entry.get("notes") or "",
        }
        if record:
            item["completed"] = parse_bool(entry.get("completed", False))
        out.append(item)
    return out


def _check_property(pid):
    if pid and not db.session.get(Property, pid):
        return jsonify({"error": "property_not_found"}), 404
    return None


def _apply_template(t: InspectionTemplate, data):
    for field, choices in (("frequency_type", FREQUENCY_TYPES), ("notification_method", NOTIFICATION_METHODS)):
        err = check_choice(data, field, choices)
        if err:
            return err
        if field in data:
            setattr(t, field, data[field] or None)

    if "name" in data:
        t.name = (data["name"] or "").strip()
    if not t.name:
        return jsonify({"error": "missing_fields", "fields": ["name"]}), 400

    if "items" in data:
        items = normalize_items(data["items"])
        if items is None:
            return jsonify({"error": "invalid_items"}), 400
        t.items = items

    for f in ("frequency_days", "notification_days_ahead"):
        if f in data:
            v = None
            if data[f] not in (None, ""):
                v = parse_int(data[f], minimum=1 if f == "frequency_days" else 0)
                if v is None:
                    return jsonify({"error": "invalid_number", "field": f}), 400
            setattr(t, f, v)

    if t.frequency_type == "custom" and not t.frequency_days:
        return jsonify({"error": "missing_fields", "fields": ["frequency_days"]}), 400

    if "notifications_enabled" in data:
        t.notifications_enabled = parse_bool(data["notifications_enabled"])

    if "next_occurrence" in data:
        t.next_occurrence = None
        if data["next_occurrence"]:
            t.next_occurrence = parse_date(data["next_occurrence"])
            if t.next_occurrence is None:
                return jsonify({"error": "invalid_date", "field": "next_occurrence"}), 400

    if "property_id" in data:
        err = _check_property(data["property_id"])
        if err:
            return err
        t.property_id = data["property_id"] or None

    return None


# templates

@bp.route("/templates", methods=["GET"])
@require_role_holder
def list_templates():
    q = InspectionTemplate.query
    if request.args.get("property_id"):
        q = q.filter(InspectionTemplate.property_id == request.args["property_id"])
    q = q.order_by(InspectionTemplate.name.asc())
    return jsonify([serialize_template(t) for t in q.all()])


@bp.route("/templates/<template_id>", methods=["GET"])
@require_role_holder
def get_template(template_id):
    return jsonify(serialize_template(db.get_or_404(InspectionTemplate, template_id)))


@bp.route("/templates", methods=["POST"])
@require_any_role("owner", "manager")
def create_template():
    data = request.get_json(silent=True)
    err = require_fields(data, ["name"])
    if err:
        return err

    t = InspectionTemplate(items=[], created_by=current_user_id(), notifications_enabled=False)
    err = _apply_template(t, data)
    if err:
        return err

    db.session.add(t)
    db.session.commit()
    return jsonify(serialize_template(t)), 201


@bp.route("/templates/<template_id>", methods=["PATCH", "PUT"])
@require_any_role("owner", "manager")
def update_template(template_id):
    t = db.get_or_404(InspectionTemplate, template_id)
    data = request.get_json(silent=True)
    if data is None:
        return jsonify({"error": "invalid_json"}), 400

    with db.session.no_autoflush:
        err = _apply_template(t, data)
    if err:
        db.session.rollback()
        return err

    db.session.commit()
    return jsonify(serialize_template(t))


@bp.route("/templates/<template_id>", methods=["DELETE"])
@require_any_role("owner", "manager")
def delete_template(template_id):
    t = db.get_or_404(InspectionTemplate, template_id)
    if t.is_predefined:
        return jsonify({"error": "template_predefined"}), 400
    db.session.delete(t)
    db.session.commit()
    return jsonify({"message": "template deleted"})


# assignments

def assign_templates(user_id, template_ids, assigned_by=None):
    """Stage assignments for user_id; unknown or already assigned templates are skipped. Caller commits."""
    existing = {
        a.template_id for a in InspectionAssignment.query.filter(InspectionAssignment.assigned_to == user_id)
    }
    created = []
    for tid in template_ids:
        if tid in existing or not db.session.get(InspectionTemplate, tid):
            continue
        a = InspectionAssignment(template_id=tid, assigned_to=user_id, assigned_by=assigned_by)
        db.session.add(a)
        existing.add(tid)
        created.append(a)
    return created


@bp.route("/assignments", methods=["GET"])
@require_any_role("owner", "manager")
def list_all_assignments():
    q = InspectionAssignment.query.order_by(InspectionAssignment.created_at.desc())
    return jsonify([serialize_assignment(a) for a in q.all()])


@bp.route("/my-assignments", methods=["GET"])
@require_role_holder
def my_assignments():
    q = (
        InspectionAssignment.query
        .filter(InspectionAssignment.assigned_to == current_user_id())
        .order_by(InspectionAssignment.created_at.desc())
    )
    rows = []
    for a in q.all():
        row = serialize_assignment(a)
        row["template"] = serialize_template(a.template)
        rows.append(row)
    return jsonify(rows)


@bp.route("/templates/<template_id>/assignments", methods=["GET"])
@require_any_role("owner", "manager")
def list_assignments(template_id):
    db.get_or_404(InspectionTemplate, template_id)
    q = (
        InspectionAssignment.query
        .filter(InspectionAssignment.template_id == template_id)
        .order_by(InspectionAssignment.created_at.desc())
    )
    return jsonify([serialize_assignment(a) for a in q.all()])


@bp.route("/templates/<template_id>/assignments", methods=["POST"])
@require_any_role("owner", "manager")
def create_assignment(template_id):
    t = db.get_or_404(InspectionTemplate, template_id)
    data = request.get_json(silent=True)
    err = require_fields(data, ["assigned_to"])
    if err:
        return err

    user = db.session.get(Profile, data["assigned_to"])
    if not user or not user.is_active:
        return jsonify({"error": "user_not_found", "field": "assigned_to"}), 404

    dup = InspectionAssignment.query.filter_by(template_id=t.id, assigned_to=user.id).first()
    if dup:
        return jsonify({"error": "already_assigned"}), 409

    a = InspectionAssignment(template_id=t.id, assigned_to=user.id, assigned_by=current_user_id())
    db.session.add(a)
    db.session.commit()
    return jsonify(serialize_assignment(a)), 201


@bp.route("/templates/<template_id>/assignments/<assignment_id>", methods=["DELETE"])
@require_any_role("owner", "manager")
def delete_assignment(template_id, assignment_id):
    a = db.get_or_404(InspectionAssignment, assignment_id)
    if a.template_id != template_id:
        return jsonify({"error": "not_found"}), 404
    db.session.delete(a)
    db.session.commit()
    return jsonify({"message": "assignment removed"})


# records

@bp.route("/records", methods=["GET"])
@require_role_holder
def list_records():
    q = InspectionRecord.query
    if request.args.get("property_id"):
        q = q.filter(InspectionRecord.property_id == request.args["property_id"])
    if request.args.get("template_id"):
        q = q.filter(InspectionRecord.template_id == request.args["template_id"])
    q = q.order_by(InspectionRecord.inspection_date.desc(), InspectionRecord.created_at.desc())
    return jsonify(paginate(q, serialize_record))


@bp.route("/records/<record_id>", methods=["GET"])
@require_role_holder
def get_record(record_id):
    return jsonify(serialize_record(db.get_or_404(InspectionRecord, record_id)))


@bp.route("/records", methods=["POST"])
@require_role_holder
def create_record():
    data = request.get_json(silent=True)
    err = require_fields(data, ["property_id", "inspection_date", "items"])
    if err:
        return err

    err = _check_property(data["property_id"])
    if err:
        return err

    inspection_date = parse_date(data["inspection_date"])
    if inspection_date is None:
        return jsonify({"error": "invalid_date", "field": "inspection_date"}), 400

    items = normalize_items(data["items"], record=True)
    if not items:
        return jsonify({"error": "invalid_items"}), 400

    template = None
    if data.get("template_id"):
        template = db.session.get(InspectionTemplate, data["template_id"])
        if not template:
            return jsonify({"error": "template_not_found"}), 404

    performed_by = data.get("performed_by") or current_user_id()
    if not db.session.get(Profile, performed_by):
        return jsonify({"error": "user_not_found", "field": "performed_by"}), 404

    if data.get("next_due_date"):
        next_due = parse_date(data["next_due_date"])
        if next_due is None:
            return jsonify({"error": "invalid_date", "field": "next_due_date"}), 400
    elif template:
        next_due = next_occurrence(inspection_date, template.frequency_type, template.frequency_days)
    else:
        next_due = None

    r = InspectionRecord(
        template_id=template.id if template else None,
        property_id=data["property_id"],
        inspection_date=inspection_date,
        next_due_date=next_due,
        items=items,
        notes=data.get("notes"),
        performed_by=performed_by,
        entered_by=current_user_id(),
    )
    db.session.add(r)
    if template and next_due:
        template.next_occurrence = next_due
    db.session.commit()
    return jsonify(serialize_record(r)), 201


@bp.route("/records/<record_id>", methods=["PATCH", "PUT"])
@require_role_holder
def update_record(record_id):
    r = db.get_or_404(InspectionRecord, record_id)
    data = request.get_json(silent=True)
    if data is None:
        return jsonify({"error": "invalid_json"}), 400

    with db.session.no_autoflush:
        err = _apply_record(r, data)
    if err:
        db.session.rollback()
        return err

    db.session.commit()
    return jsonify(serialize_record(r))


def _apply_record(r: InspectionRecord, data):
    if "items" in data:
        items = normalize_items(data["items"], record=True)
        if not items:
            return jsonify({"error": "invalid_items"}), 400
        r.items = items

    for f in ("inspection_date", "next_due_date"):
        if f in data:
            value = parse_date(data[f]) if data[f] else None
            if data[f] and value is None:
                return jsonify({"error": "invalid_date", "field": f}), 400
            if f == "inspection_date" and value is None:
                return jsonify({"error": "missing_fields", "fields": [f]}), 400
            setattr(r, f, value)

    if "notes" in data:
        r.notes = data["notes"]

    return None


@bp.route("/records/<record_id>", methods=["DELETE"])
@require_any_role("owner", "manager")
def delete_record(record_id):
    r = db.get_or_404(InspectionRecord, record_id)
    db.session.delete(r)
    db.session.commit()
    return jsonify({"message": "inspection record deleted"})
