import re

from flask import Blueprint, request, jsonify

from ..extensions import db
from ..models import ROLES, NotificationSettings, Profile, Property, UserProperty, UserRole
from ..notifications.schemas import EMAIL_PATTERN
from ..utils.authz import current_user_id, require_any_role, require_role_holder
from ..utils.validation import require_fields, check_choice, parse_bool, iso

bp = Blueprint("users", __name__, url_prefix="/api/users")

_EMAIL_RE = re.compile(EMAIL_PATTERN)


def serialize_user(u: Profile):
    assigned = UserProperty.query.filter(UserProperty.user_id == u.id).all()
    return {
        "id": u.id,
        "email": u.email,
        "full_name": u.full_name,
        "is_active": u.is_active,
        "roles": u.role_names,
        "property_ids": sorted(a.property_id for a in assigned),
        "invited_by": u.invited_by,
        "created_at": iso(u.created_at),
    }


def serialize_settings(s: NotificationSettings):
    return {
        "notification_emails": list(s.notification_emails or []),
        "email_notifications": s.email_notifications,
        "inventory_alerts": s.inventory_alerts,
        "warranty_alerts": s.warranty_alerts,
    }


def settings_for(user_id):
    s = NotificationSettings.query.filter(NotificationSettings.user_id == user_id).first()
    if s is None:
        s = NotificationSettings(
            user_id=user_id, notification_emails=[],
            email_notifications=True, inventory_alerts=True, warranty_alerts=True,
        )
    return s


@bp.route("", methods=["GET"])
@require_any_role("owner")
def list_users():
    users = Profile.query.order_by(Profile.full_name.asc()).all()
    return jsonify([serialize_user(u) for u in users])


@bp.route("/<user_id>", methods=["PATCH"])
@require_any_role("owner")
def update_user(user_id):
    u = db.get_or_404(Profile, user_id)
    data = request.get_json(silent=True) or {}

    if data.get("full_name"):
        u.full_name = data["full_name"].strip()
    if "is_active" in data:
        if u.id == current_user_id() and not parse_bool(data["is_active"]):
            return jsonify({"error": "cannot_deactivate_self"}), 400
        u.is_active = parse_bool(data["is_active"])

    db.session.commit()
    return jsonify(serialize_user(u))


@bp.route("/<user_id>/roles", methods=["POST"])
@require_any_role("owner")
def grant_role(user_id):
    u = db.get_or_404(Profile, user_id)
    data = request.get_json(silent=True)
    err = require_fields(data, ["role"]) or check_choice(data, "role", ROLES)
    if err:
        return err

    if data["role"] in u.role_names:
        return jsonify({"error": "role_exists"}), 409

    db.session.add(UserRole(user_id=u.id, role=data["role"]))
    db.session.commit()
    db.session.refresh(u)
    return jsonify(serialize_user(u)), 201


@bp.route("/<user_id>/roles/<role>", methods=["DELETE"])
@require_any_role("owner")
def revoke_role(user_id, role):
    u = db.get_or_404(Profile, user_id)
    if role == "owner" and u.id == current_user_id():
        return jsonify({"error": "cannot_revoke_own_owner_role"}), 400

    row = UserRole.query.filter(UserRole.user_id == u.id, UserRole.role == role).first()
    if not row:
        return jsonify({"error": "not_found"}), 404

    db.session.delete(row)
    db.session.commit()
    db.session.refresh(u)
    return jsonify(serialize_user(u))


@bp.route("/<user_id>/properties", methods=["PUT"])
@require_any_role("owner")
def assign_properties(user_id):
    u = db.get_or_404(Profile, user_id)
    data = request.get_json(silent=True)
    if data is None or not isinstance(data.get("property_ids"), list):
        return jsonify({"error": "missing_fields", "fields": ["property_ids"]}), 400

    wanted = set(data["property_ids"])
    found = {p.id for p in Property.query.filter(Property.id.in_(wanted)).all()}
    missing = sorted(wanted - found)
    if missing:
        return jsonify({"error": "property_not_found", "ids": missing}), 404

    UserProperty.query.filter(UserProperty.user_id == u.id).delete(synchronize_session=False)
    for pid in sorted(wanted):
        db.session.add(UserProperty(user_id=u.id, property_id=pid))
    db.session.commit()
    return jsonify(serialize_user(u))


@bp.route("/me/notification-settings", methods=["GET"])
@require_role_holder
def get_notification_settings():
    return jsonify(serialize_settings(settings_for(current_user_id())))


@bp.route("/me/notification-settings", methods=["PUT"])
@require_role_holder
def put_notification_settings():
    data = request.get_json(silent=True)
    if data is None:
        return jsonify({"error": "invalid_json"}), 400

    s = settings_for(current_user_id())
    if "notification_emails" in data:
        emails = [str(e).strip() for e in (data["notification_emails"] or []) if str(e).strip()]
        bad = [e for e in emails if not _EMAIL_RE.match(e)]
        if bad:
            return jsonify({"error": "invalid_email", "emails": bad}), 400
        s.notification_emails = emails
    for f in ("email_notifications", "inventory_alerts", "warranty_alerts"):
        if f in data:
            setattr(s, f, parse_bool(data[f]))

    db.session.add(s)
    db.session.commit()
    return jsonify(serialize_settings(s))
