import logging
import secrets
from datetime import datetime, timedelta

from flask import Blueprint, current_app, request, jsonify
from werkzeug.security import generate_password_hash

from ..extensions import db
from ..models import Invitation, Profile, UserRole
from ..utils.authz import current_user_id, require_any_role
from ..utils.validation import require_fields, iso
from .auth import MIN_PASSWORD_LENGTH, issue_token, serialize_user
from .inspections import assign_templates

logger = logging.getLogger(__name__)

bp = Blueprint("invitations", __name__, url_prefix="/api/invitations")


def serialize_invitation(i: Invitation):
    return {
        "id": i.id,
        "email": i.email,
        "full_name": i.full_name,
        "role": i.role,
        "permissions": i.permissions or {},
        "expires_at": iso(i.expires_at),
        "accepted_at": iso(i.accepted_at),
        "created_at": iso(i.created_at),
    }


def new_invitation(owner_id, email, full_name, role, inspection_type_ids=()):
    """Stage an invitation row valid for INVITATION_TTL_DAYS; caller commits."""
    permissions = {}
    if role == "inspector" and inspection_type_ids:
        permissions["inspection_type_ids"] = [str(i) for i in inspection_type_ids]

    inv = Invitation(
        owner_id=owner_id,
        email=email.strip().lower(),
        full_name=full_name.strip(),
        role=role,
        invitation_token=secrets.token_urlsafe(32),
        permissions=permissions,
        expires_at=datetime.utcnow() + timedelta(days=current_app.config["INVITATION_TTL_DAYS"]),
    )
    db.session.add(inv)
    return inv


def invitation_url(token):
    return f"{current_app.config['APP_BASE_URL'].rstrip('/')}/accept-invitation?token={token}"


def _usable(token):
    """(invitation, None) or (None, error response)."""
    inv = Invitation.query.filter(Invitation.invitation_token == token).first()
    if not inv:
        return None, (jsonify({"error": "invitation_not_found"}), 404)
    if inv.accepted_at is not None:
        return None, (jsonify({"error": "invitation_already_used"}), 409)
    if inv.expires_at < datetime.utcnow():
        return None, (jsonify({"error": "invitation_expired"}), 410)
    return inv, None


@bp.route("", methods=["GET"])
@require_any_role("owner")
def list_pending():
    rows = (
        Invitation.query
        .filter(Invitation.owner_id == current_user_id())
        .filter(Invitation.accepted_at.is_(None))
        .filter(Invitation.expires_at > datetime.utcnow())
        .order_by(Invitation.created_at.desc())
        .all()
    )
    return jsonify([serialize_invitation(i) for i in rows])


@bp.route("/<invitation_id>", methods=["DELETE"])
@require_any_role("owner")
def revoke(invitation_id):
    inv = db.get_or_404(Invitation, invitation_id)
    if inv.accepted_at is not None:
        return jsonify({"error": "invitation_already_used"}), 409

    db.session.delete(inv)
    db.session.commit()
    logger.info("invitation revoked id=%s", invitation_id)
    return jsonify({"message": "invitation revoked"})


@bp.route("/accept/<token>", methods=["GET"])
def lookup(token):
    inv, err = _usable(token)
    if err:
        return err
    return jsonify({
        "email": inv.email,
        "full_name": inv.full_name,
        "role": inv.role,
        "expires_at": iso(inv.expires_at),
    })


@bp.route("/accept", methods=["POST"])
def accept():
    data = request.get_json(silent=True)
    err = require_fields(data, ["token", "password"])
    if err:
        return err

    inv, err = _usable(data["token"])
    if err:
        return err

    if len(data["password"]) < MIN_PASSWORD_LENGTH:
        return jsonify({"error": "password_too_short", "min_length": MIN_PASSWORD_LENGTH}), 400
    if Profile.query.filter(Profile.email == inv.email).first():
        return jsonify({"error": "email_taken"}), 409

    u = Profile(
        email=inv.email,
        full_name=(data.get("full_name") or inv.full_name).strip(),
        password_hash=generate_password_hash(data["password"]),
        invited_by=inv.owner_id,
    )
    db.session.add(u)
    db.session.flush()
    db.session.add(UserRole(user_id=u.id, role=inv.role))
    assigned = []
    if inv.role == "inspector":
        assigned = assign_templates(u.id, (inv.permissions or {}).get("inspection_type_ids", []), inv.owner_id)

    inv.accepted_at = datetime.utcnow()
    inv.accepted_by = u.id
    db.session.commit()
    db.session.refresh(u)

    logger.info("invitation accepted id=%s user=%s role=%s assignments=%d", inv.id, u.id, inv.role, len(assigned))
    return jsonify({"user": serialize_user(u), "access_token": issue_token(u)}), 201
