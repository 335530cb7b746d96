import logging

from flask import Blueprint, request, jsonify
from flask_jwt_extended import create_access_token, jwt_required
from werkzeug.security import generate_password_hash, check_password_hash

from ..extensions import db
from ..models import Profile, UserRole
from ..utils.authz import current_user_id
from ..utils.validation import require_fields

logger = logging.getLogger(__name__)

bp = Blueprint("auth", __name__, url_prefix="/api/auth")

MIN_PASSWORD_LENGTH = 8


def serialize_user(u: Profile):
    return {
        "id": u.id,
        "email": u.email,
        "full_name": u.full_name,
        "is_active": u.is_active,
        "roles": u.role_names,
        "created_at": u.created_at.isoformat() if u.created_at else None,
    }


def issue_token(u: Profile):
    roles = u.role_names
    claims = {"roles": roles, "role": roles[0] if roles else None}
    return create_access_token(identity=u.id, additional_claims=claims)


@bp.route("/register", methods=["POST"])
def register():
    data = request.get_json(silent=True)
    err = require_fields(data, ["email", "password", "full_name"])
    if err:
        return err

    email = data["email"].strip().lower()
    if len(data["password"]) < MIN_PASSWORD_LENGTH:
        return jsonify({"error": "password_too_short", "min_length": MIN_PASSWORD_LENGTH}), 400

    if Profile.query.filter(Profile.email == email).first():
        return jsonify({"error": "email_taken"}), 409

    # the first account on an empty install owns it
    first_user = Profile.query.count() == 0

    u = Profile(
        email=email,
        full_name=data["full_name"].strip(),
        password_hash=generate_password_hash(data["password"]),
    )
    db.session.add(u)
    db.session.flush()
    if first_user:
        db.session.add(UserRole(user_id=u.id, role="owner"))
    db.session.commit()

    logger.info("registered user %s owner=%s", u.id, first_user)
    return jsonify({"user": serialize_user(u), "access_token": issue_token(u)}), 201


@bp.route("/login", methods=["POST"])
def login():
    data = request.get_json(silent=True)
    err = require_fields(data, ["email", "password"])
    if err:
        return err

    u = Profile.query.filter(Profile.email == data["email"].strip().lower()).first()
    if not u or not check_password_hash(u.password_hash, data["password"]):
        return jsonify({"error": "invalid_credentials"}), 401
    if not u.is_active:
        return jsonify({"error": "account_disabled"}), 403

    return jsonify({"access_token": issue_token(u), "user": serialize_user(u)})


@bp.route("/me", methods=["GET"])
@jwt_required()
def me():
    u = db.session.get(Profile, current_user_id())
    if not u:
        return jsonify({"error": "not_found"}), 404
    return jsonify(serialize_user(u))
