from functools import wraps
from flask import jsonify
from flask_jwt_extended import verify_jwt_in_request, get_jwt_identity

from ..models import UserRole


def current_user_id():
    return get_jwt_identity()


def current_roles():
    # read from the table, not the token, so revoked roles take effect at once
    rows = UserRole.query.filter(UserRole.user_id == current_user_id()).all()
    return {r.role for r in rows}


def require_any_role(*roles):
    allowed = {r.lower() for r in roles}

    def deco(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            held = current_roles()

            # owner bypass
            if "owner" in held:
                return fn(*args, **kwargs)

            if not held & allowed:
                return jsonify({"error": "forbidden"}), 403

            return fn(*args, **kwargs)
        return wrapper
    return deco


def require_role_holder(fn):
    """Any authenticated user with at least one role."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        if not current_roles():
            return jsonify({"error": "forbidden"}), 403
        return fn(*args, **kwargs)
    return wrapper
