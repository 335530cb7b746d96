from datetime import date
from decimal import Decimal, InvalidOperation

from flask import jsonify


def require_fields(data, fields):
    if data is None:
        return jsonify({"error": "invalid_json"}), 400

    missing = [f for f in fields if f not in data or data[f] in ("", None)]
    if missing:
        return jsonify({"error": "missing_fields", "fields": missing}), 400

    return None


def check_choice(data, field, choices):
    """400 response when data[field] is present but not one of choices."""
    value = data.get(field)
    if value in (None, ""):
        return None
    if value not in choices:
        return jsonify({"error": "invalid_choice", "field": field, "choices": list(choices)}), 400
    return None


def parse_date(value):
    try:
        return date.fromisoformat(str(value)[:10])
    except (TypeError, ValueError):
        return None


def parse_money(value):
    try:
        v = Decimal(str(value))
    except (InvalidOperation, TypeError):
        return None
    if v < 0:
        return None
    return v


def parse_int(value, minimum=None):
    try:
        v = int(value)
    except (TypeError, ValueError):
        return None
    if minimum is not None and v < minimum:
        return None
    return v


def parse_bool(value):
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "y")


def money(value):
    return float(value) if value is not None else None


def iso(value):
    return value.isoformat() if value is not None else None
