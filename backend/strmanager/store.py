"""
Generic table access used by the API and the maintenance scripts.

Every call is one independent unit of work: it commits (or rolls back) on
its own, so callers chaining several writes get no cross-table atomicity.
"""
import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from sqlalchemy import Date, DateTime, Numeric
from sqlalchemy.exc import SQLAlchemyError

from .errors import StoreError
from .extensions import db
from .models import (
    Asset, DamageReport, InspectionRecord, InspectionTemplate, InventoryCategory,
    InventoryItem, InventoryUpdate, Invitation, NotificationSettings, Profile,
    Property, UserProperty, UserRole, Warranty,
)

logger = logging.getLogger(__name__)

TABLES = {
    m.__tablename__: m
    for m in (
        Asset, DamageReport, InspectionRecord, InspectionTemplate, InventoryCategory,
        InventoryItem, InventoryUpdate, Invitation, NotificationSettings, Profile,
        Property, UserProperty, UserRole, Warranty,
    )
}

# never returned or accepted through the generic interface
HIDDEN_COLUMNS = {"profiles": {"password_hash"}}


def _model(table):
    model = TABLES.get(table)
    if model is None:
        raise StoreError("unknown_table", table=table)
    return model


def _columns(model):
    hidden = HIDDEN_COLUMNS.get(model.__tablename__, set())
    return {c.name: c for c in model.__table__.columns if c.name not in hidden}


def _coerce(column, value):
    if value is None:
        return None
    if isinstance(column.type, DateTime) and not isinstance(value, datetime):
        try:
            return datetime.fromisoformat(str(value))
        except ValueError:
            raise StoreError("invalid_value", field=column.name)
    if isinstance(column.type, Date) and not isinstance(column.type, DateTime) and not isinstance(value, date):
        try:
            return date.fromisoformat(str(value)[:10])
        except ValueError:
            raise StoreError("invalid_value", field=column.name)
    if isinstance(column.type, Numeric) and not isinstance(value, Decimal):
        try:
            return Decimal(str(value))
        except InvalidOperation:
            raise StoreError("invalid_value", field=column.name)
    return value


def _check_keys(model, data):
    cols = _columns(model)
    unknown = sorted(k for k in data if k not in cols)
    if unknown:
        raise StoreError("unknown_column", fields=unknown)
    return cols


def to_dict(obj):
    out = {}
    for name in _columns(type(obj)):
        value = getattr(obj, name)
        if isinstance(value, (date, datetime)):
            value = value.isoformat()
        elif isinstance(value, Decimal):
            value = float(value)
        out[name] = value
    return out


def _commit():
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("store write failed")
        raise StoreError("database_error", status=400, details=str(exc.__cause__ or exc))


class TableStore:
    def query(self, table, filters=None, order_by=None):
        model = _model(table)
        cols = _check_keys(model, filters or {})
        q = model.query
        for key, value in (filters or {}).items():
            column = getattr(model, key)
            if value is None:
                q = q.filter(column.is_(None))
            else:
                q = q.filter(column == _coerce(cols[key], value))
        if order_by:
            desc = order_by.startswith("-")
            name = order_by.lstrip("-")
            _check_keys(model, {name: None})
            column = getattr(model, name)
            q = q.order_by(column.desc() if desc else column.asc())
        return q

    def list(self, table, filters=None, order_by=None):
        return [to_dict(r) for r in self.query(table, filters, order_by).all()]

    def get(self, table, id):
        model = _model(table)
        obj = db.session.get(model, id)
        if obj is None:
            raise StoreError("not_found", status=404)
        return obj

    def insert(self, table, row):
        model = _model(table)
        cols = _check_keys(model, row)
        obj = model(**{k: _coerce(cols[k], v) for k, v in row.items()})
        db.session.add(obj)
        _commit()
        return to_dict(obj)

    def update(self, table, id, patch):
        model = _model(table)
        cols = _check_keys(model, patch)
        obj = self.get(table, id)
        for key, value in patch.items():
            if key == "id":
                continue
            setattr(obj, key, _coerce(cols[key], value))
        _commit()
        return to_dict(obj)

    def update_where(self, table, filters, patch):
        """Bulk patch of every row matching filters; returns the row count."""
        model = _model(table)
        cols = _check_keys(model, patch)
        rows = self.query(table, filters).all()
        for obj in rows:
            for key, value in patch.items():
                setattr(obj, key, _coerce(cols[key], value))
        _commit()
        return len(rows)

    def delete(self, table, id):
        obj = self.get(table, id)
        db.session.delete(obj)
        _commit()
        return True


store = TableStore()
