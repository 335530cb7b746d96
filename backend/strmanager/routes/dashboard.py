from datetime import date, timedelta

from flask import Blueprint, request, jsonify

from ..models import DamageReport, InspectionRecord, InspectionTemplate, InventoryItem, Warranty
from ..utils.authz import require_role_holder
from ..utils.warranty import EXPIRING_SOON_DAYS
from .damage_reports import CLOSED_STATUSES

bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")

UPCOMING_DAYS = 7


def dashboard_stats(today=None, property_id=None):
    today = today or date.today()
    week = today + timedelta(days=UPCOMING_DAYS)

    def scoped(q, model):
        if property_id:
            q = q.filter(model.property_id == property_id)
        return q

    open_reports = scoped(DamageReport.query, DamageReport).filter(
        DamageReport.status.notin_(CLOSED_STATUSES)
    ).count()

    upcoming_templates = scoped(InspectionTemplate.query, InspectionTemplate).filter(
        InspectionTemplate.next_occurrence >= today,
        InspectionTemplate.next_occurrence <= week,
    ).count()
    upcoming_records = scoped(InspectionRecord.query, InspectionRecord).filter(
        InspectionRecord.next_due_date >= today,
        InspectionRecord.next_due_date <= week,
    ).count()

    low_stock = scoped(InventoryItem.query, InventoryItem).filter(
        InventoryItem.current_quantity <= InventoryItem.restock_threshold
    ).count()

    expiring = scoped(Warranty.query, Warranty).filter(
        Warranty.warranty_expiration_date >= today,
        Warranty.warranty_expiration_date <= today + timedelta(days=EXPIRING_SOON_DAYS),
    ).count()

    return {
        "openDamageReports": open_reports,
        "upcomingInspections": upcoming_templates + upcoming_records,
        "lowStockItems": low_stock,
        "expiringWarranties": expiring,
    }


@bp.route("/stats", methods=["GET"])
@require_role_holder
def stats():
    return jsonify(dashboard_stats(property_id=request.args.get("property_id")))
