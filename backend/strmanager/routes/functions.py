import logging

from flask import Blueprint, current_app, request, jsonify

from ..extensions import db
from ..models import Profile
from ..notifications.digest import send_warranty_digest
from ..notifications.email import get_email_client
from ..notifications.messages import invitation_email, restock_email
from ..notifications.schemas import InvitationRequest, RestockEmailRequest, WarrantyDigestRequest
from ..utils.authz import current_user_id, require_any_role
from ..utils.backfill import backfill_unassigned
from .invitations import invitation_url, new_invitation, serialize_invitation
from .users import settings_for

logger = logging.getLogger(__name__)

bp = Blueprint("functions", __name__, url_prefix="/api/functions")


def _limiter(name):
    return current_app.extensions["rate_limiters"][name]


def _body():
    return request.get_json(silent=True) or {}


@bp.route("/create-user-invitation", methods=["POST"])
@require_any_role("owner")
def create_user_invitation():
    req = InvitationRequest.model_validate(_body())

    if Profile.query.filter(Profile.email == req.email.lower()).first():
        return jsonify({"error": "user_exists"}), 409

    owner = db.session.get(Profile, current_user_id())
    inv = new_invitation(owner.id, req.email, req.full_name, req.role, req.inspection_type_ids)
    db.session.commit()

    url = invitation_url(inv.invitation_token)
    subject, html = invitation_email(inv, owner.full_name, url)
    get_email_client().send(current_app.config["EMAIL_FROM_INVITATIONS"], [inv.email], subject, html)

    logger.info("invitation %s sent to %s as %s", inv.id, inv.email, inv.role)
    return jsonify({
        "success": True,
        "invitation": serialize_invitation(inv),
        "invitation_url": url,
    }), 201


@bp.route("/send-inventory-emails", methods=["POST"])
@require_any_role("owner", "manager")
def send_inventory_emails():
    _limiter("restock").hit(current_user_id())
    req = RestockEmailRequest.model_validate(_body())

    subject, html, text = restock_email(req.items)
    get_email_client().send(
        current_app.config["EMAIL_FROM_INVENTORY"], req.recipients, subject, html, text=text
    )

    logger.info("restock request for %d items sent to %d recipients", len(req.items), len(req.recipients))
    return jsonify({
        "success": True,
        "message": f"Restock request sent to {len(req.recipients)} recipient(s)",
        "item_count": len(req.items),
    })


@bp.route("/send-warranty-expiration-emails", methods=["POST"])
@require_any_role("owner", "manager")
def send_warranty_expiration_emails():
    _limiter("warranty").hit(current_user_id())
    req = WarrantyDigestRequest.model_validate(_body())

    recipients = list(req.recipients)
    if not recipients:
        recipients = list(settings_for(current_user_id()).notification_emails or [])
    if not recipients:
        return jsonify({"error": "no_recipients"}), 400

    return jsonify(send_warranty_digest(recipients))


@bp.route("/update-sample-data", methods=["POST"])
@require_any_role("owner")
def update_sample_data():
    counts = backfill_unassigned()
    return jsonify({"success": True, "updated": counts})
