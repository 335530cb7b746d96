import logging
from datetime import date, timedelta

from flask import current_app

from ..models import Warranty
from ..utils.warranty import EXPIRING_SOON_DAYS
from .email import get_email_client
from .messages import expiring_rows, warranty_digest_email

logger = logging.getLogger(__name__)


def expiring_warranties(today=None):
    """Warranties with today <= expiration <= today + 30 days, soonest first."""
    today = today or date.today()
    return (
        Warranty.query
        .filter(Warranty.warranty_expiration_date >= today)
        .filter(Warranty.warranty_expiration_date <= today + timedelta(days=EXPIRING_SOON_DAYS))
        .order_by(Warranty.warranty_expiration_date.asc())
        .all()
    )


def send_warranty_digest(recipients, today=None):
    today = today or date.today()
    rows = expiring_rows(expiring_warranties(today), today)
    if not rows:
        logger.info("warranty digest: nothing expiring, no mail sent")
        return {"success": True, "count": 0, "urgent": 0}

    subject, html, urgent = warranty_digest_email(rows)
    get_email_client().send(
        current_app.config["EMAIL_FROM_WARRANTIES"], list(recipients), subject, html
    )
    logger.info("warranty digest sent to %d recipients (%d warranties)", len(recipients), len(rows))
    return {"success": True, "count": len(rows), "urgent": urgent}
