from datetime import datetime

import click

from .extensions import db
from .models import Invitation
from .notifications.digest import send_warranty_digest
from .utils.backfill import BACKFILL_PROPERTY_ID, backfill_unassigned


def register_cli(app):
    @app.cli.command("cleanup-expired-invitations")
    def cleanup_expired_invitations():
        now = datetime.utcnow()
        deleted = (
            db.session.query(Invitation)
            .filter(Invitation.expires_at < now, Invitation.accepted_at.is_(None))
            .delete(synchronize_session=False)
        )
        db.session.commit()
        click.echo(f"deleted={deleted}")

    @app.cli.command("backfill-unassigned")
    @click.option("--property-id", default=BACKFILL_PROPERTY_ID, show_default=True)
    def backfill(property_id):
        counts = backfill_unassigned(property_id)
        for table, n in counts.items():
            click.echo(f"{table}={n}")

    @app.cli.command("send-warranty-digest")
    @click.option("--to", "recipients", multiple=True, required=True, help="Recipient address (repeatable).")
    def send_digest(recipients):
        result = send_warranty_digest(list(recipients))
        click.echo(f"count={result['count']} urgent={result['urgent']}")
