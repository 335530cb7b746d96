from datetime import date, datetime, timedelta

import pytest

from strmanager.errors import StoreError
from strmanager.extensions import db
from strmanager.models import (
    DamageReport, InspectionRecord, InspectionTemplate, InventoryItem, Invitation, Property,
)
from strmanager.utils.backfill import BACKFILL_PROPERTY_ID, backfill_unassigned


@pytest.fixture
def default_property(owner):
    p = Property(id=BACKFILL_PROPERTY_ID, name="Main House")
    db.session.add(p)
    db.session.commit()
    return p


@pytest.fixture
def unassigned(owner, beach_house):
    first = InspectionTemplate(name="Monthly", items=[], created_at=datetime(2024, 1, 1))
    second = InspectionTemplate(name="Turnover", items=[], created_at=datetime(2024, 6, 1))
    db.session.add_all([first, second])
    db.session.flush()
    db.session.add_all([
        InspectionRecord(inspection_date=date(2024, 2, 1), items=[], entered_by=owner.id),
        InspectionRecord(inspection_date=date(2024, 3, 1), items=[], entered_by=owner.id, template_id=second.id),
        InspectionRecord(inspection_date=date(2024, 3, 1), items=[], entered_by=owner.id, property_id=beach_house.id),
        InventoryItem(name="Soap"),
        InventoryItem(name="Coffee", property_id=beach_house.id),
        DamageReport(description="Stain", location="Rug", damage_date=date(2024, 4, 1), reported_by=owner.id),
    ])
    db.session.commit()
    return first


def test_backfill_assigns_orphans(app, default_property, unassigned):
    counts = backfill_unassigned()
    assert counts == {
        "inspection_records": 2,
        "inventory_items": 1,
        "damage_reports": 1,
        "inspection_templates_linked": 2,
    }

    db.session.expire_all()
    assert InspectionRecord.query.filter(InspectionRecord.property_id.is_(None)).count() == 0
    assert InventoryItem.query.filter_by(name="Soap").one().property_id == BACKFILL_PROPERTY_ID
    assert InspectionRecord.query.filter_by(template_id=unassigned.id).count() == 2

    again = backfill_unassigned()
    assert set(again.values()) == {0}


def test_backfill_needs_target_property(app, owner):
    with pytest.raises(StoreError) as exc:
        backfill_unassigned()
    assert exc.value.status == 404


def test_backfill_endpoint(client, owner_headers, default_property, unassigned):
    resp = client.post("/api/functions/update-sample-data", headers=owner_headers)
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True
    assert body["updated"]["damage_reports"] == 1


def test_backfill_endpoint_missing_property(client, owner_headers):
    resp = client.post("/api/functions/update-sample-data", headers=owner_headers)
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "not_found"}


def test_backfill_cli(app, beach_house, unassigned):
    result = app.test_cli_runner().invoke(args=["backfill-unassigned", "--property-id", beach_house.id])
    assert result.exit_code == 0
    assert "inventory_items=1" in result.output
    assert "inspection_templates_linked=2" in result.output


def test_cleanup_expired_invitations_cli(app, owner):
    now = datetime.utcnow()
    db.session.add_all([
        Invitation(owner_id=owner.id, email="old@example.com", full_name="Old", role="manager",
                   invitation_token="t-old", permissions={}, expires_at=now - timedelta(days=1)),
        Invitation(owner_id=owner.id, email="new@example.com", full_name="New", role="manager",
                   invitation_token="t-new", permissions={}, expires_at=now + timedelta(days=1)),
    ])
    db.session.commit()

    result = app.test_cli_runner().invoke(args=["cleanup-expired-invitations"])
    assert result.output.strip() == "deleted=1"
    assert [i.email for i in Invitation.query.all()] == ["new@example.com"]


def test_send_warranty_digest_cli(app, mailbox):
    result = app.test_cli_runner().invoke(args=["send-warranty-digest", "--to", "ops@example.com"])
    assert result.exit_code == 0
    assert result.output.strip() == "count=0 urgent=0"
    assert mailbox.sent == []
