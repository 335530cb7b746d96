from datetime import date, timedelta

import pytest

from strmanager.extensions import db
from strmanager.models import Invitation, NotificationSettings, Warranty
from strmanager.notifications.digest import send_warranty_digest
from strmanager.notifications.messages import normalize_url, restock_total
from strmanager.notifications.schemas import RestockItem


def _restock_item(**kw):
    body = {"name": "Towels", "currentStock": 2, "restockLevel": 10, "cost": 3.5, "supplierUrl": "linens.example.com"}
    body.update(kw)
    return body


# invitations

def test_invitation_sends_email(client, owner_headers, mailbox):
    resp = client.post("/api/functions/create-user-invitation", json={
        "email": "Cleaner@Example.com", "fullName": "<script>alert(1)</script>", "role": "manager",
    }, headers=owner_headers)
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["success"] is True
    assert body["invitation"]["email"] == "cleaner@example.com"
    assert body["invitation_url"].startswith("http://localhost:5173/accept-invitation?token=")

    [mail] = mailbox.sent
    assert mail["to"] == ["cleaner@example.com"]
    assert mail["subject"] == "You've been invited to join as manager"
    assert mail["from"] == "Property Management <onboarding@resend.dev>"
    assert "<script>" not in mail["html"]
    assert "&lt;script&gt;" in mail["html"]
    assert "Olivia Owner" in mail["html"]
    assert body["invitation_url"] in mail["html"]


def test_inspector_invitation_mentions_inspection_types(client, owner_headers, mailbox):
    type_id = "3f2504e0-4f89-11d3-9a0c-0305e82c3301"
    resp = client.post("/api/functions/create-user-invitation", json={
        "email": "ins@example.com", "fullName": "Ins", "role": "inspector", "inspectionTypeIds": [type_id],
    }, headers=owner_headers)
    assert resp.status_code == 201
    assert resp.get_json()["invitation"]["permissions"] == {"inspection_type_ids": [type_id]}
    assert "specific inspection types" in mailbox.sent[0]["html"]


def test_invitation_validation(client, owner_headers, manager_headers, mailbox):
    resp = client.post("/api/functions/create-user-invitation",
                       json={"email": "not-an-email", "fullName": "", "role": "owner"}, headers=owner_headers)
    assert resp.status_code == 400
    message = resp.get_json()["error"]
    assert "email" in message and "fullName" in message and "role" in message

    resp = client.post("/api/functions/create-user-invitation",
                       json={"email": "manager@example.com", "fullName": "Max", "role": "manager"},
                       headers=owner_headers)
    assert resp.status_code == 409
    assert resp.get_json() == {"error": "user_exists"}

    resp = client.post("/api/functions/create-user-invitation",
                       json={"email": "x@example.com", "fullName": "X", "role": "manager"},
                       headers=manager_headers)
    assert resp.status_code == 403
    assert mailbox.sent == []


def test_invitation_email_failure_is_reported(client, owner_headers, mailbox):
    mailbox.fail = True
    resp = client.post("/api/functions/create-user-invitation",
                       json={"email": "x@example.com", "fullName": "X", "role": "manager"}, headers=owner_headers)
    assert resp.status_code == 502
    assert resp.get_json()["error"] == "email_delivery_failed"
    # the invitation row stays so it can be resent
    assert Invitation.query.filter_by(email="x@example.com").count() == 1


# restock

def test_restock_total_and_url():
    items = [RestockItem.model_validate(_restock_item()), RestockItem.model_validate(_restock_item(currentStock=0, cost=1))]
    assert restock_total(items) == pytest.approx(3.5 * 10 + 1 * 10)
    assert normalize_url("linens.example.com") == "https://linens.example.com"
    assert normalize_url("http://a.example") == "http://a.example"
    assert normalize_url("") is None


def test_restock_email(client, manager_headers, mailbox):
    resp = client.post("/api/functions/send-inventory-emails", json={
        "items": [_restock_item(), _restock_item(name="Soap", supplierUrl=None, cost=2)],
        "recipients": ["orders@supplier.example"],
    }, headers=manager_headers)
    assert resp.status_code == 200
    assert resp.get_json() == {
        "success": True,
        "message": "Restock request sent to 1 recipient(s)",
        "item_count": 2,
    }

    [mail] = mailbox.sent
    assert mail["subject"] == "🏨 Inventory Restock Request - 2 Items Need Restocking"
    assert mail["from"] == "Inventory Management <onboarding@resend.dev>"
    assert "https://linens.example.com" in mail["html"]
    assert "$55.00" in mail["html"]
    assert "Estimated Total Value: $55.00" in mail["text"]
    assert "2 inventory items that have fallen" in mail["html"]


def test_restock_email_singular_wording(client, owner_headers, mailbox):
    client.post("/api/functions/send-inventory-emails",
                json={"items": [_restock_item()], "recipients": ["a@b.co"]}, headers=owner_headers)
    assert mailbox.sent[0]["subject"].endswith("1 Item Need Restocking")
    assert "1 inventory item that has fallen" in mailbox.sent[0]["html"]


def test_restock_email_validation(client, owner_headers, mailbox):
    resp = client.post("/api/functions/send-inventory-emails",
                       json={"items": [], "recipients": ["a@b.co"]}, headers=owner_headers)
    assert resp.status_code == 400

    resp = client.post("/api/functions/send-inventory-emails",
                       json={"items": [_restock_item(currentStock=-1)], "recipients": ["nope"]}, headers=owner_headers)
    assert resp.status_code == 400
    assert "currentStock" in resp.get_json()["error"]
    assert mailbox.sent == []


def test_restock_email_is_rate_limited(client, manager_headers, owner_headers, mailbox):
    body = {"items": [_restock_item()], "recipients": ["a@b.co"]}
    for _ in range(3):
        assert client.post("/api/functions/send-inventory-emails", json=body, headers=manager_headers).status_code == 200

    resp = client.post("/api/functions/send-inventory-emails", json=body, headers=manager_headers)
    assert resp.status_code == 429
    assert int(resp.headers["Retry-After"]) > 0
    assert len(mailbox.sent) == 3

    # quotas are per caller
    assert client.post("/api/functions/send-inventory-emails", json=body, headers=owner_headers).status_code == 200


def test_restock_requires_manager(client, inspector_headers):
    resp = client.post("/api/functions/send-inventory-emails",
                       json={"items": [_restock_item()], "recipients": ["a@b.co"]}, headers=inspector_headers)
    assert resp.status_code == 403


# warranty digest

def _warranty(product, expires, **kw):
    w = Warranty(product_name=product, purchase_date=expires - timedelta(days=365), warranty_duration_type="1_year",
                 warranty_expiration_date=expires, attachment_urls=[], **kw)
    db.session.add(w)
    db.session.commit()
    return w


def test_digest_groups_by_urgency(app, mailbox, beach_house):
    today = date(2025, 6, 1)
    _warranty("Fridge", today, property_id=beach_house.id, cost=1200)
    _warranty("Washer", today + timedelta(days=5), vendor="Lowes")
    _warranty("Oven", today + timedelta(days=20))
    _warranty("Expired TV", today - timedelta(days=1))
    _warranty("Far Future", today + timedelta(days=31))

    result = send_warranty_digest(["ops@example.com"], today=today)
    assert result == {"success": True, "count": 3, "urgent": 2}

    [mail] = mailbox.sent
    assert mail["subject"] == "🚨 2 Warranties Expiring Soon - Action Required"
    assert mail["from"] == "STR Manager <onboarding@resend.dev>"
    html = mail["html"]
    assert "Expiring Today / Tomorrow (1)" in html
    assert "Expiring Within 7 Days (1)" in html
    assert "Expiring Within 30 Days (1)" in html
    assert "Beach House" in html and "$1200.00" in html
    assert "Expired TV" not in html and "Far Future" not in html
    assert html.index("Fridge") < html.index("Washer") < html.index("Oven")


def test_digest_without_urgent_rows(app, mailbox):
    today = date(2025, 6, 1)
    _warranty("Oven", today + timedelta(days=20))
    result = send_warranty_digest(["ops@example.com"], today=today)
    assert result == {"success": True, "count": 1, "urgent": 0}
    assert mailbox.sent[0]["subject"] == "🛡️ 1 Warranty Expiring Within 30 Days"


def test_digest_with_nothing_expiring_sends_nothing(app, mailbox):
    _warranty("Far Future", date(2025, 6, 1) + timedelta(days=90))
    assert send_warranty_digest(["ops@example.com"], today=date(2025, 6, 1)) == {"success": True, "count": 0, "urgent": 0}
    assert mailbox.sent == []


def test_digest_endpoint_falls_back_to_saved_recipients(client, manager, manager_headers, mailbox):
    _warranty("Washer", date.today() + timedelta(days=3))

    resp = client.post("/api/functions/send-warranty-expiration-emails", json={}, headers=manager_headers)
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "no_recipients"}

    db.session.add(NotificationSettings(user_id=manager.id, notification_emails=["saved@example.com"]))
    db.session.commit()

    resp = client.post("/api/functions/send-warranty-expiration-emails", json={}, headers=manager_headers)
    assert resp.status_code == 200
    assert resp.get_json()["count"] == 1
    assert mailbox.sent[0]["to"] == ["saved@example.com"]

    resp = client.post("/api/functions/send-warranty-expiration-emails",
                       json={"recipients": ["explicit@example.com"]}, headers=manager_headers)
    assert mailbox.sent[1]["to"] == ["explicit@example.com"]

    # three calls used the hourly quota
    resp = client.post("/api/functions/send-warranty-expiration-emails",
                       json={"recipients": ["explicit@example.com"]}, headers=manager_headers)
    assert resp.status_code == 429


def test_update_sample_data_requires_owner(client, manager_headers):
    assert client.post("/api/functions/update-sample-data", headers=manager_headers).status_code == 403
