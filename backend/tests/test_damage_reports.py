import io
from datetime import date
from types import SimpleNamespace

from strmanager.utils.claims import claim_deadline_info, titleize

TODAY = date(2025, 3, 1)


def _report(**kw):
    base = dict(check_out_date=None, booking_platform=None, claim_deadline=None, claim_status="not_filed")
    base.update(kw)
    return SimpleNamespace(**base)


def test_no_check_out_means_no_deadline():
    assert claim_deadline_info(_report(), TODAY) is None


def test_airbnb_window_is_fourteen_days():
    info = claim_deadline_info(_report(check_out_date=date(2025, 2, 20), booking_platform="airbnb"), TODAY)
    assert info["deadline"] == "2025-03-06"
    assert info["platform_days"] == 14
    assert info["platform_label"] == "Airbnb AirCover"
    assert info["days_remaining"] == 5
    assert info["is_urgent"] is False
    assert info["is_overdue"] is False
    assert info["is_filed"] is False


def test_vrbo_window_is_sixty_days():
    info = claim_deadline_info(_report(check_out_date=date(2025, 1, 1), booking_platform="vrbo"), TODAY)
    assert info["deadline"] == "2025-03-02"
    assert info["days_remaining"] == 1
    assert info["is_urgent"] is True


def test_unknown_platform_uses_thirty_days():
    info = claim_deadline_info(_report(check_out_date=date(2025, 2, 1), booking_platform="booking_com"), TODAY)
    assert info["platform_days"] == 30
    assert info["platform_label"] == "Platform"
    assert info["deadline"] == "2025-03-03"


def test_explicit_deadline_wins_and_can_be_overdue():
    info = claim_deadline_info(
        _report(check_out_date=date(2025, 2, 20), booking_platform="airbnb",
                claim_deadline=date(2025, 2, 25), claim_status="filed_with_platform"),
        TODAY,
    )
    assert info["deadline"] == "2025-02-25"
    assert info["days_remaining"] == -4
    assert info["is_overdue"] is True
    assert info["is_urgent"] is False
    assert info["is_filed"] is True


def test_titleize():
    assert titleize("filed_with_platform") == "Filed With Platform"
    assert titleize(None) == ""


def _create(client, headers, **overrides):
    body = {"description": "Red wine on the sofa", "location": "Living room", "damage_date": "2025-02-19"}
    body.update(overrides)
    return client.post("/api/damage-reports", json=body, headers=headers)


def test_create_report_with_defaults(client, inspector, inspector_headers, beach_house):
    resp = _create(client, inspector_headers, property_id=beach_house.id, estimated_value="250")
    assert resp.status_code == 201
    data = resp.get_json()
    assert data["severity"] == "minor"
    assert data["status"] == "reported"
    assert data["responsible_party"] == "guest"
    assert data["claim_status"] == "not_filed"
    assert data["reported_by"] == inspector.id
    assert data["property_name"] == "Beach House"
    assert data["estimated_value"] == 250.0
    assert data["claim"] is None


def test_create_report_validation(client, owner_headers):
    resp = client.post("/api/damage-reports", json={"description": "x"}, headers=owner_headers)
    assert resp.get_json() == {"error": "missing_fields", "fields": ["location", "damage_date"]}

    resp = _create(client, owner_headers, severity="catastrophic")
    assert resp.status_code == 400
    assert resp.get_json()["field"] == "severity"

    resp = _create(client, owner_headers, check_in_date="2025-02-10", check_out_date="2025-02-08")
    assert resp.get_json() == {"error": "check_out_before_check_in"}

    assert _create(client, owner_headers, repair_cost="-5").status_code == 400


def test_report_carries_claim_deadline(client, owner_headers):
    data = _create(client, owner_headers, booking_platform="airbnb", check_in_date="2025-02-15",
                   check_out_date="2025-02-19", reservation_id="HM123").get_json()
    assert data["claim"]["deadline"] == "2025-03-05"
    assert data["claim"]["platform_days"] == 14


def test_clearing_optional_choice(client, owner_headers):
    r = _create(client, owner_headers, booking_platform="vrbo").get_json()
    resp = client.patch(f"/api/damage-reports/{r['id']}", json={"booking_platform": "", "status": "assessed"},
                        headers=owner_headers)
    assert resp.status_code == 200
    assert resp.get_json()["booking_platform"] is None
    assert resp.get_json()["status"] == "assessed"


def test_list_is_paginated_newest_first(client, owner_headers):
    _create(client, owner_headers, damage_date="2025-01-01", title="old")
    _create(client, owner_headers, damage_date="2025-02-01", title="new", status="completed")

    page = client.get("/api/damage-reports?per_page=1", headers=owner_headers).get_json()
    assert page["meta"]["total_items"] == 2
    assert page["meta"]["total_pages"] == 2
    assert [r["title"] for r in page["items"]] == ["new"]
    assert "next" in page["links"]

    done = client.get("/api/damage-reports?status=completed", headers=owner_headers).get_json()
    assert [r["title"] for r in done["items"]] == ["new"]


def test_only_managers_delete(client, owner_headers, inspector_headers, manager_headers):
    r = _create(client, owner_headers).get_json()
    assert client.delete(f"/api/damage-reports/{r['id']}", headers=inspector_headers).status_code == 403
    assert client.delete(f"/api/damage-reports/{r['id']}", headers=manager_headers).status_code == 200


def test_photo_kinds(client, owner_headers):
    r = _create(client, owner_headers).get_json()

    resp = client.post(f"/api/damage-reports/{r['id']}/photos?kind=receipt",
                       data={"files": [(io.BytesIO(b"r"), "invoice.pdf")]},
                       headers=owner_headers, content_type="multipart/form-data")
    assert resp.status_code == 201
    assert len(resp.get_json()["receipt_urls"]) == 1

    resp = client.post(f"/api/damage-reports/{r['id']}/photos?kind=selfie",
                       data={"files": [(io.BytesIO(b"r"), "a.jpg")]},
                       headers=owner_headers, content_type="multipart/form-data")
    assert resp.status_code == 400

    again = client.get(f"/api/damage-reports/{r['id']}", headers=owner_headers).get_json()
    assert again["photo_urls"] == []
    assert len(again["receipt_urls"]) == 1


def test_claim_pdf(client, owner_headers, beach_house):
    r = _create(client, owner_headers, property_id=beach_house.id, booking_platform="airbnb",
                check_out_date="2025-02-19", reservation_id="HM123",
                guest_name="<b>Guest</b>", claim_status="filed_with_platform").get_json()

    resp = client.get(f"/api/damage-reports/{r['id']}/claim.pdf", headers=owner_headers)
    assert resp.status_code == 200
    assert resp.mimetype == "application/pdf"
    assert resp.data.startswith(b"%PDF")
    assert 'filename="damage-claim-HM123.pdf"' in resp.headers["Content-Disposition"]
