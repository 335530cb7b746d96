import pytest

from strmanager.errors import StoreError
from strmanager.store import store


def test_insert_list_update_delete(app, owner):
    a = store.insert("properties", {"name": "Cabin", "city": "Asheville", "created_by": owner.id})
    b = store.insert("properties", {"name": "Apartment", "created_by": owner.id})
    assert a["id"] and a["name"] == "Cabin"

    rows = store.list("properties", order_by="name")
    assert [r["name"] for r in rows] == ["Apartment", "Cabin"]
    assert [r["name"] for r in store.list("properties", order_by="-name")] == ["Cabin", "Apartment"]

    assert [r["id"] for r in store.list("properties", {"city": None})] == [b["id"]]

    updated = store.update("properties", a["id"], {"city": "Boone"})
    assert updated["city"] == "Boone"

    assert store.delete("properties", b["id"]) is True
    assert [r["id"] for r in store.list("properties")] == [a["id"]]


def test_rows_are_plain_json_values(app, owner):
    row = store.insert("warranties", {
        "product_name": "Fridge",
        "purchase_date": "2024-02-01",
        "warranty_duration_type": "1_year",
        "warranty_expiration_date": "2025-01-31",
        "cost": "1200.50",
        "attachment_urls": [],
    })
    assert row["purchase_date"] == "2024-02-01"
    assert row["cost"] == 1200.5
    assert isinstance(row["created_at"], str)


def test_update_where_counts_rows(app, owner):
    store.insert("properties", {"name": "A"})
    store.insert("properties", {"name": "B"})
    store.insert("properties", {"name": "C", "city": "Macon"})

    assert store.update_where("properties", {"city": None}, {"city": "Savannah"}) == 2
    assert len(store.list("properties", {"city": "Savannah"})) == 2


def test_unknown_table_and_column(app):
    with pytest.raises(StoreError) as exc:
        store.list("leases")
    assert exc.value.code == "unknown_table"

    with pytest.raises(StoreError) as exc:
        store.insert("properties", {"name": "A", "house_count": 3})
    assert exc.value.code == "unknown_column"
    assert exc.value.context == {"fields": ["house_count"]}


def test_missing_row_is_not_found(app):
    with pytest.raises(StoreError) as exc:
        store.update("properties", "missing", {"name": "x"})
    assert exc.value.code == "not_found"
    assert exc.value.status == 404


def test_password_hash_is_hidden(app, owner):
    rows = store.list("profiles")
    assert rows and "password_hash" not in rows[0]

    with pytest.raises(StoreError):
        store.update("profiles", owner.id, {"password_hash": "x"})


def test_constraint_failure_rolls_back(app):
    with pytest.raises(StoreError) as exc:
        store.insert("properties", {"city": "No Name"})
    assert exc.value.code == "database_error"

    # the session is usable again
    assert store.insert("properties", {"name": "After"})["name"] == "After"


def test_bad_date_value(app):
    with pytest.raises(StoreError) as exc:
        store.list("warranties", {"purchase_date": "yesterday"})
    assert exc.value.code == "invalid_value"
