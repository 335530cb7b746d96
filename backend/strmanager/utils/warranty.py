from datetime import date, datetime, timedelta

DURATION_DAYS = {
    "90_days": 90,
    "1_year": 365,
    "2_years": 730,
    "3_years": 1095,
    "5_years": 1825,
    "10_years": 3650,
}

DURATION_LABELS = {
    "90_days": "90 Days",
    "1_year": "1 Year",
    "2_years": "2 Years",
    "3_years": "3 Years",
    "5_years": "5 Years",
    "10_years": "10 Years",
    "custom": "Custom",
}

DURATION_TYPES = tuple(DURATION_LABELS)

STATUS_ACTIVE = "active"
STATUS_EXPIRING_SOON = "expiring-soon"
STATUS_EXPIRED = "expired"

EXPIRING_SOON_DAYS = 30

FILTER_ALL = "all"
FILTER_ACTIVE = "active"
FILTER_EXPIRED = "expired"
FILTERS = (FILTER_ALL, FILTER_ACTIVE, FILTER_EXPIRED)


def to_date(value):
    """Coerce a date, datetime or ISO string into a date; None when that fails."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


def _custom_days(value) -> int:
    try:
        days = int(value)
    except (TypeError, ValueError):
        return 0
    return days if days > 0 else 0


def duration_days(duration_type, custom_days=None) -> int:
    if duration_type == "custom":
        return _custom_days(custom_days)
    return DURATION_DAYS.get(duration_type, 365)


def calc_expiration_date(purchase_date, duration_type, custom_days=None):
    """
    Expiration = purchase date + a fixed number of days for the policy.

    "1 year" is 365 days and "2 years" is 730, whatever the calendar says, so
    a range that spans Feb 29 ends one day short of the anniversary.
    Returns None when the purchase date is missing or unparseable.
    """
    start = to_date(purchase_date)
    if start is None:
        return None
    return start + timedelta(days=duration_days(duration_type, custom_days))


def classify_status(expiration_date, today=None) -> str:
    """Three-way badge status: expired / expiring-soon / active. None for an unreadable date."""
    today = today or date.today()
    exp = to_date(expiration_date)
    if exp is None:
        return None
    if exp < today:
        return STATUS_EXPIRED
    if exp <= today + timedelta(days=EXPIRING_SOON_DAYS):
        return STATUS_EXPIRING_SOON
    return STATUS_ACTIVE


def is_expired(expiration_date, today=None) -> bool:
    today = today or date.today()
    exp = to_date(expiration_date)
    return exp is not None and exp < today


def days_until(expiration_date, today=None) -> int:
    today = today or date.today()
    exp = to_date(expiration_date)
    if exp is None:
        return None
    return (exp - today).days


def assemble_hierarchy(records):
    """
    Group a flat list of warranty dicts into roots with `sub_warranties`.

    One level only: a record whose parent is not a root (a missing parent or
    a grandchild) is dropped from the result without error.
    """
    roots = {}
    children = []

    for rec in records:
        if rec.get("parent_warranty_id"):
            children.append(rec)
        else:
            roots[rec["id"]] = dict(rec, sub_warranties=[])

    for child in children:
        parent = roots.get(child["parent_warranty_id"])
        if parent is not None:
            parent["sub_warranties"].append(child)

    return list(roots.values())


def filter_by_status(items, status, today=None):
    # two-way: "active" keeps everything not yet expired, expiring-soon included
    if status == FILTER_ACTIVE:
        return [w for w in items if not is_expired(w["warranty_expiration_date"], today)]
    if status == FILTER_EXPIRED:
        return [w for w in items if is_expired(w["warranty_expiration_date"], today)]
    return list(items)


def _contains(value, needle):
    return bool(value) and needle in str(value).lower()


def search(items, query):
    q = (query or "").strip().lower()
    if not q:
        return list(items)
    return [
        w for w in items
        if _contains(w.get("product_name"), q)
        or _contains(w.get("vendor"), q)
        or _contains(w.get("manufacturer"), q)
        or _contains(w.get("property_name"), q)
    ]


def sort_for_display(items, today=None):
    return sorted(
        items,
        key=lambda w: (
            is_expired(w["warranty_expiration_date"], today),
            to_date(w["warranty_expiration_date"]) or date.max,
        ),
    )


def present(items, status=FILTER_ALL, query=None, today=None):
    rows = filter_by_status(items, status, today)
    rows = search(rows, query)
    return sort_for_display(rows, today)
