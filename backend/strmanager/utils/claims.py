from datetime import date, timedelta

PLATFORM_DEADLINES = {
    "airbnb": 14,
    "vrbo": 60,
    "direct_booking": 30,
    "other": 30,
}

PLATFORM_LABELS = {
    "airbnb": "Airbnb AirCover",
    "vrbo": "VRBO",
    "direct_booking": "Direct Booking",
}

URGENT_DAYS = 3


def titleize(value):
    """'filed_with_platform' -> 'Filed With Platform'."""
    return " ".join(w.capitalize() for w in (value or "").replace("_", " ").split())


def claim_deadline_info(report, today=None):
    """
    Filing window for a damage claim, counted from check-out.

    An explicit claim_deadline wins over the platform window. Returns None
    when the report has no check-out date.
    """
    if report.check_out_date is None:
        return None

    today = today or date.today()
    window = PLATFORM_DEADLINES.get(report.booking_platform or "other", 30)
    deadline = report.claim_deadline or (report.check_out_date + timedelta(days=window))
    remaining = (deadline - today).days
    filed = bool(report.claim_status) and report.claim_status != "not_filed"

    return {
        "deadline": deadline.isoformat(),
        "platform_days": window,
        "platform_label": PLATFORM_LABELS.get(report.booking_platform, "Platform"),
        "days_remaining": remaining,
        "is_filed": filed,
        "is_overdue": remaining < 0,
        "is_urgent": 0 <= remaining <= URGENT_DAYS,
    }
