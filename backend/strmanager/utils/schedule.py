import calendar
from datetime import date, timedelta

FREQUENCY_TYPES = (
    "none", "per_visit", "weekly", "monthly", "quarterly",
    "semi-annual", "annually", "yearly", "custom",
)

_MONTHS = {"monthly": 1, "quarterly": 3, "semi-annual": 6, "annually": 12, "yearly": 12}


def add_months(d0: date, months: int) -> date:
    y, m = divmod(d0.month - 1 + months, 12)
    year, month = d0.year + y, m + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(d0.day, last_day))


def next_occurrence(inspection_date: date, frequency_type, frequency_days=None):
    """Next due date for a recurring inspection, or None when it does not recur."""
    if not frequency_type or frequency_type in ("none", "per_visit"):
        return None
    if frequency_type == "weekly":
        return inspection_date + timedelta(days=7)
    if frequency_type in _MONTHS:
        return add_months(inspection_date, _MONTHS[frequency_type])
    if frequency_type == "custom":
        if frequency_days:
            return inspection_date + timedelta(days=int(frequency_days))
        return inspection_date
    return None
