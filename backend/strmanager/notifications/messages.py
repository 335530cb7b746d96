from datetime import date

from flask import render_template

from ..utils.warranty import days_until


def plural(n, one, many):
    return one if n == 1 else many


def normalize_url(url):
    if not url:
        return None
    return url if url.startswith("http") else f"https://{url}"


def invitation_email(invitation, owner_name, invitation_url):
    subject = f"You've been invited to join as {invitation.role}"
    html = render_template(
        "email/invitation.html",
        full_name=invitation.full_name,
        owner_name=owner_name,
        role=invitation.role,
        has_inspection_types=bool((invitation.permissions or {}).get("inspection_type_ids")),
        invitation_url=invitation_url,
    )
    return subject, html


def restock_total(items):
    return sum(i.cost * max(i.restock_level - i.current_stock, i.restock_level) for i in items)


def restock_email(items, today=None):
    today = today or date.today()
    n = len(items)
    rows = [
        {
            "name": i.name,
            "category": i.category,
            "current_stock": i.current_stock,
            "restock_level": i.restock_level,
            "unit": i.unit,
            "supplier": i.supplier,
            "cost": f"{i.cost:.2f}",
            "url": normalize_url(i.supplier_url),
        }
        for i in items
    ]
    ctx = {
        "items": rows,
        "count": n,
        "item_word": plural(n, "item", "items"),
        "verb": plural(n, "has", "have"),
        "total": f"{restock_total(items):.2f}",
        "request_date": today.strftime("%A, %B %d, %Y").replace(" 0", " "),
    }
    subject = f"🏨 Inventory Restock Request - {n} {plural(n, 'Item', 'Items')} Need Restocking"
    html = render_template("email/restock.html", **ctx)
    text = render_template("email/restock.txt", **ctx)
    return subject, html, text


def expiring_rows(warranties, today=None):
    today = today or date.today()
    rows = []
    for w in warranties:
        rows.append({
            "product_name": w.product_name,
            "warranty_expiration_date": w.warranty_expiration_date.isoformat(),
            "vendor": w.vendor,
            "manufacturer": w.manufacturer,
            "cost": float(w.cost) if w.cost is not None else None,
            "property_name": w.property.name if w.property else None,
            "days_until_expiry": max(0, days_until(w.warranty_expiration_date, today)),
        })
    return rows


def warranty_digest_email(rows):
    urgent = [r for r in rows if r["days_until_expiry"] <= 1]
    soon = [r for r in rows if 1 < r["days_until_expiry"] <= 7]
    upcoming = [r for r in rows if r["days_until_expiry"] > 7]

    n = len(rows)
    within_week = len(urgent) + len(soon)
    if within_week:
        subject = f"🚨 {within_week} {plural(within_week, 'Warranty', 'Warranties')} Expiring Soon - Action Required"
    else:
        subject = f"🛡️ {n} {plural(n, 'Warranty', 'Warranties')} Expiring Within 30 Days"

    sections = [
        ("Expiring Today / Tomorrow", "🔴", "#dc2626", urgent),
        ("Expiring Within 7 Days", "🟡", "#d97706", soon),
        ("Expiring Within 30 Days", "🟢", "#059669", upcoming),
    ]
    html = render_template(
        "email/warranty_expiration.html",
        count=n,
        count_word=plural(n, "warranty", "warranties"),
        sections=[s for s in sections if s[3]],
    )
    return subject, html, within_week
